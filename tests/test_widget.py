from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import TRIP_END, TRIP_START, FakeProvider, at, expense
from tripbudget.services.rates.cache_service import POLICY_TTL, RateCacheService
from tripbudget.services.timeline import (
    REFRESH_INTERVAL,
    build_budget_entry,
    build_converter_entry,
)
from tripbudget.services.trips import TripManager
from tripbudget.services.widget import KeypadState, StoreRefreshSignal


def test_keypad_amount_persists(store):
    keypad = KeypadState(store)
    for digit in (4, 2):
        keypad.type_digit(digit)
    assert KeypadState(store).amount == 42
    assert keypad.clear() == 0.0
    assert keypad.amount == 0.0


def test_store_signal_stamps_reload(store):
    stamp = datetime(2024, 5, 1, 9, tzinfo=timezone.utc)
    signal = StoreRefreshSignal(store, clock=lambda: stamp)
    assert signal.last_requested_at() is None
    signal.reload_all_timelines()
    assert signal.last_requested_at() == stamp


def test_converter_entry(store):
    keypad = KeypadState(store)
    keypad.type_digit(5)
    keypad.type_digit(0)
    rates = RateCacheService(store, FakeProvider(rate=0.12), policy=POLICY_TTL)
    now = at(TRIP_START)

    entry = build_converter_entry(rates, keypad, "thb", "pln", now)

    assert entry.result == pytest.approx(6)
    assert entry.next_refresh == now + REFRESH_INTERVAL
    data = entry.as_dict()
    assert data["from_currency"] == "THB"
    assert data["rate_line"] == "1 THB ≈ 0.120 PLN"
    assert data["result_text"] == "6"


def test_budget_entry(store, ledger, signal):
    trips = TripManager(store, ledger, signal, today=lambda: TRIP_START)
    trips.save_settings("Bangkok", 700, "PLN", "THB", TRIP_START, TRIP_END)
    ledger.add(expense(TRIP_START + timedelta(days=1), 50))

    entry = build_budget_entry(trips, at(TRIP_START + timedelta(days=1)), timezone.utc)

    assert entry.is_budget_set
    assert entry.trip_name == "Bangkok"
    assert entry.current_day_num == 2
    assert entry.total_days == 7
    assert entry.available_today == pytest.approx(200)
    assert entry.remaining_today == pytest.approx(150)
    assert entry.as_dict()["remaining_text"] == "150"
