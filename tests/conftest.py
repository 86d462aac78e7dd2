from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient

from tripbudget.core.config import Settings
from tripbudget.core.errors import RateLookupError
from tripbudget.db.store import SharedStore
from tripbudget.main import create_app
from tripbudget.models.expense import ExpenseRecord
from tripbudget.models.trip import TripRecord
from tripbudget.services.ledger import ExpenseLedger
from tripbudget.services.rates.providers import StaticRateProvider
from tripbudget.services.widget import NullRefreshSignal

TRIP_START = date(2024, 5, 1)
TRIP_END = date(2024, 5, 7)


def at(day: date, hour: int = 12) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


def expense(day: date, converted: float, currency: str = "THB", amount=None, hour=12):
    return ExpenseRecord(
        amount=amount if amount is not None else converted,
        currency=currency,
        converted_amount=converted,
        target_currency="PLN",
        date=at(day, hour),
    )


def trip(total=700.0, start=TRIP_START, end=TRIP_END, expenses=()):
    return TripRecord(
        name="Bangkok",
        total_budget=total,
        budget_currency="PLN",
        secondary_currency="THB",
        start_date=start,
        end_date=end,
        expenses=list(expenses),
    )


class FakeProvider:
    """Rate provider double with a scripted answer or failure."""

    def __init__(self, rate: float = 0.25, fail: bool = False):
        self.rate = rate
        self.fail = fail
        self.calls = []

    def get_rate(self, from_currency: str, to_currency: str) -> float:
        self.calls.append((from_currency, to_currency))
        if self.fail:
            raise RateLookupError("provider down")
        return self.rate


@pytest.fixture
def store(tmp_path) -> SharedStore:
    return SharedStore(tmp_path / "shared.sqlite3")


@pytest.fixture
def signal() -> NullRefreshSignal:
    return NullRefreshSignal()


@pytest.fixture
def ledger(store, signal) -> ExpenseLedger:
    return ExpenseLedger(store, signal)


@pytest.fixture
def static_provider() -> StaticRateProvider:
    return StaticRateProvider()


@pytest.fixture
def settings(tmp_path) -> Settings:
    s = Settings(
        data_dir=tmp_path / "data",
        exchange_rate_provider="static",
        timezone="UTC",
        language="en",
    )
    s.init_post_load()
    return s


@pytest.fixture
def client(settings):
    app = create_app(settings_override=settings)
    with TestClient(app) as c:
        yield c
