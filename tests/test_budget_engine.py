from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from conftest import TRIP_END, TRIP_START, at, expense, trip
from tripbudget.services import budget_engine, timeline
from tripbudget.services.budget_engine import (
    compute_budget_stats,
    day_of,
    total_trip_days,
)
from tripbudget.services.rates import cache_service, conversion

DAY = timedelta(days=1)


class TestDailyAllowance:
    def test_unspent_days_roll_into_today(self):
        day3 = TRIP_START + 2 * DAY
        stats = compute_budget_stats(trip(expenses=[expense(day3, 100)]), at(day3), timezone.utc)

        assert stats.daily_base == pytest.approx(100)
        assert [h.day_spent for h in stats.history[:2]] == [0, 0]
        assert stats.history[2].rollover == pytest.approx(200)
        assert stats.available_today == pytest.approx(300)
        assert stats.spent_today == pytest.approx(100)
        assert stats.remaining_today == pytest.approx(200)
        assert stats.total_remaining == pytest.approx(600)
        assert stats.current_day_num == 3
        assert stats.progress == pytest.approx(100 / 300)

    def test_overspend_carries_negative_rollover(self):
        day2 = TRIP_START + DAY
        stats = compute_budget_stats(
            trip(expenses=[expense(TRIP_START, 150)]), at(day2), timezone.utc
        )

        assert stats.history[1].rollover == pytest.approx(-50)
        assert stats.history[1].available == pytest.approx(50)
        assert stats.saved_from_previous_days == pytest.approx(-50)
        assert stats.available_today == pytest.approx(50)

    def test_deep_overspend_is_not_floored(self):
        day2 = TRIP_START + DAY
        stats = compute_budget_stats(
            trip(expenses=[expense(TRIP_START, 400)]), at(day2), timezone.utc
        )
        assert stats.available_today == pytest.approx(-200)
        assert stats.remaining_today == pytest.approx(-200)
        assert stats.progress == 0.0

    def test_before_trip_starts(self):
        stats = compute_budget_stats(trip(), at(TRIP_START - 3 * DAY), timezone.utc)

        assert stats.available_today == 0
        assert stats.progress == 0
        assert stats.history == []
        assert stats.current_day_num == 1
        assert stats.passed_budget_days == 0
        assert not stats.is_within_trip

    def test_after_trip_ends(self):
        stats = compute_budget_stats(
            trip(expenses=[expense(TRIP_START, 50)]), at(TRIP_END + 3 * DAY), timezone.utc
        )

        assert not stats.is_within_trip
        assert stats.available_today == 0
        assert stats.current_day_num == 7
        assert stats.passed_budget_days == 7
        assert len(stats.history) == 7
        assert stats.total_spent == pytest.approx(50)
        assert stats.progress == 0.0

    def test_misdated_expense_today_fills_gauge_outside_trip(self):
        today = TRIP_END + 2 * DAY
        stats = compute_budget_stats(
            trip(expenses=[expense(today, 30)]), at(today), timezone.utc
        )
        assert stats.progress == 1.0
        # outside the trip range, so not part of the trip totals
        assert stats.total_spent == 0

    def test_last_day_gets_all_savings(self):
        stats = compute_budget_stats(trip(), at(TRIP_END), timezone.utc)
        assert stats.available_today == pytest.approx(700)
        assert stats.current_day_num == 7


class TestEdgeCases:
    def test_start_after_end_counts_one_day(self):
        assert total_trip_days(date(2024, 5, 10), date(2024, 5, 1)) == 1
        stats = compute_budget_stats(
            trip(start=date(2024, 5, 10), end=date(2024, 5, 1)),
            at(date(2024, 5, 5)),
            timezone.utc,
        )
        assert stats.total_days == 1
        assert stats.daily_base == pytest.approx(700)
        assert stats.history == []

    def test_zero_budget(self):
        day2 = TRIP_START + DAY
        stats = compute_budget_stats(trip(total=0), at(day2), timezone.utc)
        assert stats.daily_base == 0
        assert stats.available_today == 0
        assert stats.progress == 0.0

        spent = compute_budget_stats(
            trip(total=0, expenses=[expense(day2, 10)]), at(day2), timezone.utc
        )
        assert spent.progress == 1.0
        assert spent.remaining_today == pytest.approx(-10)

    def test_empty_expense_list(self):
        stats = compute_budget_stats(trip(), at(TRIP_START + DAY), timezone.utc, expenses=[])
        assert stats.total_spent == 0
        assert stats.total_remaining == pytest.approx(700)
        assert all(h.day_spent == 0 for h in stats.history)

    def test_per_currency_breakdown_is_display_only(self):
        items = [
            expense(TRIP_START, 12, currency="THB", amount=100),
            expense(TRIP_START, 43, currency="EUR", amount=10, hour=15),
            expense(TRIP_START, 6, currency="THB", amount=50, hour=18),
        ]
        stats = compute_budget_stats(trip(expenses=items), at(TRIP_START), timezone.utc)
        day = stats.history[0]
        assert day.spent_by_currency == {"THB": 150, "EUR": 10}
        assert day.day_spent == pytest.approx(61)

    def test_days_bucket_in_reference_timezone(self):
        warsaw = ZoneInfo("Europe/Warsaw")
        late = expense(TRIP_START, 80, hour=23)  # 01:00 next day in Warsaw
        stats = compute_budget_stats(
            trip(expenses=[late]), at(TRIP_START + DAY), warsaw
        )
        assert stats.history[0].day_spent == 0
        assert stats.spent_today == pytest.approx(80)

    def test_naive_moment_uses_its_own_calendar_day(self):
        assert day_of(datetime(2024, 5, 1, 23, 30), ZoneInfo("Asia/Bangkok")) == date(2024, 5, 1)


class TestProperties:
    DISTRIBUTIONS = [
        [],
        [(0, 20), (1, 300), (3, 5)],
        [(0, 100), (1, 100), (2, 100), (3, 100)],
        [(2, 0.5), (2, 99.5), (4, 250)],
    ]

    def test_daily_base_sums_to_budget(self):
        for total, days in [(700, 7), (1000, 3), (333.33, 9), (1, 1)]:
            stats = compute_budget_stats(
                trip(total=total, end=TRIP_START + (days - 1) * DAY),
                at(TRIP_START),
                timezone.utc,
            )
            assert stats.daily_base * stats.total_days == pytest.approx(total)

    def test_empty_days_carry_full_allowance(self):
        stats = compute_budget_stats(trip(), at(TRIP_END), timezone.utc)
        for prev, nxt in zip(stats.history, stats.history[1:]):
            assert nxt.rollover == pytest.approx(prev.rollover + stats.daily_base)

    @pytest.mark.parametrize("spread", DISTRIBUTIONS)
    def test_shortcut_matches_replayed_rollover(self, spread):
        items = [expense(TRIP_START + offset * DAY, amount) for offset, amount in spread]
        for offset in range(7):
            stats = compute_budget_stats(
                trip(expenses=items), at(TRIP_START + offset * DAY), timezone.utc
            )
            assert stats.saved_from_previous_days == pytest.approx(
                stats.history[-1].rollover
            )
            assert 0.0 <= stats.progress <= 1.0

    def test_idempotent(self):
        t = trip(expenses=[expense(TRIP_START, 42), expense(TRIP_START + DAY, 7)])
        now = at(TRIP_START + 2 * DAY)
        assert compute_budget_stats(t, now, timezone.utc) == compute_budget_stats(
            t, now, timezone.utc
        )

    def test_removed_expense_changes_history(self):
        first = expense(TRIP_START, 60)
        later = expense(TRIP_START + DAY, 10)
        now = at(TRIP_START + 3 * DAY)
        before = compute_budget_stats(trip(expenses=[first, later]), now, timezone.utc)
        after = compute_budget_stats(trip(expenses=[later]), now, timezone.utc)

        assert before.history[0].day_spent == pytest.approx(60)
        assert after.history[0].day_spent == 0
        for b, a in zip(before.history[1:], after.history[1:]):
            assert a.rollover == pytest.approx(b.rollover + 60)

    def test_history_newest_first(self):
        stats = compute_budget_stats(trip(), at(TRIP_START + 2 * DAY), timezone.utc)
        assert [h.day_number for h in stats.history_newest_first()] == [3, 2, 1]

    def test_day_card_serializes_available_and_remaining(self):
        t = trip(expenses=[expense(TRIP_START, 30)])
        stats = compute_budget_stats(t, at(TRIP_START + DAY), timezone.utc)
        card = stats.history[0].model_dump()
        assert card["available"] == pytest.approx(100)
        assert card["remaining"] == pytest.approx(70)


@pytest.mark.parametrize("module", [budget_engine, cache_service, conversion, timeline])
def test_module_docstrings(module):
    assert module.__doc__ and module.__doc__.strip()
