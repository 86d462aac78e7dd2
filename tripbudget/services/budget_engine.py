"""Trip budget accounting (daily allowance with rollover).

Scopes implemented:
    - Flat daily base: total budget spread evenly over the inclusive trip days.
    - History: a forward pass from day 1 through min(today, end) carrying the
      unspent (or overspent) allowance into the next day.
    - Today's figures: derived directly from "should have spent so far" minus
      "spent before today"; agrees with the history carry by construction.

Design notes:
    Pure function of (trip, expenses, now). All dates are bucketed by the
    calendar day of one reference timezone; naive datetimes are taken to be
    in that timezone already. Negative carries are not floored.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from tripbudget.models.budget import BudgetStats, DayHistory
from tripbudget.models.expense import ExpenseRecord
from tripbudget.models.trip import TripRecord


def day_of(moment: datetime, tz: Optional[tzinfo]) -> date:
    if tz is None or moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def total_trip_days(start: date, end: date) -> int:
    """Inclusive day count, never below 1 (covers start > end too)."""
    return max(1, (end - start).days + 1)


def _sum_converted(expenses: Iterable[ExpenseRecord]) -> float:
    return sum(e.converted_amount for e in expenses)


def _spent_by_currency(expenses: Iterable[ExpenseRecord]) -> Dict[str, float]:
    totals: Dict[str, float] = defaultdict(float)
    for e in expenses:
        totals[e.currency] += e.amount
    return dict(totals)


def build_history(
    start: date,
    end: date,
    today: date,
    daily_base: float,
    by_day: Dict[date, List[ExpenseRecord]],
) -> List[DayHistory]:
    """Replay trip days in order; each entry records its incoming rollover."""
    history: List[DayHistory] = []
    last_day = min(today, end)
    rollover = 0.0
    day = start
    day_number = 1
    while day <= last_day:
        day_expenses = by_day.get(day, [])
        day_spent = _sum_converted(day_expenses)
        history.append(
            DayHistory(
                date=day,
                day_number=day_number,
                day_spent=day_spent,
                spent_by_currency=_spent_by_currency(day_expenses),
                daily_limit=daily_base,
                rollover=rollover,
            )
        )
        rollover = daily_base + rollover - day_spent
        day += timedelta(days=1)
        day_number += 1
    return history


def compute_budget_stats(
    trip: TripRecord,
    now: datetime,
    tz: Optional[tzinfo] = None,
    expenses: Optional[Sequence[ExpenseRecord]] = None,
) -> BudgetStats:
    """Compute the budget snapshot for `trip` as seen at `now`.

    `expenses` defaults to the trip's own expense list.
    """
    all_expenses = list(trip.expenses if expenses is None else expenses)
    start = trip.start_date
    end = trip.end_date
    today = day_of(now, tz)

    total_days = total_trip_days(start, end)
    daily_base = trip.total_budget / total_days
    days_from_start = (today - start).days
    current_day_num = min(max(days_from_start + 1, 1), total_days)
    is_within_trip = start <= today <= end

    by_day: Dict[date, List[ExpenseRecord]] = defaultdict(list)
    trip_expenses: List[ExpenseRecord] = []
    spent_on_today_any = 0.0
    for e in all_expenses:
        d = day_of(e.date, tz)
        if d == today:
            spent_on_today_any += e.converted_amount
        if start <= d <= end:
            trip_expenses.append(e)
            by_day[d].append(e)

    history = build_history(start, end, today, daily_base, by_day)

    spent_today = _sum_converted(by_day.get(today, [])) if is_within_trip else 0.0
    spent_before_today = _sum_converted(
        e for e in trip_expenses if day_of(e.date, tz) < today
    )
    passed_budget_days = min(max(days_from_start, 0), total_days)
    should_have_spent = daily_base * passed_budget_days
    saved_from_previous_days = should_have_spent - spent_before_today
    available_today = daily_base + saved_from_previous_days if is_within_trip else 0.0
    remaining_today = available_today - spent_today

    # Outside the trip range only an expense dated today (mis-dated for the
    # trip) can push the gauge to full.
    spent_for_progress = spent_today if is_within_trip else spent_on_today_any
    if available_today > 0:
        progress = spent_for_progress / available_today
    else:
        progress = 1.0 if spent_for_progress > 0 else 0.0
    progress = min(max(progress, 0.0), 1.0)

    total_spent = _sum_converted(trip_expenses)
    return BudgetStats(
        total_days=total_days,
        daily_base=daily_base,
        days_from_start=days_from_start,
        current_day_num=current_day_num,
        is_within_trip=is_within_trip,
        spent_today=spent_today,
        spent_before_today=spent_before_today,
        passed_budget_days=passed_budget_days,
        should_have_spent_until_yesterday=should_have_spent,
        saved_from_previous_days=saved_from_previous_days,
        available_today=available_today,
        remaining_today=remaining_today,
        progress=progress,
        total_spent=total_spent,
        total_remaining=trip.total_budget - total_spent,
        history=history,
    )
