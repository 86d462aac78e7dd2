"""Widget timeline entries.

Each entry is a snapshot the widget renders until `next_refresh`; widgets
re-request an entry hourly or when the app signals a reload.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Optional

from tripbudget.services.budget_engine import compute_budget_stats
from tripbudget.services.money import format_amount, format_rate
from tripbudget.services.rates.cache_service import RateCacheService
from tripbudget.services.trips import TripManager
from tripbudget.services.widget import KeypadState

REFRESH_INTERVAL = timedelta(hours=1)


@dataclass(frozen=True)
class WidgetEntry:
    date: datetime
    rate: float
    amount: float
    from_currency: str
    to_currency: str
    next_refresh: datetime

    @property
    def result(self) -> float:
        return self.amount * self.rate

    @property
    def rate_line(self) -> str:
        return f"1 {self.from_currency} ≈ {format_rate(self.rate, 3)} {self.to_currency}"

    def as_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "rate": self.rate,
            "amount": self.amount,
            "result": self.result,
            "from_currency": self.from_currency,
            "to_currency": self.to_currency,
            "amount_text": format_amount(self.amount),
            "result_text": format_amount(self.result),
            "rate_line": self.rate_line,
            "next_refresh": self.next_refresh.isoformat(),
        }


@dataclass(frozen=True)
class BudgetWidgetEntry:
    date: datetime
    is_budget_set: bool
    trip_name: str
    currency: str
    current_day_num: int
    total_days: int
    available_today: float
    remaining_today: float
    progress: float
    next_refresh: datetime

    def as_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "is_budget_set": self.is_budget_set,
            "trip_name": self.trip_name,
            "currency": self.currency,
            "current_day_num": self.current_day_num,
            "total_days": self.total_days,
            "available_today": self.available_today,
            "remaining_today": self.remaining_today,
            "remaining_text": format_amount(self.remaining_today),
            "progress": self.progress,
            "next_refresh": self.next_refresh.isoformat(),
        }


def build_converter_entry(
    rates: RateCacheService,
    keypad: KeypadState,
    from_currency: str,
    to_currency: str,
    now: datetime,
) -> WidgetEntry:
    rate = rates.get_rate(from_currency, to_currency, now=now)
    return WidgetEntry(
        date=now,
        rate=rate,
        amount=keypad.amount,
        from_currency=from_currency.upper(),
        to_currency=to_currency.upper(),
        next_refresh=now + REFRESH_INTERVAL,
    )


def build_budget_entry(
    trips: TripManager, now: datetime, tz: Optional[tzinfo] = None
) -> BudgetWidgetEntry:
    trip = trips.active
    stats = compute_budget_stats(trip, now, tz)
    return BudgetWidgetEntry(
        date=now,
        is_budget_set=trips.is_budget_set,
        trip_name=trip.display_name(trips.untitled_name),
        currency=trip.budget_currency,
        current_day_num=stats.current_day_num,
        total_days=stats.total_days,
        available_today=stats.available_today,
        remaining_today=stats.remaining_today,
        progress=stats.progress,
        next_refresh=now + REFRESH_INTERVAL,
    )
