from __future__ import annotations

import datetime as dt
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, computed_field


class DayHistory(BaseModel):
    """One materialized trip day, as rendered on a daily history card."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    day_number: int
    day_spent: float
    # raw source-currency sums, display only
    spent_by_currency: Dict[str, float]
    daily_limit: float
    # carry entering this day
    rollover: float

    @computed_field
    @property
    def available(self) -> float:
        return self.daily_limit + self.rollover

    @computed_field
    @property
    def remaining(self) -> float:
        return self.available - self.day_spent


class BudgetStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_days: int
    daily_base: float
    days_from_start: int
    current_day_num: int
    is_within_trip: bool
    spent_today: float
    spent_before_today: float
    passed_budget_days: int
    should_have_spent_until_yesterday: float
    saved_from_previous_days: float
    available_today: float
    remaining_today: float
    progress: float
    total_spent: float
    total_remaining: float
    history: List[DayHistory]

    def history_newest_first(self) -> List[DayHistory]:
        return list(reversed(self.history))
