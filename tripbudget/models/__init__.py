"""Pydantic domain models for the trip budget converter."""

from .constants import CURRENCIES  # re-export
from .expense import ExpenseIn, ExpenseRecord, ExpenseUpdateIn
from .trip import ArchivedTrip, TripRecord, TripSettingsIn
from .budget import BudgetStats, DayHistory
from .rates import RateCacheEntry

__all__ = [
    "CURRENCIES",
    "ExpenseIn",
    "ExpenseRecord",
    "ExpenseUpdateIn",
    "ArchivedTrip",
    "TripRecord",
    "TripSettingsIn",
    "BudgetStats",
    "DayHistory",
    "RateCacheEntry",
]
