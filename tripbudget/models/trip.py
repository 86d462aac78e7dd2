from __future__ import annotations

from datetime import date
from typing import List
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from .expense import ExpenseRecord, _currency_code


class TripRecord(BaseModel):
    """Budget envelope: total amount, currency pair, date range and expenses."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    total_budget: float = Field(0.0, alias="totalBudget")
    budget_currency: str = Field("PLN", alias="budgetCurrency")
    secondary_currency: str = Field("THB", alias="secondaryCurrency")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    expenses: List[ExpenseRecord] = Field(default_factory=list)

    @field_validator("budget_currency", "secondary_currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return _currency_code(v)

    @property
    def is_budget_set(self) -> bool:
        return self.total_budget > 0

    def display_name(self, fallback: str) -> str:
        return self.name.strip() or fallback


class ArchivedTrip(TripRecord):
    """Immutable snapshot of a finished trip."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: UUID = Field(default_factory=uuid4)


ArchiveList = TypeAdapter(List[ArchivedTrip])


def encode_archive(entries: List[ArchivedTrip]) -> bytes:
    return ArchiveList.dump_json(entries, by_alias=True, exclude_none=True)


def decode_archive(raw: str) -> List[ArchivedTrip]:
    return ArchiveList.validate_json(raw)


class TripSettingsIn(BaseModel):
    name: str = ""
    total_budget: float = Field(..., ge=0)
    budget_currency: str
    secondary_currency: str
    start_date: date
    end_date: date

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return value.strip()

    @field_validator("budget_currency", "secondary_currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return _currency_code(v)

    @model_validator(mode="after")
    def _end_not_before_start(self) -> "TripSettingsIn":
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class TripOut(BaseModel):
    name: str
    display_name: str
    total_budget: float
    budget_currency: str
    secondary_currency: str
    start_date: date
    end_date: date
    is_budget_set: bool
    expense_count: int


class ArchiveIdsIn(BaseModel):
    ids: List[UUID] = Field(..., min_length=1)


class ArchiveSummary(BaseModel):
    id: UUID
    name: str
    total_budget: float
    budget_currency: str
    start_date: date
    end_date: date
    expense_count: int
    total_spent: float
    total_remaining: float
