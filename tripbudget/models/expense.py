from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator


def _currency_code(v: str) -> str:
    code = v.strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValueError("currency must be a 3-letter code")
    return code


class ExpenseRecord(BaseModel):
    """A dated expense kept in both its source and its target currency.

    `converted_amount` is derived from `amount` and the rate at save/edit
    time; it is only ever written through `services.rates.conversion`.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(default_factory=uuid4)
    amount: float
    currency: str
    converted_amount: float = Field(alias="convertedAmount")
    target_currency: str = Field(alias="targetCurrency")
    date: datetime
    note: Optional[str] = None

    @field_validator("currency", "target_currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return _currency_code(v)

    def to_blob_dict(self) -> dict:
        # Absent note is omitted; an empty note is kept.
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


ExpenseList = TypeAdapter(List[ExpenseRecord])


def encode_expenses(expenses: List[ExpenseRecord]) -> bytes:
    return ExpenseList.dump_json(expenses, by_alias=True, exclude_none=True)


def decode_expenses(raw: str) -> List[ExpenseRecord]:
    return ExpenseList.validate_json(raw)


class ExpenseIn(BaseModel):
    amount: float = Field(..., gt=0)
    currency: str
    target_currency: str
    date: Optional[datetime] = None
    note: Optional[str] = None

    @field_validator("currency", "target_currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return _currency_code(v)


class ExpenseUpdateIn(BaseModel):
    """Partial update model.

    All fields optional; at least one must be provided. Changing the amount
    or either currency triggers a rate lookup and a fresh converted amount.
    """

    amount: Optional[float] = Field(None, gt=0)
    currency: Optional[str] = None
    target_currency: Optional[str] = None
    date: Optional[datetime] = None
    note: Optional[str] = None

    @field_validator("currency", "target_currency")
    @classmethod
    def valid_currency(cls, v: Optional[str]) -> Optional[str]:
        return _currency_code(v) if v is not None else None

    @model_validator(mode="after")
    def at_least_one(self) -> "ExpenseUpdateIn":
        if not any(
            getattr(self, f) is not None
            for f in ["amount", "currency", "target_currency", "date", "note"]
        ):
            raise ValueError("at least one field must be provided for update")
        return self


class ExpenseBulkDeleteIn(BaseModel):
    ids: List[UUID] = Field(..., min_length=1)
