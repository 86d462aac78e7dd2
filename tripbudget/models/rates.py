from __future__ import annotations
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime, timedelta
from typing import Optional, Tuple


class RateCacheEntry(BaseModel):
    base_currency: str
    quote_currency: str
    rate: float = Field(..., gt=0)
    fetched_at: datetime

    @field_validator("base_currency", "quote_currency")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.upper()

    @property
    def pair(self) -> Tuple[str, str]:
        return (self.base_currency, self.quote_currency)

    def is_fresh(self, pair: Tuple[str, str], now: datetime, ttl: timedelta) -> bool:
        """Usable without refetch only for the exact pair within the window."""
        return self.pair == pair and now - self.fetched_at < ttl


class ConversionOut(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    rate: float
    converted_amount: float


class ConverterStateOut(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    exchange_rate: float
    result: float
    is_loading: bool
    last_updated: Optional[datetime] = None
    use_custom_rate: bool
    custom_rate_string: str


class ConverterUpdateIn(BaseModel):
    """Calculator edits; omitted fields keep their current value."""

    amount: Optional[float] = Field(None, ge=0)
    from_currency: Optional[str] = Field(None, min_length=3, max_length=3)
    to_currency: Optional[str] = Field(None, min_length=3, max_length=3)
    use_custom_rate: Optional[bool] = None
    custom_rate_string: Optional[str] = None

    @model_validator(mode="after")
    def at_least_one(self) -> "ConverterUpdateIn":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided for update")
        return self


class ConverterExpenseIn(BaseModel):
    note: Optional[str] = None
