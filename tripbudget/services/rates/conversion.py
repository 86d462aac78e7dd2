"""Converted-amount utility.

The single place where an expense's converted amount is derived from its
source amount and a looked-up rate. Same-currency pairs convert 1:1 without
touching the rate service.
"""

from __future__ import annotations

from dataclasses import dataclass

from .base import SupportsRateLookup


@dataclass(frozen=True)
class ConversionResult:
    original_amount: float
    from_currency: str
    to_currency: str
    rate: float
    converted_amount: float


def compute_conversion(
    amount: float, from_currency: str, to_currency: str, rate_service: SupportsRateLookup
) -> ConversionResult:
    from_currency = from_currency.upper()
    to_currency = to_currency.upper()
    if from_currency == to_currency:
        rate = 1.0
    else:
        rate = rate_service.get_rate(from_currency, to_currency)
    return ConversionResult(
        original_amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        rate=rate,
        converted_amount=amount * rate,
    )
