"""Rates router: live lookups through the app's rate cache.

The lookup endpoints may reach the external provider, so they are plain functions
and run in the threadpool. A rate of 0 means the lookup failed and no cached
rate for the pair was available.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from tripbudget.dependencies import get_rates
from tripbudget.models.constants import CURRENCIES
from tripbudget.models.rates import ConversionOut
from tripbudget.services.money import round2
from tripbudget.services.rates.cache_service import RateCacheService
from tripbudget.services.rates.conversion import compute_conversion

router = APIRouter(prefix="/rates", tags=["rates"])


@router.get("/currencies", summary="Currencies offered in the pickers")
async def list_currencies():
    return CURRENCIES


@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
def convert_amount(
    amount: float = Query(..., ge=0),
    from_currency: str = Query(..., alias="from", min_length=3, max_length=3),
    to_currency: str = Query(..., alias="to", min_length=3, max_length=3),
    svc: RateCacheService = Depends(get_rates),
):
    result = compute_conversion(amount, from_currency, to_currency, svc)
    return ConversionOut(
        amount=result.original_amount,
        from_currency=result.from_currency,
        to_currency=result.to_currency,
        rate=result.rate,
        converted_amount=round2(result.converted_amount),
    )


@router.get("/{from_currency}/{to_currency}", summary="Rate for a currency pair")
def get_pair_rate(
    from_currency: str, to_currency: str, svc: RateCacheService = Depends(get_rates)
):
    rate = svc.get_rate(from_currency, to_currency)
    entry = svc.last_entry()
    fetched_at = None
    if entry is not None and entry.pair == (from_currency.upper(), to_currency.upper()):
        fetched_at = entry.fetched_at.isoformat()
    return {
        "from_currency": from_currency.upper(),
        "to_currency": to_currency.upper(),
        "rate": rate,
        "available": rate > 0,
        "fetched_at": fetched_at,
    }
