"""Converter router: the calculator screen's session.

A single session lives for the whole process. Refreshes overlapping one in
flight are dropped and reported with `refreshed: false`.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tripbudget.dependencies import AppServices, get_services
from tripbudget.dependencies import get_converter as converter_session
from tripbudget.models.expense import ExpenseRecord
from tripbudget.models.rates import (
    ConverterExpenseIn,
    ConverterStateOut,
    ConverterUpdateIn,
)
from tripbudget.services.converter import ConverterSession

router = APIRouter(prefix="/converter", tags=["converter"])


def _state(session: ConverterSession) -> ConverterStateOut:
    return ConverterStateOut(
        amount=session.amount,
        from_currency=session.from_currency,
        to_currency=session.to_currency,
        exchange_rate=session.exchange_rate,
        result=session.result,
        is_loading=session.is_loading,
        last_updated=session.last_updated,
        use_custom_rate=session.use_custom_rate,
        custom_rate_string=session.custom_rate_string,
    )


@router.get("/", response_model=ConverterStateOut, summary="Current calculator state")
async def get_converter(session: ConverterSession = Depends(converter_session)):
    return _state(session)


@router.patch("/", response_model=ConverterStateOut, summary="Edit the calculator")
async def update_converter(
    payload: ConverterUpdateIn, session: ConverterSession = Depends(converter_session)
):
    if payload.from_currency or payload.to_currency:
        session.set_currencies(
            payload.from_currency or session.from_currency,
            payload.to_currency or session.to_currency,
        )
    if payload.use_custom_rate is not None:
        session.use_custom_rate = payload.use_custom_rate
    if payload.custom_rate_string is not None:
        session.custom_rate_string = payload.custom_rate_string
    if payload.amount is not None:
        session.amount = payload.amount
    session.calculate_result()
    return _state(session)


@router.post("/swap", response_model=ConverterStateOut, summary="Swap the currencies")
async def swap_converter(session: ConverterSession = Depends(converter_session)):
    session.swap_currencies()
    return _state(session)


@router.post("/refresh", summary="Fetch the rate for the current pair")
async def refresh_converter(session: ConverterSession = Depends(converter_session)):
    refreshed = await session.refresh_rate()
    return {"refreshed": refreshed, "state": _state(session)}


# Records through the rate provider, so it runs in the threadpool.
@router.post(
    "/expense",
    response_model=ExpenseRecord,
    status_code=201,
    summary="Save the calculator amount as an expense",
)
def add_converter_expense(
    payload: ConverterExpenseIn, services: AppServices = Depends(get_services)
):
    session = services.converter
    return services.ledger.record_conversion(
        amount=session.amount,
        currency=session.from_currency,
        target_currency=session.to_currency,
        rates=services.rates,
        date=services.now(),
        note=payload.note,
    )
