from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query

from tripbudget.dependencies import AppServices, get_services
from tripbudget.services.timeline import build_budget_entry, build_converter_entry

router = APIRouter(prefix="/widget", tags=["widget"])


@router.get("/converter", summary="Converter widget timeline entry")
def converter_entry(
    from_currency: str | None = Query(None, alias="from"),
    to_currency: str | None = Query(None, alias="to"),
    services: AppServices = Depends(get_services),
):
    settings = services.settings
    entry = build_converter_entry(
        services.widget_rates,
        services.keypad,
        from_currency or settings.default_from_currency,
        to_currency or settings.default_to_currency,
        services.now(),
    )
    return entry.as_dict()


@router.get("/budget", summary="Budget widget timeline entry")
async def budget_entry(services: AppServices = Depends(get_services)):
    entry = build_budget_entry(services.trips, services.now(), services.tz)
    return entry.as_dict()


@router.post("/keypad/{digit}", summary="Type a digit on the widget keypad")
async def keypad_digit(
    digit: int = Path(..., ge=0, le=9), services: AppServices = Depends(get_services)
):
    amount = services.keypad.type_digit(digit)
    services.signal.reload_all_timelines()
    return {"amount": amount}


@router.delete("/keypad", summary="Clear the widget keypad")
async def keypad_clear(services: AppServices = Depends(get_services)):
    amount = services.keypad.clear()
    services.signal.reload_all_timelines()
    return {"amount": amount}


@router.get("/reload", summary="When widgets were last asked to re-render")
async def last_reload(services: AppServices = Depends(get_services)):
    stamp = services.signal.last_requested_at()
    return {"requested_at": stamp.isoformat() if stamp else None}
