from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from tripbudget.dependencies import AppServices, get_services
from tripbudget.models.budget import BudgetStats, DayHistory
from tripbudget.models.trip import ArchivedTrip, TripOut, TripRecord, TripSettingsIn
from tripbudget.services.budget_engine import compute_budget_stats

router = APIRouter(prefix="/trip", tags=["trip"])


def _trip_out(trip: TripRecord, untitled: str) -> TripOut:
    return TripOut(
        name=trip.name,
        display_name=trip.display_name(untitled),
        total_budget=trip.total_budget,
        budget_currency=trip.budget_currency,
        secondary_currency=trip.secondary_currency,
        start_date=trip.start_date,
        end_date=trip.end_date,
        is_budget_set=trip.is_budget_set,
        expense_count=len(trip.expenses),
    )


def _resolve_now(services: AppServices, now: Optional[datetime]) -> datetime:
    if now is None:
        return services.now()
    if now.tzinfo is None:
        return now.replace(tzinfo=services.tz)
    return now


@router.get("/", response_model=TripOut, summary="Get the active trip")
async def get_active_trip(services: AppServices = Depends(get_services)):
    return _trip_out(services.trips.active, services.trips.untitled_name)


@router.put("/settings", response_model=TripOut, summary="Configure the active trip")
async def save_trip_settings(
    payload: TripSettingsIn, services: AppServices = Depends(get_services)
):
    services.trips.save_settings(
        name=payload.name,
        total_budget=payload.total_budget,
        budget_currency=payload.budget_currency,
        secondary_currency=payload.secondary_currency,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    return _trip_out(services.trips.active, services.trips.untitled_name)


@router.post("/finish", summary="Archive the active trip and start a fresh one")
async def finish_trip(services: AppServices = Depends(get_services)):
    trips = services.trips
    entry: Optional[ArchivedTrip] = trips.finish_active(services.now().date())
    if entry is None:
        if trips.last_save_result is not None and not trips.last_save_result.ok:
            raise HTTPException(
                status_code=503,
                detail=f"archive not saved: {trips.last_save_result.error}",
            )
        return {"status": "skipped", "reason": "no budget set"}
    return {"status": "archived", "id": str(entry.id), "name": entry.name}


@router.get("/stats", response_model=BudgetStats, summary="Budget figures for today")
async def get_trip_stats(
    now: Optional[datetime] = Query(
        None, description="Reference instant (defaults to the current time)"
    ),
    services: AppServices = Depends(get_services),
):
    return compute_budget_stats(
        services.trips.active, _resolve_now(services, now), services.tz
    )


@router.get(
    "/history", response_model=List[DayHistory], summary="Daily history cards, newest first"
)
async def get_trip_history(
    now: Optional[datetime] = Query(None),
    services: AppServices = Depends(get_services),
):
    stats = compute_budget_stats(
        services.trips.active, _resolve_now(services, now), services.tz
    )
    return stats.history_newest_first()
