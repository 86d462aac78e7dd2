from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response

from tripbudget.dependencies import AppServices, get_services, get_trips
from tripbudget.models.trip import ArchiveIdsIn, ArchiveSummary, ArchivedTrip
from tripbudget.services.trips import TripManager

router = APIRouter(prefix="/archive", tags=["archive"])


def _summary(entry: ArchivedTrip) -> ArchiveSummary:
    spent = sum(e.converted_amount for e in entry.expenses)
    return ArchiveSummary(
        id=entry.id,
        name=entry.name,
        total_budget=entry.total_budget,
        budget_currency=entry.budget_currency,
        start_date=entry.start_date,
        end_date=entry.end_date,
        expense_count=len(entry.expenses),
        total_spent=spent,
        total_remaining=entry.total_budget - spent,
    )


@router.get("/", response_model=List[ArchiveSummary], summary="List archived trips")
async def list_archive(trips: TripManager = Depends(get_trips)):
    return [_summary(e) for e in trips.archive]


@router.get("/{entry_id}", response_model=ArchivedTrip, summary="Archived trip details")
async def get_archived_trip(entry_id: UUID, trips: TripManager = Depends(get_trips)):
    entry = trips.get_archived(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="archived trip not found")
    return entry


@router.post("/{entry_id}/restore", summary="Make an archived trip active again")
async def restore_archived_trip(
    entry_id: UUID, services: AppServices = Depends(get_services)
):
    trip = services.trips.restore_from_archive(entry_id)
    if trip is None:
        raise HTTPException(
            status_code=503,
            detail=f"archive not saved: {services.trips.last_save_result.error}",
        )
    return {
        "status": "restored",
        "name": trip.display_name(services.trips.untitled_name),
        "expense_count": len(trip.expenses),
    }


@router.delete("/{entry_id}", status_code=204, summary="Delete an archived trip")
async def delete_archived_trip(entry_id: UUID, trips: TripManager = Depends(get_trips)):
    if trips.get_archived(entry_id) is None:
        raise HTTPException(status_code=404, detail="archived trip not found")
    trips.delete_from_archive([entry_id])
    return Response(status_code=204)


@router.post("/bulk-delete", summary="Delete several archived trips")
async def bulk_delete_archive(
    payload: ArchiveIdsIn, trips: TripManager = Depends(get_trips)
):
    before = len(trips.archive)
    result = trips.delete_from_archive(payload.ids)
    return {"deleted": before - len(trips.archive), "persisted": result.ok}
