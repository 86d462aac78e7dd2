from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from tripbudget.dependencies import AppServices, get_ledger, get_rates, get_services
from tripbudget.models.expense import (
    ExpenseBulkDeleteIn,
    ExpenseIn,
    ExpenseRecord,
    ExpenseUpdateIn,
)
from tripbudget.services.budget_engine import day_of
from tripbudget.services.ledger import ExpenseLedger
from tripbudget.services.rates.cache_service import RateCacheService

router = APIRouter(prefix="/expenses", tags=["expenses"])


# Routes -----------------------------------------------------------
# Handlers that may hit the rate provider are plain functions so FastAPI runs
# them in its threadpool instead of blocking the event loop.
@router.post(
    "/", response_model=ExpenseRecord, status_code=201, summary="Create an expense"
)
def create_expense(
    payload: ExpenseIn,
    services: AppServices = Depends(get_services),
    rates: RateCacheService = Depends(get_rates),
):
    record = services.ledger.record_conversion(
        amount=payload.amount,
        currency=payload.currency,
        target_currency=payload.target_currency,
        rates=rates,
        date=payload.date or services.now(),
        note=payload.note,
    )
    return record


@router.get(
    "/", response_model=List[ExpenseRecord], summary="List expenses, newest first"
)
async def list_expenses_endpoint(
    start_date: Optional[date] = Query(
        None, description="Filter: start date inclusive"
    ),
    end_date: Optional[date] = Query(None, description="Filter: end date inclusive"),
    currency: Optional[str] = Query(None, description="Filter by source currency"),
    services: AppServices = Depends(get_services),
):
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=400, detail="start_date cannot be after end_date"
        )
    rows = services.ledger.expenses
    if start_date:
        rows = [e for e in rows if day_of(e.date, services.tz) >= start_date]
    if end_date:
        rows = [e for e in rows if day_of(e.date, services.tz) <= end_date]
    if currency:
        rows = [e for e in rows if e.currency == currency.upper()]
    return rows


@router.get("/{expense_id}", response_model=ExpenseRecord, summary="Get an expense")
async def get_expense(expense_id: UUID, ledger: ExpenseLedger = Depends(get_ledger)):
    return ledger.require(expense_id)


@router.patch(
    "/{expense_id}", response_model=ExpenseRecord, summary="Edit an expense (partial)"
)
def patch_expense(
    expense_id: UUID,
    payload: ExpenseUpdateIn,
    ledger: ExpenseLedger = Depends(get_ledger),
    rates: RateCacheService = Depends(get_rates),
):
    extra = {"note": payload.note} if "note" in payload.model_fields_set else {}
    return ledger.edit(
        expense_id,
        rates,
        amount=payload.amount,
        currency=payload.currency,
        target_currency=payload.target_currency,
        date=payload.date,
        **extra,
    )


@router.delete("/{expense_id}", status_code=204, summary="Delete an expense")
async def delete_expense(expense_id: UUID, ledger: ExpenseLedger = Depends(get_ledger)):
    ledger.require(expense_id)
    ledger.delete([expense_id])
    return Response(status_code=204)


@router.post("/bulk-delete", summary="Delete several expenses")
async def bulk_delete_expenses(
    payload: ExpenseBulkDeleteIn, ledger: ExpenseLedger = Depends(get_ledger)
):
    before = len(ledger.expenses)
    result = ledger.delete(payload.ids)
    return {"deleted": before - len(ledger.expenses), "persisted": result.ok}
