"""Expense ledger for the active trip.

Responsibilities
----------------
- Keep the in-memory list of expenses ordered by date, newest first.
- Persist the whole list as one blob after every mutation and signal the
  widgets to refresh.
- Derive `converted_amount` only through `compute_conversion`, re-running it
  whenever the amount or either currency of an expense changes.

Storage failures never raise: the in-memory list stays authoritative and the
outcome is returned as a `SaveResult` (also kept in `last_save_result`).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Iterable, List, Optional
from uuid import UUID

from tripbudget.core.errors import (
    ExpenseNotFoundError,
    InvalidExpenseError,
    RateLookupError,
)
from tripbudget.db.store import SaveResult, SharedStore
from tripbudget.models.constants import EXPENSES_KEY
from tripbudget.models.expense import ExpenseRecord, decode_expenses, encode_expenses
from tripbudget.services.rates.base import SupportsRateLookup
from tripbudget.services.rates.conversion import compute_conversion
from tripbudget.services.widget import WidgetRefreshSignal

logger = logging.getLogger("tripbudget.ledger")

_UNSET = object()


def _sorted_newest_first(expenses: Iterable[ExpenseRecord]) -> List[ExpenseRecord]:
    return sorted(expenses, key=lambda e: e.date, reverse=True)


class ExpenseLedger:
    def __init__(
        self,
        store: SharedStore,
        signal: WidgetRefreshSignal,
        tz: tzinfo = timezone.utc,
    ):
        self._store = store
        self._signal = signal
        self._tz = tz
        self._expenses: List[ExpenseRecord] = []
        self.last_save_result: Optional[SaveResult] = None
        self.load()

    # ------------------------------------------------------------------
    # Reads
    @property
    def expenses(self) -> List[ExpenseRecord]:
        return list(self._expenses)

    def get(self, expense_id: UUID) -> Optional[ExpenseRecord]:
        for e in self._expenses:
            if e.id == expense_id:
                return e
        return None

    def require(self, expense_id: UUID) -> ExpenseRecord:
        record = self.get(expense_id)
        if record is None:
            raise ExpenseNotFoundError("expense not found")
        return record

    def load(self) -> None:
        loaded = self._store.load_decoded(EXPENSES_KEY, decode_expenses, [])
        self._expenses = _sorted_newest_first(self._normalize(e) for e in loaded)

    # ------------------------------------------------------------------
    # Mutations
    def add(self, record: ExpenseRecord) -> SaveResult:
        if not record.amount > 0:
            raise InvalidExpenseError("expense amount must be greater than zero")
        self._expenses.append(self._normalize(record))
        self._expenses = _sorted_newest_first(self._expenses)
        return self._commit()

    def update(self, record: ExpenseRecord) -> Optional[SaveResult]:
        """Replace the expense with the same id; None when there is none."""
        for index, existing in enumerate(self._expenses):
            if existing.id == record.id:
                self._expenses[index] = self._normalize(record)
                self._expenses = _sorted_newest_first(self._expenses)
                return self._commit()
        return None

    def delete(self, ids: Iterable[UUID]) -> SaveResult:
        doomed = set(ids)
        self._expenses = [e for e in self._expenses if e.id not in doomed]
        return self._commit()

    def replace_all(self, records: Iterable[ExpenseRecord]) -> SaveResult:
        self._expenses = _sorted_newest_first(self._normalize(e) for e in records)
        return self._commit()

    def record_conversion(
        self,
        amount: float,
        currency: str,
        target_currency: str,
        rates: SupportsRateLookup,
        date: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> ExpenseRecord:
        """Commit a calculator amount as a new expense."""
        if not amount > 0:
            raise InvalidExpenseError("expense amount must be greater than zero")
        conversion = self._convert(amount, currency, target_currency, rates)
        record = ExpenseRecord(
            amount=amount,
            currency=conversion.from_currency,
            converted_amount=conversion.converted_amount,
            target_currency=conversion.to_currency,
            date=date or datetime.now(self._tz),
            note=note,
        )
        self.add(record)
        logger.info(
            "expense recorded: %s %s -> %.2f %s",
            amount,
            conversion.from_currency,
            conversion.converted_amount,
            conversion.to_currency,
            extra={"expense_id": record.id},
        )
        return record

    def edit(
        self,
        expense_id: UUID,
        rates: SupportsRateLookup,
        amount: Optional[float] = None,
        currency: Optional[str] = None,
        target_currency: Optional[str] = None,
        date: Optional[datetime] = None,
        note=_UNSET,
    ) -> ExpenseRecord:
        """Apply field edits; `ExpenseNotFoundError` for an unknown id."""
        existing = self.require(expense_id)
        if amount is not None and not amount > 0:
            raise InvalidExpenseError("expense amount must be greater than zero")
        changes = {}
        new_amount = amount if amount is not None else existing.amount
        new_currency = (currency or existing.currency).upper()
        new_target = (target_currency or existing.target_currency).upper()
        if (
            new_amount != existing.amount
            or new_currency != existing.currency
            or new_target != existing.target_currency
        ):
            conversion = self._convert(new_amount, new_currency, new_target, rates)
            changes.update(
                amount=new_amount,
                currency=conversion.from_currency,
                target_currency=conversion.to_currency,
                converted_amount=conversion.converted_amount,
            )
        if date is not None:
            changes["date"] = date
        if note is not _UNSET:
            changes["note"] = note
        updated = existing.model_copy(update=changes)
        self.update(updated)
        return self.require(expense_id)

    # ------------------------------------------------------------------
    # Internal helpers
    def _convert(self, amount, currency, target_currency, rates):
        conversion = compute_conversion(amount, currency, target_currency, rates)
        if conversion.rate <= 0:
            raise RateLookupError(
                f"no exchange rate available for {conversion.from_currency}->{conversion.to_currency}"
            )
        return conversion

    def _normalize(self, record: ExpenseRecord) -> ExpenseRecord:
        if record.date.tzinfo is None:
            return record.model_copy(update={"date": record.date.replace(tzinfo=self._tz)})
        return record

    def _commit(self) -> SaveResult:
        result = self._store.save_encoded(
            EXPENSES_KEY, lambda: encode_expenses(self._expenses)
        )
        self.last_save_result = result
        if not result.ok:
            # widgets would only re-read the stale blob
            logger.warning("expenses not persisted: %s", result.error)
            return result
        self._signal.reload_all_timelines()
        return result
