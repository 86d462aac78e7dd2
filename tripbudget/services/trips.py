"""Active trip and archive lifecycle.

Exactly one trip is active: its configuration lives in scalar keys of the
shared store and its expenses in the ledger. Finished trips are frozen
snapshots kept, newest first, in a single archive blob.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional
from uuid import UUID

from tripbudget.core.errors import ArchiveEntryNotFoundError
from tripbudget.db.store import SaveResult, SharedStore
from tripbudget.models.constants import (
    ARCHIVE_KEY,
    TRIP_BUDGET_KEY,
    TRIP_BUDGET_SET_KEY,
    TRIP_CURRENCY_KEY,
    TRIP_END_KEY,
    TRIP_NAME_KEY,
    TRIP_SECONDARY_CURRENCY_KEY,
    TRIP_START_KEY,
)
from tripbudget.models.trip import ArchivedTrip, TripRecord, decode_archive, encode_archive
from tripbudget.services.ledger import ExpenseLedger
from tripbudget.services.widget import WidgetRefreshSignal

logger = logging.getLogger("tripbudget.trips")


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _combine(results: Iterable[SaveResult]) -> SaveResult:
    for r in results:
        if not r.ok:
            return r
    return SaveResult.success()


class TripManager:
    def __init__(
        self,
        store: SharedStore,
        ledger: ExpenseLedger,
        signal: WidgetRefreshSignal,
        untitled_name: str = "Untitled trip",
        default_length_days: int = 7,
        default_currency: str = "PLN",
        default_secondary_currency: str = "THB",
        today: Callable[[], date] = _utc_today,
    ):
        self._store = store
        self._ledger = ledger
        self._signal = signal
        self._untitled_name = untitled_name
        self._default_length = timedelta(days=default_length_days)
        self._default_currency = default_currency
        self._default_secondary_currency = default_secondary_currency
        self._today = today
        self.last_save_result: Optional[SaveResult] = None

    @property
    def ledger(self) -> ExpenseLedger:
        return self._ledger

    @property
    def untitled_name(self) -> str:
        return self._untitled_name

    # ------------------------------------------------------------------
    # Active trip
    @property
    def active(self) -> TripRecord:
        today = self._today()
        return TripRecord(
            name=self._store.get_str(TRIP_NAME_KEY, ""),
            total_budget=self._store.get_float(TRIP_BUDGET_KEY, 0.0),
            budget_currency=self._store.get_str(TRIP_CURRENCY_KEY, self._default_currency),
            secondary_currency=self._store.get_str(
                TRIP_SECONDARY_CURRENCY_KEY, self._default_secondary_currency
            ),
            start_date=self._store.get_date(TRIP_START_KEY, today),
            end_date=self._store.get_date(TRIP_END_KEY, today + self._default_length),
            expenses=self._ledger.expenses,
        )

    @property
    def is_budget_set(self) -> bool:
        return self._store.get_bool(TRIP_BUDGET_SET_KEY, False)

    def save_settings(
        self,
        name: str,
        total_budget: float,
        budget_currency: str,
        secondary_currency: str,
        start_date: date,
        end_date: date,
    ) -> SaveResult:
        """Overwrite the active trip configuration; expenses are untouched."""
        result = _combine(
            [
                self._store.set_str(TRIP_NAME_KEY, name),
                self._store.set_float(TRIP_BUDGET_KEY, total_budget),
                self._store.set_str(TRIP_CURRENCY_KEY, budget_currency.upper()),
                self._store.set_str(
                    TRIP_SECONDARY_CURRENCY_KEY, secondary_currency.upper()
                ),
                self._store.set_date(TRIP_START_KEY, start_date),
                self._store.set_date(TRIP_END_KEY, end_date),
                self._store.set_bool(TRIP_BUDGET_SET_KEY, total_budget > 0),
            ]
        )
        if not result.ok:
            logger.warning("trip settings not fully persisted: %s", result.error)
        self._signal.reload_all_timelines()
        return result

    def finish_active(self, today: Optional[date] = None) -> Optional[ArchivedTrip]:
        """Archive the active trip and reset the slot.

        Returns None if no budget is set, or if the archive could not be
        written; in the latter case the active trip is left untouched and the
        failure is in `last_save_result`.
        """
        self.last_save_result = None
        trip = self.active
        if not trip.is_budget_set:
            return None
        entry = self._snapshot(trip)
        if not self._save_archive([entry] + self.archive).ok:
            return None

        self._reset_active(trip, today)
        logger.info(
            "trip archived with %d expenses",
            len(entry.expenses),
            extra={"trip_id": entry.id},
        )
        return entry

    def _snapshot(self, trip: TripRecord) -> ArchivedTrip:
        return ArchivedTrip(
            name=trip.display_name(self._untitled_name),
            total_budget=trip.total_budget,
            budget_currency=trip.budget_currency,
            secondary_currency=trip.secondary_currency,
            start_date=trip.start_date,
            end_date=trip.end_date,
            expenses=trip.expenses,
        )

    def _reset_active(self, trip: TripRecord, today: Optional[date]) -> None:
        today = today or self._today()
        self.save_settings(
            name="",
            total_budget=0.0,
            budget_currency=trip.budget_currency,
            secondary_currency=trip.secondary_currency,
            start_date=today,
            end_date=today + self._default_length,
        )
        self._ledger.replace_all([])

    # ------------------------------------------------------------------
    # Archive
    @property
    def archive(self) -> List[ArchivedTrip]:
        return self._store.load_decoded(ARCHIVE_KEY, decode_archive, [])

    def get_archived(self, entry_id: UUID) -> Optional[ArchivedTrip]:
        for entry in self.archive:
            if entry.id == entry_id:
                return entry
        return None

    def restore_from_archive(self, entry_id: UUID) -> Optional[TripRecord]:
        """Make an archived trip active again.

        A configured active trip with expenses is archived first. The archive
        blob is rewritten before the active slot is touched; None means that
        write failed and nothing changed.
        """
        self.last_save_result = None
        entry = self.get_archived(entry_id)
        if entry is None:
            raise ArchiveEntryNotFoundError(f"archived trip {entry_id} not found")

        remaining = [e for e in self.archive if e.id != entry_id]
        current = self.active
        if current.is_budget_set and current.expenses:
            remaining = [self._snapshot(current)] + remaining
        if not self._save_archive(remaining).ok:
            return None

        self.save_settings(
            name=entry.name,
            total_budget=entry.total_budget,
            budget_currency=entry.budget_currency,
            secondary_currency=entry.secondary_currency,
            start_date=entry.start_date,
            end_date=entry.end_date,
        )
        self._ledger.replace_all(entry.expenses)
        logger.info("trip restored from archive", extra={"trip_id": entry_id})
        return self.active

    def delete_from_archive(self, ids: Iterable[UUID]) -> SaveResult:
        doomed = set(ids)
        return self._save_archive([e for e in self.archive if e.id not in doomed])

    def _save_archive(self, entries: List[ArchivedTrip]) -> SaveResult:
        result = self._store.save_encoded(ARCHIVE_KEY, lambda: encode_archive(entries))
        self.last_save_result = result
        if not result.ok:
            logger.warning("archive not persisted: %s", result.error)
        return result
