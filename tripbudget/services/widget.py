"""Widget-side collaborators: the refresh signal and the keypad amount.

The refresh signal is fire-and-forget: after any ledger or trip mutation the
app asks the platform to re-render widgets. Here that means stamping
`widgetReloadRequestedAt` in the shared store, which widget processes poll.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Protocol

from tripbudget.db.store import SharedStore
from tripbudget.models.constants import WIDGET_AMOUNT_KEY, WIDGET_RELOAD_KEY
from tripbudget.services.money import type_digit

logger = logging.getLogger("tripbudget.widget")


class WidgetRefreshSignal(Protocol):
    def reload_all_timelines(self) -> None: ...


class NullRefreshSignal:
    """Counts reload requests without side effects."""

    def __init__(self) -> None:
        self.reloads = 0

    def reload_all_timelines(self) -> None:
        self.reloads += 1


class StoreRefreshSignal:
    def __init__(
        self,
        store: SharedStore,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._store = store
        self._clock = clock

    def reload_all_timelines(self) -> None:
        result = self._store.set_datetime(WIDGET_RELOAD_KEY, self._clock())
        if not result.ok:
            logger.warning("widget reload request not recorded: %s", result.error)
            return
        logger.debug("widget timelines reload requested")

    def last_requested_at(self) -> datetime | None:
        return self._store.get_datetime(WIDGET_RELOAD_KEY)


class KeypadState:
    """Amount typed on the widget keypad, persisted between taps."""

    def __init__(self, store: SharedStore):
        self._store = store

    @property
    def amount(self) -> float:
        return self._store.get_float(WIDGET_AMOUNT_KEY, 0.0)

    def type_digit(self, digit: int) -> float:
        new_amount = type_digit(self.amount, digit)
        self._store.set_float(WIDGET_AMOUNT_KEY, new_amount)
        return new_amount

    def clear(self) -> float:
        self._store.set_float(WIDGET_AMOUNT_KEY, 0.0)
        return 0.0
