"""Calculator session state for the converter screen.

One session per screen. Rate lookups run in a worker thread; while one is in
flight further refresh requests are dropped (busy flag). A lookup whose pair
no longer matches the session when it completes is discarded and a new lookup
for the current pair is issued, so a superseded response never overwrites the
rate of a newer pair.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from tripbudget.services.money import parse_amount
from tripbudget.services.rates.base import SupportsRateLookup

logger = logging.getLogger("tripbudget.converter")


class ConverterSession:
    def __init__(
        self,
        rates: SupportsRateLookup,
        from_currency: str = "THB",
        to_currency: str = "PLN",
        amount: float = 100.0,
    ):
        self._rates = rates
        self.amount = amount
        self.from_currency = from_currency.upper()
        self.to_currency = to_currency.upper()
        self.result = 0.0
        self.exchange_rate = 0.0
        self.is_loading = False
        self.last_updated: Optional[datetime] = None
        self.use_custom_rate = False
        self.custom_rate_string = "0.12"
        self.dropped_requests = 0

    @property
    def pair(self) -> Tuple[str, str]:
        return (self.from_currency, self.to_currency)

    @property
    def effective_rate(self) -> float:
        if self.use_custom_rate:
            return parse_amount(self.custom_rate_string) or 0.0
        return self.exchange_rate

    def calculate_result(self) -> float:
        self.result = self.amount * self.effective_rate
        return self.result

    def set_amount(self, amount: float) -> float:
        self.amount = amount
        return self.calculate_result()

    def set_currencies(self, from_currency: str, to_currency: str) -> None:
        self.from_currency = from_currency.upper()
        self.to_currency = to_currency.upper()

    def swap_currencies(self) -> None:
        self.from_currency, self.to_currency = self.to_currency, self.from_currency

    async def refresh_rate(self) -> bool:
        """Fetch the rate for the current pair; False if the request was dropped."""
        if self.is_loading:
            self.dropped_requests += 1
            logger.debug("rate refresh dropped; lookup already in flight")
            return False

        if self.from_currency == self.to_currency:
            self.exchange_rate = 1.0
            self.calculate_result()
            return True

        if self.use_custom_rate:
            self.calculate_result()
            return True

        self.is_loading = True
        try:
            while True:
                requested = self.pair
                rate = await asyncio.to_thread(self._rates.get_rate, *requested)
                if requested == self.pair:
                    break
                logger.debug("discarding rate for superseded pair %s/%s", *requested)
                if self.from_currency == self.to_currency:
                    rate = 1.0
                    break
        finally:
            self.is_loading = False

        if rate > 0:
            self.exchange_rate = rate
            self.last_updated = datetime.now(timezone.utc)
            self.calculate_result()
        else:
            # keep the previous rate on screen
            logger.warning("no rate for %s/%s; keeping previous value", *self.pair)
        return True
