"""Smoke script for the shared rate cache.

Demonstrates:
 1. The app-side service ('always' policy) fetches and stores the rate.
 2. A widget-side service ('ttl' policy) on the same store reuses that entry.
 3. Backdating the stored fetch time past the TTL forces the widget to refetch.

NOTE: This is a lightweight diagnostic and not a formal test.
"""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from pprint import pprint

from tripbudget.db.store import SharedStore
from tripbudget.models.constants import RATE_CACHE_FETCHED_AT_KEY
from tripbudget.services.rates.cache_service import POLICY_TTL, RateCacheService
from tripbudget.services.rates.providers import StaticRateProvider


def run():
    with tempfile.TemporaryDirectory() as d:
        store = SharedStore(Path(d) / "shared.sqlite3")
        app_provider = StaticRateProvider()
        widget_provider = StaticRateProvider()
        app_rates = RateCacheService(store, app_provider)
        widget_rates = RateCacheService(store, widget_provider, policy=POLICY_TTL)
        out = {}

        out["app"] = app_rates.get_rate("THB", "PLN")
        out["widget_cached"] = widget_rates.get_rate("THB", "PLN")
        out["widget_calls_after_cached"] = widget_provider.calls

        store.set_datetime(
            RATE_CACHE_FETCHED_AT_KEY,
            datetime.now(timezone.utc) - timedelta(hours=2),
        )
        out["widget_refetched"] = widget_rates.get_rate("THB", "PLN")
        out["widget_calls_after_expiry"] = widget_provider.calls
        out["entry"] = widget_rates.last_entry().model_dump(mode="json")

        pprint(out)


if __name__ == "__main__":
    run()
