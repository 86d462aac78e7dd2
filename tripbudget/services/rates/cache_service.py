"""Shared last-known-rate cache.

Purpose:
    Keep the most recently fetched (pair, rate, fetched_at) in the shared
    store so widgets can skip the network while the entry is fresh.

Design:
    - Wraps an underlying RateProvider.
    - Same-currency pairs are always 1.0 and never reach the provider.
    - Policy 'ttl' (widgets): reuse the stored entry when the pair matches
      exactly and it is younger than the TTL (1 hour by default).
    - Policy 'always' (main app): every lookup goes to the provider.
    - A failed lookup falls back to the stored rate for the same pair, or 0.0
      when there is none. Nothing is raised to the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from tripbudget.core.config import Settings
from tripbudget.core.errors import RateLookupError
from tripbudget.db.store import SharedStore
from tripbudget.models.constants import (
    RATE_CACHE_FETCHED_AT_KEY,
    RATE_CACHE_FROM_KEY,
    RATE_CACHE_RATE_KEY,
    RATE_CACHE_TO_KEY,
)
from tripbudget.models.rates import RateCacheEntry
from .base import RateProvider
from .providers import make_rate_provider

logger = logging.getLogger("tripbudget.rates.cache")

POLICY_ALWAYS = "always"
POLICY_TTL = "ttl"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RateCacheService:
    def __init__(
        self,
        store: SharedStore,
        provider: RateProvider,
        ttl_seconds: int = 3600,
        policy: str = POLICY_ALWAYS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if policy not in (POLICY_ALWAYS, POLICY_TTL):
            raise ValueError(f"unknown refresh policy '{policy}'")
        self._store = store
        self._provider = provider
        self._ttl = timedelta(seconds=ttl_seconds)
        self._policy = policy
        self._clock = clock

    @property
    def policy(self) -> str:
        return self._policy

    @property
    def provider(self) -> RateProvider:
        return self._provider

    # Internal --------------------------------------------------
    def last_entry(self) -> Optional[RateCacheEntry]:
        rate = self._store.get_float(RATE_CACHE_RATE_KEY, 0.0)
        base = self._store.get_str(RATE_CACHE_FROM_KEY)
        quote = self._store.get_str(RATE_CACHE_TO_KEY)
        fetched_at = self._store.get_datetime(RATE_CACHE_FETCHED_AT_KEY)
        if rate <= 0 or not base or not quote or fetched_at is None:
            return None
        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)
        return RateCacheEntry(
            base_currency=base, quote_currency=quote, rate=rate, fetched_at=fetched_at
        )

    def _remember(self, entry: RateCacheEntry) -> None:
        results = [
            self._store.set_float(RATE_CACHE_RATE_KEY, entry.rate),
            self._store.set_str(RATE_CACHE_FROM_KEY, entry.base_currency),
            self._store.set_str(RATE_CACHE_TO_KEY, entry.quote_currency),
            self._store.set_datetime(RATE_CACHE_FETCHED_AT_KEY, entry.fetched_at),
        ]
        if not all(r.ok for r in results):
            logger.warning("rate cache entry for %s not persisted", entry.pair)

    # Public API -----------------------------------------------
    def get_rate(
        self, from_currency: str, to_currency: str, now: Optional[datetime] = None
    ) -> float:
        pair = (from_currency.upper(), to_currency.upper())
        if pair[0] == pair[1]:
            return 1.0
        now = now or self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        cached = self.last_entry()
        if (
            self._policy == POLICY_TTL
            and cached is not None
            and cached.is_fresh(pair, now, self._ttl)
        ):
            logger.debug("rate cache hit for %s/%s", *pair)
            return cached.rate
        try:
            rate = self._provider.get_rate(*pair)
        except RateLookupError as exc:
            logger.warning(
                "rate lookup failed: %s",
                exc,
                extra={"pair": "/".join(pair), "policy": self._policy},
            )
            if cached is not None and cached.pair == pair:
                return cached.rate
            return 0.0
        self._remember(
            RateCacheEntry(
                base_currency=pair[0], quote_currency=pair[1], rate=rate, fetched_at=now
            )
        )
        return rate


def build_rate_cache_service(
    settings: Settings, store: SharedStore, policy: Optional[str] = None
) -> RateCacheService:
    """Factory wiring the configured provider, TTL and refresh policy."""
    provider = make_rate_provider(
        settings.exchange_rate_provider,
        base_url=str(settings.exchange_api_base_url),
        timeout=settings.http_timeout_seconds,
    )
    return RateCacheService(
        store,
        provider,
        ttl_seconds=settings.rates_cache_ttl_seconds,
        policy=policy or settings.rate_refresh_policy,
    )
