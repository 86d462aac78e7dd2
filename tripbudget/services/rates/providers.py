"""Concrete rate providers and factory.

'frankfurter' queries the public Frankfurter API (`?from=X&to=Y`, response
`{"date": ..., "rates": {"Y": rate}}`). 'static' serves a fixed table of
rates against PLN, for offline use and tests.
"""

from __future__ import annotations

from typing import Dict, Optional

from tripbudget.core.errors import RateLookupError
from tripbudget.services.http_client import get_json, HttpError
from .base import RateProvider


# PLN per 1 unit of currency (placeholders)
_STATIC_PLN_RATES: Dict[str, float] = {
    "PLN": 1.0,
    "USD": 4.0,
    "EUR": 4.3,
    "GBP": 5.0,
    "CHF": 4.5,
    "JPY": 0.027,
    "CZK": 0.17,
    "NOK": 0.37,
    "SEK": 0.38,
    "CAD": 2.9,
    "AUD": 2.6,
    "THB": 0.12,
    "HUF": 0.011,
    "DKK": 0.58,
}


class StaticRateProvider(RateProvider):
    def __init__(self, pln_rates: Optional[Dict[str, float]] = None):
        self._rates = dict(pln_rates or _STATIC_PLN_RATES)
        self.calls = 0

    def get_rate(self, from_currency: str, to_currency: str) -> float:  # type: ignore[override]
        self.calls += 1
        src = self._rates.get(from_currency.upper())
        dst = self._rates.get(to_currency.upper())
        if not src or not dst:
            raise RateLookupError(f"no static rate for {from_currency}->{to_currency}")
        return src / dst


class FrankfurterRateProvider(RateProvider):
    def __init__(self, base_url: str, timeout: float = 10.0):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self.last_rate_date: Optional[str] = None

    def get_rate(self, from_currency: str, to_currency: str) -> float:  # type: ignore[override]
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()
        params = {"from": from_currency, "to": to_currency}
        try:
            data = get_json(self._base_url, params, timeout=self._timeout)
        except HttpError as exc:
            raise RateLookupError(str(exc)) from exc
        rates = data.get("rates") or {}
        rate = rates.get(to_currency)
        if not isinstance(rate, (int, float)) or rate <= 0:
            raise RateLookupError(f"response has no rate for {to_currency}")
        self.last_rate_date = data.get("date")
        return float(rate)


_PROVIDER_REGISTRY = {
    "static": StaticRateProvider,
    "frankfurter": FrankfurterRateProvider,
}


def make_rate_provider(kind: str, base_url: str = "", timeout: float = 10.0) -> RateProvider:
    cls = _PROVIDER_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    if cls is FrankfurterRateProvider:
        return FrankfurterRateProvider(base_url, timeout=timeout)
    return cls()
