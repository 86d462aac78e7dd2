from __future__ import annotations

import urllib.error
from datetime import datetime, timedelta, timezone

import pytest

from conftest import FakeProvider
from tripbudget.core.errors import RateLookupError
from tripbudget.services import http_client
from tripbudget.services.http_client import HttpError, build_url
from tripbudget.services.rates import providers
from tripbudget.services.rates.cache_service import POLICY_TTL, RateCacheService
from tripbudget.services.rates.conversion import compute_conversion
from tripbudget.services.rates.providers import (
    FrankfurterRateProvider,
    StaticRateProvider,
    make_rate_provider,
)

NOW = datetime(2024, 5, 1, 12, tzinfo=timezone.utc)


def test_same_pair_never_hits_provider(store):
    provider = FakeProvider()
    svc = RateCacheService(store, provider)
    assert svc.get_rate("thb", "THB") == 1.0
    assert provider.calls == []


def test_same_pair_conversion_is_identity(store):
    provider = FakeProvider()
    result = compute_conversion(250.0, "EUR", "eur", RateCacheService(store, provider))
    assert result.rate == 1.0
    assert result.converted_amount == 250.0
    assert provider.calls == []


def test_always_policy_fetches_every_time(store):
    provider = FakeProvider(rate=0.12)
    svc = RateCacheService(store, provider)
    svc.get_rate("THB", "PLN", now=NOW)
    svc.get_rate("THB", "PLN", now=NOW)
    assert len(provider.calls) == 2


def test_ttl_policy_reuses_fresh_entry(store):
    provider = FakeProvider(rate=0.12)
    svc = RateCacheService(store, provider, ttl_seconds=3600, policy=POLICY_TTL)
    assert svc.get_rate("THB", "PLN", now=NOW) == 0.12
    provider.rate = 0.2
    assert svc.get_rate("THB", "PLN", now=NOW + timedelta(minutes=59)) == 0.12
    assert len(provider.calls) == 1
    assert svc.get_rate("THB", "PLN", now=NOW + timedelta(hours=1)) == 0.2
    assert len(provider.calls) == 2


def test_ttl_policy_requires_exact_pair(store):
    provider = FakeProvider(rate=0.12)
    svc = RateCacheService(store, provider, policy=POLICY_TTL)
    svc.get_rate("THB", "PLN", now=NOW)
    svc.get_rate("PLN", "THB", now=NOW)
    assert provider.calls == [("THB", "PLN"), ("PLN", "THB")]


def test_entry_shared_between_app_and_widget(store):
    RateCacheService(store, FakeProvider(rate=0.12)).get_rate("THB", "PLN", now=NOW)
    widget_provider = FakeProvider(rate=9.0)
    widget = RateCacheService(store, widget_provider, policy=POLICY_TTL)
    assert widget.get_rate("THB", "PLN", now=NOW + timedelta(minutes=5)) == 0.12
    assert widget_provider.calls == []


def test_failure_falls_back_to_cached_pair(store):
    provider = FakeProvider(rate=0.12)
    svc = RateCacheService(store, provider)
    svc.get_rate("THB", "PLN", now=NOW)
    provider.fail = True
    assert svc.get_rate("THB", "PLN", now=NOW) == 0.12
    assert svc.get_rate("EUR", "PLN", now=NOW) == 0.0


def test_failure_without_cache_returns_zero(store):
    svc = RateCacheService(store, FakeProvider(fail=True))
    assert svc.get_rate("USD", "PLN", now=NOW) == 0.0
    assert svc.last_entry() is None


def test_last_entry_records_fetch(store):
    svc = RateCacheService(store, FakeProvider(rate=4.0))
    svc.get_rate("usd", "pln", now=NOW)
    entry = svc.last_entry()
    assert entry.pair == ("USD", "PLN")
    assert entry.rate == 4.0
    assert entry.fetched_at == NOW


def test_unknown_policy(store):
    with pytest.raises(ValueError):
        RateCacheService(store, FakeProvider(), policy="sometimes")


class TestProviders:
    def test_static_cross_rate(self):
        provider = StaticRateProvider()
        assert provider.get_rate("EUR", "USD") == pytest.approx(4.3 / 4.0)
        with pytest.raises(RateLookupError):
            provider.get_rate("XXX", "PLN")

    def test_frankfurter_parses_response(self, monkeypatch):
        seen = {}

        def fake_get_json(base_url, params=None, **kwargs):
            seen["url"] = build_url(base_url, params)
            return {"amount": 1.0, "base": "THB", "date": "2024-05-01", "rates": {"PLN": 0.1093}}

        monkeypatch.setattr(providers, "get_json", fake_get_json)
        provider = FrankfurterRateProvider("https://api.frankfurter.app/latest")
        assert provider.get_rate("thb", "pln") == 0.1093
        assert seen["url"] == "https://api.frankfurter.app/latest?from=THB&to=PLN"
        assert provider.last_rate_date == "2024-05-01"

    def test_frankfurter_errors(self, monkeypatch):
        def boom(base_url, params=None, **kwargs):
            raise HttpError("timeout", url=base_url)

        monkeypatch.setattr(providers, "get_json", boom)
        with pytest.raises(RateLookupError):
            FrankfurterRateProvider("https://example.test/latest").get_rate("THB", "PLN")

        monkeypatch.setattr(providers, "get_json", lambda base_url, params=None, **kw: {"rates": {}})
        with pytest.raises(RateLookupError):
            FrankfurterRateProvider("https://example.test/latest").get_rate("THB", "PLN")

    def test_factory(self):
        assert isinstance(make_rate_provider("static"), StaticRateProvider)
        assert isinstance(
            make_rate_provider("frankfurter", "https://example.test/latest"),
            FrankfurterRateProvider,
        )
        with pytest.raises(ValueError):
            make_rate_provider("carrier-pigeon")


class TestHttpClient:
    def test_build_url(self):
        assert build_url("https://x.test/latest") == "https://x.test/latest"
        assert build_url("https://x.test/latest", {"from": "THB"}) == "https://x.test/latest?from=THB"
        assert build_url("https://x.test/q?a=1", {"b": "2"}) == "https://x.test/q?a=1&b=2"

    def test_single_attempt_then_error(self, monkeypatch):
        attempts = []

        def refuse(request, timeout):
            attempts.append(request.full_url)
            raise urllib.error.URLError("connection refused")

        monkeypatch.setattr(http_client.urllib.request, "urlopen", refuse)
        with pytest.raises(HttpError) as info:
            http_client.get_json("https://x.test/latest", {"from": "THB", "to": "PLN"})
        assert attempts == ["https://x.test/latest?from=THB&to=PLN"]
        assert info.value.url == attempts[0]
