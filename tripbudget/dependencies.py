"""Service wiring for the HTTP layer.

`build_services` constructs every collaborator explicitly from settings; the
app factory stores the result on `app.state` and routers pull what they need
through the FastAPI dependencies below.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import Request

from tripbudget.core.config import Settings
from tripbudget.db.store import SharedStore
from tripbudget.services.converter import ConverterSession
from tripbudget.services.ledger import ExpenseLedger
from tripbudget.services.localization import LocalizationCatalog
from tripbudget.services.rates.cache_service import (
    POLICY_TTL,
    RateCacheService,
    build_rate_cache_service,
)
from tripbudget.services.trips import TripManager
from tripbudget.services.widget import KeypadState, StoreRefreshSignal


@dataclass
class AppServices:
    settings: Settings
    store: SharedStore
    signal: StoreRefreshSignal
    ledger: ExpenseLedger
    trips: TripManager
    rates: RateCacheService
    widget_rates: RateCacheService
    keypad: KeypadState
    converter: ConverterSession
    catalog: LocalizationCatalog

    @property
    def tz(self) -> ZoneInfo:
        return self.settings.tzinfo

    def now(self) -> datetime:
        return datetime.now(self.tz)


def build_services(settings: Settings) -> AppServices:
    store = SharedStore(settings.db_path)  # type: ignore[arg-type]
    signal = StoreRefreshSignal(store)
    tz = settings.tzinfo
    catalog = LocalizationCatalog.load(
        settings.localization_dir, settings.language, settings.system_language
    )
    untitled = (
        catalog.localized("UNTITLED_TRIP")
        if "UNTITLED_TRIP" in catalog
        else settings.untitled_trip_name
    )
    ledger = ExpenseLedger(store, signal, tz=tz)
    trips = TripManager(
        store,
        ledger,
        signal,
        untitled_name=untitled,
        default_length_days=settings.default_trip_length_days,
        default_currency=settings.default_to_currency,
        default_secondary_currency=settings.default_from_currency,
        today=lambda: datetime.now(tz).date(),
    )
    rates = build_rate_cache_service(settings, store)
    widget_rates = RateCacheService(
        store,
        rates.provider,
        ttl_seconds=settings.rates_cache_ttl_seconds,
        policy=POLICY_TTL,
    )
    return AppServices(
        settings=settings,
        store=store,
        signal=signal,
        ledger=ledger,
        trips=trips,
        rates=rates,
        widget_rates=widget_rates,
        keypad=KeypadState(store),
        converter=ConverterSession(
            rates, settings.default_from_currency, settings.default_to_currency
        ),
        catalog=catalog,
    )


# Dependencies -----------------------------------------------------


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_ledger(request: Request) -> ExpenseLedger:
    return get_services(request).ledger


def get_trips(request: Request) -> TripManager:
    return get_services(request).trips


def get_rates(request: Request) -> RateCacheService:
    return get_services(request).rates


def get_converter(request: Request) -> ConverterSession:
    return get_services(request).converter
