from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_RATE_PROVIDERS = {"static", "frankfurter"}
ALLOWED_REFRESH_POLICIES = {"always", "ttl"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, DB_FILENAME, RATES_CACHE_TTL_SECONDS, RATE_REFRESH_POLICY, TIMEZONE).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Trip Budget Converter"
    debug: bool = False
    version: str = "0.1.0"

    # Shared storage (app + widget read the same file)
    data_dir: Path = Path("data")
    db_filename: str = "shared.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Exchange rates / caching
    rates_cache_ttl_seconds: int = 3600  # widget freshness window
    # 'always' refetches on every lookup (main app), 'ttl' reuses a fresh entry (widgets)
    rate_refresh_policy: str = "always"
    exchange_rate_provider: str = "frankfurter"
    exchange_api_base_url: AnyHttpUrl = "https://api.frankfurter.app/latest"
    http_timeout_seconds: float = 10.0

    # Budget accounting
    timezone: str = "UTC"
    default_trip_length_days: int = 7
    untitled_trip_name: str = "Untitled trip"

    # Converter defaults
    default_from_currency: str = "THB"
    default_to_currency: str = "PLN"

    # Localization
    localization_dir: Path = Path(__file__).resolve().parent.parent / "locales"
    language: str = "System"
    system_language: str = "en"

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        if self.exchange_rate_provider not in ALLOWED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {ALLOWED_RATE_PROVIDERS}"
            )
        if self.rate_refresh_policy not in ALLOWED_REFRESH_POLICIES:
            raise ValueError(
                f"Unsupported rate_refresh_policy '{self.rate_refresh_policy}'. Allowed: {ALLOWED_REFRESH_POLICIES}"
            )
        try:
            ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown timezone '{self.timezone}'") from exc

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
