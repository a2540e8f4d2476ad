"""Runtime settings, read from ``ORDERCORE_*`` environment variables or ``.env``."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="ORDERCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./ordercore.db"
    database_echo: bool = False
    # seconds a SQLite writer waits for another before giving up as busy
    database_lock_timeout: float = Field(default=5.0, gt=0)

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Checkout
    currency: str = "USD"
    price_tolerance: Decimal = Decimal("0.01")
    max_transaction_retries: int = Field(default=3, ge=1)

    # Reservations
    reservation_window_minutes: int = Field(default=30, ge=1)


@lru_cache
def get_settings() -> Settings:
    return Settings()
