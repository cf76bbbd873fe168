"""Configuration module for the price feed.

This module centralizes the reading of environment variables and provides a
`Settings` object that other modules can import.  It uses Pydantic's
`BaseSettings` to automatically read values from a `.env` file when present.

Vendor credentials are optional: an adapter whose key is missing simply
returns no bars, so a deployment can run with any subset of vendors.
"""

from functools import lru_cache
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="allow")

    twelvedata_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("TWELVEDATA_API_KEY", "TWELVEDATA_KEY"),
    )
    finnhub_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FINNHUB_API_KEY", "FINNHUB_KEY"),
    )
    polygon_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("POLYGON_API_KEY", "POLYGON_KEY"),
    )
    twelvedata_base_url: str = Field(
        default="https://api.twelvedata.com",
        validation_alias=AliasChoices("TWELVEDATA_BASE_URL", "twelvedata_base_url"),
    )
    finnhub_base_url: str = Field(
        default="https://finnhub.io/api/v1",
        validation_alias=AliasChoices("FINNHUB_BASE_URL", "finnhub_base_url"),
    )
    polygon_base_url: str = Field(
        default="https://api.polygon.io",
        validation_alias=AliasChoices("POLYGON_BASE_URL", "polygon_base_url"),
    )
    vendor_timeout_ms: int = Field(8000, validation_alias=AliasChoices("VENDOR_TIMEOUT_MS", "vendor_timeout_ms"))
    total_budget_ms: int = Field(20000, validation_alias=AliasChoices("CANDLES_TOTAL_BUDGET_MS", "total_budget_ms"))
    cache_ttl_seconds: float = Field(30.0, validation_alias=AliasChoices("CANDLES_CACHE_TTL", "cache_ttl_seconds"))
    max_bars: int = Field(5000, validation_alias=AliasChoices("CANDLES_MAX_BARS", "max_bars"))
    default_instrument: str = Field("EURUSD", validation_alias=AliasChoices("DEFAULT_INSTRUMENT", "default_instrument"))
    log_level: str = Field("INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))

    @field_validator("twelvedata_api_key", "finnhub_api_key", "polygon_api_key", mode="before")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if isinstance(value, str):
            token = value.strip()
            return token or None
        return value

    @field_validator("twelvedata_base_url", "finnhub_base_url", "polygon_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    """Return a cached instance of the application settings.

    Pydantic caches the parsed environment variables so that repeated calls
    throughout the application are inexpensive.
    """

    return Settings()


__all__ = ["Settings", "get_settings"]
