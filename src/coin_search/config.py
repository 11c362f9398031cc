"""Application settings for the coin search service and its relay."""
from __future__ import annotations

from enum import Enum
from functools import lru_cache
import json
from typing import Annotated, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


COINGECKO_MARKETS_URL = (
    "https://api.coingecko.com/api/v3/coins/markets"
    "?vs_currency=usd&order=market_cap_desc&per_page=100&page=1&sparkline=false"
)
CRYPTOCOMPARE_TOP_URL = "https://min-api.cryptocompare.com/data/top/mktcapfull?limit=50&tsym=USD"


class ProviderShape(str, Enum):
    """Upstream payload layouts the normalizer knows how to read."""

    COINGECKO = "coingecko"
    COINCAP = "coincap"
    CRYPTOCOMPARE = "cryptocompare"


class Settings(BaseSettings):
    """Strongly typed runtime configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="COINSEARCH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    data_source_url: str = Field(default=COINGECKO_MARKETS_URL, description="Endpoint polled by the refresh loop.")
    provider_shape: ProviderShape = Field(
        default=ProviderShape.COINGECKO,
        description="Payload layout returned by data_source_url.",
    )
    refresh_interval_sec: float = Field(
        default=3.0,
        validation_alias=AliasChoices(
            "refresh_interval_sec",
            "coinsearch_refresh_interval_sec",
            "coinsearch_refresh_interval_s",
        ),
        description="Seconds between refresh ticks.",
    )
    fetch_timeout_sec: Optional[float] = Field(
        default=None,
        description="Outbound fetch timeout; defaults to one refresh interval.",
    )
    coincap_image_template: str = Field(
        default="https://assets.coincap.io/assets/icons/{symbol}@2x.png",
        description="Logo URL template for coincap payloads, formatted with the lower-cased symbol.",
    )
    cryptocompare_image_host: str = Field(
        default="https://www.cryptocompare.com",
        description="Host prefix joined with CoinInfo.ImageUrl for cryptocompare payloads.",
    )

    relay_upstream_url: str = Field(default=CRYPTOCOMPARE_TOP_URL, description="Upstream endpoint forwarded by the relay.")
    relay_accept: str = Field(default="application/json", description="Accept header sent upstream by the relay.")
    relay_timeout_sec: float = Field(default=10.0, description="Relay upstream timeout in seconds.")
    relay_host: str = Field(default="0.0.0.0")
    relay_port: int = Field(default=4000)

    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8010)
    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"], description="Origins allowed by CORS middleware.")

    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics endpoint.")
    log_level: str = Field(default="INFO")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _coerce_origins(cls, value):
        if value in (None, "", [], ()):
            return []
        if isinstance(value, str):
            raw = value.strip()
            try:
                parsed = json.loads(raw)
                value = parsed if isinstance(parsed, list) else [raw]
            except json.JSONDecodeError:
                value = [part.strip() for part in raw.split(",") if part.strip()]
        if isinstance(value, (set, tuple)):
            value = list(value)
        if not isinstance(value, list):
            raise ValueError("cors_origins must be a list of strings")
        return [str(item).strip() for item in value if str(item).strip()]

    @field_validator("refresh_interval_sec", "relay_timeout_sec")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("intervals and timeouts must be positive")
        return value

    @field_validator("fetch_timeout_sec")
    @classmethod
    def _positive_or_none(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("fetch_timeout_sec must be positive")
        return value

    @property
    def effective_fetch_timeout(self) -> float:
        return self.fetch_timeout_sec or self.refresh_interval_sec


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance to avoid repeated environment parsing."""

    return Settings()
