"""Row and snapshot models shared by the refresh loop and the presentation layer."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, Field

from .config import ProviderShape


class AssetRecord(BaseModel):
    """One normalized row of market data for a single tradable item."""

    identifier: str = Field(..., description="Stable upstream key, unique within a snapshot.")
    display_name: str = Field(..., description="Human-readable name.")
    symbol: str = Field(..., description="Ticker, upper-cased.")
    image_ref: str | None = Field(None, description="Logo URL, if the provider has one.")
    market_cap: float | None = Field(None, description="Market capitalization in USD.")
    current_price: float | None = Field(None, description="Last price in USD.")
    total_supply: float | None = Field(None, description="Circulating or total supply, if known.")
    total_volume: float | None = Field(None, description="24h traded volume in USD, if known.")
    rank: int | None = Field(None, ge=1, description="1-based market cap rank (assigned downstream).")

    model_config = {
        "frozen": True,
    }


@dataclass(frozen=True)
class Snapshot:
    """Ranked records from one successful fetch cycle plus an identifier index."""

    records: tuple[AssetRecord, ...]
    provider: ProviderShape
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    index: Mapping[str, AssetRecord] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "index",
            MappingProxyType({record.identifier: record for record in self.records}),
        )

    @classmethod
    def from_ranked(cls, records: Iterable[AssetRecord], provider: ProviderShape) -> "Snapshot":
        return cls(records=tuple(records), provider=provider)

    def __len__(self) -> int:
        return len(self.records)

    def get(self, identifier: str) -> AssetRecord | None:
        return self.index.get(identifier)

    def as_payload(self) -> dict[str, Any]:
        return {
            "provider": self.provider.value,
            "fetched_at": self.fetched_at.isoformat(),
            "records": [record.model_dump(mode="json") for record in self.records],
        }
