"""Presentation helpers: name filtering and display rows for the coin table."""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Optional

from pydantic import BaseModel, Field

from ..models import AssetRecord

if TYPE_CHECKING:  # pragma: no cover
    from ..jobs.loop import RefreshLoop

NOT_AVAILABLE = "N/A"
NO_MATCHES_MESSAGE = "No cryptocurrencies found."


class CoinRow(BaseModel):
    """Display-ready row; numeric values are pre-formatted."""

    id: str
    rank: int
    name: str
    symbol: str
    image: Optional[str] = None
    market_cap: str
    price: str
    supply: str
    volume: str


class CoinTableView(BaseModel):
    """Everything the table page needs for one render."""

    loading: bool
    error: Optional[str] = None
    query: str = ""
    total: int = 0
    rows: List[CoinRow] = Field(default_factory=list)
    message: Optional[str] = None
    fetched_at: Optional[str] = None


def format_usd(value: float | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    if value >= 1 or value == 0:
        return f"${value:,.2f}".rstrip("0").rstrip(".")
    return f"${value:,.8f}".rstrip("0").rstrip(".")


def format_amount(value: float | None) -> str:
    if not value:
        return NOT_AVAILABLE
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def filter_records(records: Iterable[AssetRecord], query: str | None) -> list[AssetRecord]:
    """Case-insensitive substring match on display name, keeping rank order."""

    needle = (query or "").strip().lower()
    if not needle:
        return list(records)
    return [record for record in records if needle in record.display_name.lower()]


def to_row(record: AssetRecord) -> CoinRow:
    return CoinRow(
        id=record.identifier,
        rank=record.rank or 0,
        name=record.display_name,
        symbol=record.symbol,
        image=record.image_ref,
        market_cap=format_usd(record.market_cap),
        price=format_usd(record.current_price),
        supply=format_amount(record.total_supply),
        volume=format_amount(record.total_volume),
    )


def build_view(loop: "RefreshLoop", query: str | None = None) -> CoinTableView:
    snapshot = loop.snapshot
    query = query or ""
    if loop.loading and snapshot is None:
        return CoinTableView(loading=True, query=query)
    if snapshot is None:
        return CoinTableView(loading=False, error=loop.error or "No data available", query=query)

    visible = filter_records(snapshot.records, query)
    return CoinTableView(
        loading=False,
        error=loop.error,
        query=query,
        total=len(snapshot),
        rows=[to_row(record) for record in visible],
        message=None if visible else NO_MATCHES_MESSAGE,
        fetched_at=snapshot.fetched_at.isoformat(),
    )
