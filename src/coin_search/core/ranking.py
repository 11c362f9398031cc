"""Market-cap ranking for normalized records."""
from __future__ import annotations

from typing import Iterable

from ..models import AssetRecord


def _market_cap_key(record: AssetRecord) -> tuple[int, float]:
    # Unknown caps sort after every known cap.
    if record.market_cap is None:
        return (1, 0.0)
    return (0, -record.market_cap)


def rank_records(records: Iterable[AssetRecord]) -> list[AssetRecord]:
    """Sort by market cap descending and assign 1-based ranks.

    ``sorted`` is stable, so exact ties keep their upstream order. Any rank
    already present on the input is overwritten.
    """

    ordered = sorted(records, key=_market_cap_key)
    return [record.model_copy(update={"rank": position}) for position, record in enumerate(ordered, start=1)]
