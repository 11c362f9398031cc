"""Run a single fetch-normalize-rank cycle and print the ranked table."""
from __future__ import annotations

import argparse
import asyncio
import sys

from ..adapters.http import HttpSource
from ..config import ProviderShape, get_settings
from ..core.normalize import normalize
from ..core.ranking import rank_records
from ..core.view import filter_records, to_row
from ..errors import RefreshError
from ..logging_config import configure_logging, get_logger
from ..models import AssetRecord

LOGGER = get_logger(__name__)


async def collect_once(url: str, shape: ProviderShape, timeout: float) -> list[AssetRecord]:
    source = HttpSource(url, timeout)
    try:
        payload = await source.fetch()
    finally:
        await source.aclose()
    return rank_records(normalize(payload, shape))


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", default=settings.data_source_url)
    parser.add_argument("--shape", choices=[shape.value for shape in ProviderShape], default=settings.provider_shape.value)
    parser.add_argument("--search", default="", help="Case-insensitive name filter.")
    parser.add_argument("--top", type=int, default=20)
    args = parser.parse_args(argv)

    configure_logging(log_level=settings.log_level)
    try:
        ranked = asyncio.run(collect_once(args.url, ProviderShape(args.shape), settings.effective_fetch_timeout))
    except RefreshError as exc:
        LOGGER.error("Collection failed (%s): %s", type(exc).__name__, exc)
        return 1

    for record in filter_records(ranked, args.search)[: max(args.top, 0)]:
        row = to_row(record)
        print(
            f"{row.rank:>4}  {row.name:<24} {row.symbol:<8} mcap={row.market_cap:<22} "
            f"price={row.price:<16} supply={row.supply:<22} vol={row.volume}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
