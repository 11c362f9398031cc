"""Provider-aware mapping of upstream payloads onto AssetRecord rows."""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, Iterable, Mapping, Sequence

from ..config import ProviderShape, Settings, get_settings
from ..errors import EmptyResultFailure, ParseFailure
from ..models import AssetRecord

LOGGER = logging.getLogger(__name__)

ItemMapper = Callable[[Mapping[str, Any], Settings], "AssetRecord | None"]


def _to_amount(value: object) -> float | None:
    """Coerce a numeric-ish upstream value; anything unusable is unavailable."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return None
    try:
        amount = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(amount) or amount < 0:
        return None
    return amount


def _to_text(value: object) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _build_record(
    identifier: object,
    name: object,
    symbol: object,
    image: str | None,
    market_cap: object,
    price: object,
    supply: object,
    volume: object,
) -> AssetRecord | None:
    ident = _to_text(identifier)
    if ident is None:
        return None
    ticker = (_to_text(symbol) or "").upper()
    return AssetRecord(
        identifier=ident,
        display_name=_to_text(name) or ticker or ident,
        symbol=ticker,
        image_ref=image,
        market_cap=_to_amount(market_cap),
        current_price=_to_amount(price),
        total_supply=_to_amount(supply),
        total_volume=_to_amount(volume),
    )


def _map_coingecko(item: Mapping[str, Any], settings: Settings) -> AssetRecord | None:
    # market_cap_rank is deliberately not read; ranks are always recomputed.
    return _build_record(
        item.get("id"),
        item.get("name"),
        item.get("symbol"),
        _to_text(item.get("image")),
        item.get("market_cap"),
        item.get("current_price"),
        item.get("total_supply"),
        item.get("total_volume"),
    )


def _map_coincap(item: Mapping[str, Any], settings: Settings) -> AssetRecord | None:
    symbol = _to_text(item.get("symbol"))
    image = settings.coincap_image_template.format(symbol=symbol.lower()) if symbol else None
    return _build_record(
        item.get("id"),
        item.get("name"),
        symbol,
        image,
        item.get("marketCapUsd"),
        item.get("priceUsd"),
        item.get("supply"),
        item.get("volumeUsd24Hr"),
    )


def _map_cryptocompare(item: Mapping[str, Any], settings: Settings) -> AssetRecord | None:
    info = item.get("CoinInfo")
    if not isinstance(info, Mapping):
        return None
    raw = item.get("RAW")
    usd = raw.get("USD") if isinstance(raw, Mapping) else None
    if not isinstance(usd, Mapping):
        usd = {}
    image_path = _to_text(info.get("ImageUrl"))
    image = f"{settings.cryptocompare_image_host.rstrip('/')}/{image_path.lstrip('/')}" if image_path else None
    return _build_record(
        info.get("Id"),
        info.get("FullName"),
        info.get("Name"),
        image,
        usd.get("MKTCAP"),
        usd.get("PRICE"),
        usd.get("SUPPLY"),
        usd.get("VOLUME24HOUR"),
    )


def _items_top_level(payload: Any) -> Sequence[Any]:
    if not isinstance(payload, list):
        raise ParseFailure(f"expected a top-level array, got {type(payload).__name__}")
    return payload


def _items_under(key: str) -> Callable[[Any], Sequence[Any]]:
    def extract(payload: Any) -> Sequence[Any]:
        if not isinstance(payload, Mapping):
            raise ParseFailure(f"expected an object with a {key!r} array, got {type(payload).__name__}")
        items = payload.get(key)
        if not isinstance(items, list):
            raise ParseFailure(f"payload field {key!r} is missing or not an array")
        return items

    return extract


_EXTRACTORS: dict[ProviderShape, tuple[Callable[[Any], Sequence[Any]], ItemMapper]] = {
    ProviderShape.COINGECKO: (_items_top_level, _map_coingecko),
    ProviderShape.COINCAP: (_items_under("data"), _map_coincap),
    ProviderShape.CRYPTOCOMPARE: (_items_under("Data"), _map_cryptocompare),
}


def _unique(records: Iterable[AssetRecord]) -> list[AssetRecord]:
    seen: set[str] = set()
    result: list[AssetRecord] = []
    for record in records:
        if record.identifier in seen:
            LOGGER.debug("Dropping duplicate identifier %s", record.identifier)
            continue
        seen.add(record.identifier)
        result.append(record)
    return result


def normalize(payload: Any, shape: ProviderShape, settings: Settings | None = None) -> list[AssetRecord]:
    """Map a decoded upstream payload to unranked records in upstream order.

    The extraction path is chosen by ``shape`` alone. Items that are not
    objects or carry no identifier are skipped; numeric fields that fail
    coercion become ``None``. Raises ParseFailure when the container is
    missing and EmptyResultFailure when nothing usable remains.
    """

    settings = settings or get_settings()
    extract, mapper = _EXTRACTORS[ProviderShape(shape)]
    items = extract(payload)

    records: list[AssetRecord] = []
    skipped = 0
    for item in items:
        record = mapper(item, settings) if isinstance(item, Mapping) else None
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        LOGGER.warning("Skipped %d unusable %s items", skipped, ProviderShape(shape).value)

    records = _unique(records)
    if not records:
        raise EmptyResultFailure(f"{ProviderShape(shape).value} payload yielded no usable records")
    return records


__all__ = ["normalize"]
