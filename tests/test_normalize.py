import pytest

from coin_search.config import ProviderShape
from coin_search.core.normalize import normalize
from coin_search.errors import EmptyResultFailure, ParseFailure

from conftest import coingecko_item

SHARED_FIELDS = ("identifier", "display_name", "symbol", "market_cap", "current_price", "total_supply", "total_volume")


def test_coingecko_maps_fields_and_uppercases_symbol(coingecko_payload, settings):
    records = normalize(coingecko_payload, ProviderShape.COINGECKO, settings)
    assert [r.identifier for r in records] == ["bitcoin", "ethereum", "litecoin"]
    btc = records[0]
    assert btc.symbol == "BTC"
    assert btc.display_name == "Bitcoin"
    assert btc.image_ref == "https://img.example/bitcoin.png"
    assert btc.market_cap == 1_300_000_000_000
    assert btc.current_price == 65_000.5


def test_upstream_rank_is_ignored(settings):
    payload = [coingecko_item("a", "A", "a", 10, rank=7)]
    records = normalize(payload, ProviderShape.COINGECKO, settings)
    assert records[0].rank is None


def test_missing_supply_and_volume_are_unavailable(settings):
    item = coingecko_item("a", "A", "a", 10)
    del item["total_supply"]
    del item["total_volume"]
    records = normalize([item], ProviderShape.COINGECKO, settings)
    assert records[0].total_supply is None
    assert records[0].total_volume is None
    assert records[0].market_cap == 10


def test_stringified_and_garbage_numbers(settings):
    item = coingecko_item("a", "A", "a", "1,500.5", price="abc", supply=-3, volume=float("nan"))
    record = normalize([item], ProviderShape.COINGECKO, settings)[0]
    assert record.market_cap == 1500.5
    assert record.current_price is None
    assert record.total_supply is None
    assert record.total_volume is None


def test_items_without_identifier_and_duplicates_are_dropped(settings):
    payload = [
        coingecko_item("a", "A", "a", 10),
        {"name": "nameless id", "market_cap": 5},
        "not-an-object",
        coingecko_item("a", "A again", "a", 99),
    ]
    records = normalize(payload, ProviderShape.COINGECKO, settings)
    assert [r.display_name for r in records] == ["A"]


def test_coincap_synthesizes_image_from_symbol(coincap_payload, settings):
    records = normalize(coincap_payload, ProviderShape.COINCAP, settings)
    assert records[0].image_ref == "https://assets.coincap.io/assets/icons/btc@2x.png"
    assert records[0].market_cap == 1_300_000_000_000
    assert records[1].total_supply is None


def test_cryptocompare_nested_shape(cryptocompare_payload, settings):
    records = normalize(cryptocompare_payload, ProviderShape.CRYPTOCOMPARE, settings)
    assert [r.identifier for r in records] == ["1182", "7605", "9999"]
    assert records[0].display_name == "Bitcoin"
    assert records[0].symbol == "BTC"
    assert records[0].image_ref == "https://www.cryptocompare.com/media/37746251/btc.png"
    assert records[1].total_volume == 90000.0
    # No RAW block: the record survives with every amount unavailable.
    assert records[2].market_cap is None
    assert records[2].current_price is None


def test_same_asset_in_two_shapes_is_equivalent(settings):
    gecko = coingecko_item("bitcoin", "Bitcoin", "btc", 1000.0, price=2.5, supply=30.0, volume=4.0)
    cap = {
        "data": [
            {
                "id": "bitcoin",
                "name": "Bitcoin",
                "symbol": "BTC",
                "marketCapUsd": "1000",
                "priceUsd": "2.5",
                "supply": "30",
                "volumeUsd24Hr": "4",
            }
        ]
    }
    left = normalize([gecko], ProviderShape.COINGECKO, settings)[0]
    right = normalize(cap, ProviderShape.COINCAP, settings)[0]
    for name in SHARED_FIELDS:
        assert getattr(left, name) == getattr(right, name), name


@pytest.mark.parametrize(
    "shape,payload",
    [
        (ProviderShape.COINGECKO, {"data": []}),
        (ProviderShape.COINCAP, [{"id": "x"}]),
        (ProviderShape.COINCAP, {"data": "nope"}),
        (ProviderShape.CRYPTOCOMPARE, {"Message": "rate limited"}),
    ],
)
def test_wrong_container_is_parse_failure(shape, payload, settings):
    with pytest.raises(ParseFailure):
        normalize(payload, shape, settings)


def test_zero_usable_records_is_empty_failure(settings):
    with pytest.raises(EmptyResultFailure):
        normalize([], ProviderShape.COINGECKO, settings)
    with pytest.raises(EmptyResultFailure):
        normalize([{"name": "no id"}], ProviderShape.COINGECKO, settings)


def test_number_too_large_for_float_is_unavailable(settings):
    payload = [
        coingecko_item("a", "A", "a", 10),
        coingecko_item("b", "B", "b", 10**400, supply=10**400, volume=-(10**400)),
    ]
    records = normalize(payload, ProviderShape.COINGECKO, settings)
    assert len(records) == 2
    big = records[1]
    assert big.market_cap is None
    assert big.total_supply is None
    assert big.total_volume is None
    assert big.current_price == 1.0
