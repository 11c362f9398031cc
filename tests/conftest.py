"""Shared upstream payloads and settings for the coin search tests."""
import pytest

from coin_search.config import ProviderShape, Settings


def coingecko_item(id, name, symbol, market_cap, price=1.0, supply=1000.0, volume=500.0, rank=None):
    return {
        "id": id,
        "name": name,
        "symbol": symbol,
        "image": f"https://img.example/{id}.png",
        "market_cap": market_cap,
        "current_price": price,
        "total_supply": supply,
        "total_volume": volume,
        "market_cap_rank": rank,
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        provider_shape=ProviderShape.COINGECKO,
        refresh_interval_sec=0.05,
        metrics_enabled=False,
    )


@pytest.fixture
def coingecko_payload():
    return [
        coingecko_item("bitcoin", "Bitcoin", "btc", 1_300_000_000_000, price=65_000.5, supply=21_000_000),
        coingecko_item("ethereum", "Ethereum", "eth", 400_000_000_000, price=3_200.25, supply=120_000_000),
        coingecko_item("litecoin", "Litecoin", "ltc", 6_000_000_000, price=80.1, supply=84_000_000),
    ]


@pytest.fixture
def coincap_payload():
    return {
        "data": [
            {
                "id": "bitcoin",
                "name": "Bitcoin",
                "symbol": "BTC",
                "marketCapUsd": "1300000000000.0000",
                "priceUsd": "65000.5",
                "supply": "21000000",
                "volumeUsd24Hr": "500",
            },
            {
                "id": "ethereum",
                "name": "Ethereum",
                "symbol": "ETH",
                "marketCapUsd": "400000000000",
                "priceUsd": "3200.25",
                "supply": None,
                "volumeUsd24Hr": None,
            },
        ],
        "timestamp": 1700000000000,
    }


@pytest.fixture
def cryptocompare_payload():
    return {
        "Message": "Success",
        "Type": 100,
        "Data": [
            {
                "CoinInfo": {"Id": "1182", "Name": "BTC", "FullName": "Bitcoin", "ImageUrl": "/media/37746251/btc.png"},
                "RAW": {"USD": {"MKTCAP": 1.3e12, "PRICE": 65000.5, "SUPPLY": 19700000, "VOLUME24HOUR": 25000.0}},
            },
            {
                "CoinInfo": {"Id": "7605", "Name": "ETH", "FullName": "Ethereum", "ImageUrl": "/media/37746238/eth.png"},
                "RAW": {"USD": {"MKTCAP": 4.0e11, "PRICE": 3200.25, "SUPPLY": 120000000, "VOLUME24HOUR": 90000.0}},
            },
            {
                "CoinInfo": {"Id": "9999", "Name": "NEW", "FullName": "Newcoin", "ImageUrl": "/media/new.png"},
            },
        ],
    }
