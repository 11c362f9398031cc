from coin_search.config import ProviderShape
from coin_search.core.ranking import rank_records
from coin_search.core.view import (
    NO_MATCHES_MESSAGE,
    NOT_AVAILABLE,
    build_view,
    filter_records,
    format_amount,
    format_usd,
    to_row,
)
from coin_search.models import AssetRecord, Snapshot


def make_record(name: str, market_cap: float, **extra) -> AssetRecord:
    return AssetRecord(identifier=name.lower(), display_name=name, symbol=name[:3].upper(), market_cap=market_cap, **extra)


class FakeLoop:
    def __init__(self, snapshot=None, error=None, loading=False):
        self.snapshot = snapshot
        self.error = error
        self.loading = loading


def ranked_snapshot() -> Snapshot:
    records = [make_record("Bitcoin", 300), make_record("Ethereum", 200), make_record("Litecoin", 100)]
    return Snapshot.from_ranked(rank_records(records), ProviderShape.COINGECKO)


def test_filter_is_case_insensitive_and_keeps_rank_order():
    snapshot = ranked_snapshot()
    visible = filter_records(snapshot.records, "COIN")
    assert [r.display_name for r in visible] == ["Bitcoin", "Litecoin"]
    assert [r.rank for r in visible] == [1, 3]


def test_blank_filter_matches_everything():
    snapshot = ranked_snapshot()
    assert len(filter_records(snapshot.records, "   ")) == 3
    assert len(filter_records(snapshot.records, None)) == 3


def test_missing_supply_and_volume_render_not_available():
    row = to_row(make_record("Bitcoin", 1_234_567).model_copy(update={"rank": 1}))
    assert row.supply == NOT_AVAILABLE
    assert row.volume == NOT_AVAILABLE
    assert row.market_cap == "$1,234,567"


def test_number_formatting():
    assert format_usd(65000.5) == "$65,000.5"
    assert format_usd(100) == "$100"
    assert format_usd(0.00001234) == "$0.00001234"
    assert format_usd(None) == NOT_AVAILABLE
    assert format_amount(21_000_000) == "21,000,000"
    assert format_amount(0) == NOT_AVAILABLE


def test_view_while_loading():
    view = build_view(FakeLoop(loading=True), "bit")
    assert view.loading is True
    assert view.rows == []


def test_view_without_data_shows_error():
    view = build_view(FakeLoop(error="Failed to fetch data"))
    assert view.loading is False
    assert view.error == "Failed to fetch data"
    assert view.rows == []


def test_view_keeps_stale_rows_alongside_error():
    view = build_view(FakeLoop(snapshot=ranked_snapshot(), error="Failed to fetch data"), "eth")
    assert view.error == "Failed to fetch data"
    assert [row.name for row in view.rows] == ["Ethereum"]
    assert view.rows[0].rank == 2
    assert view.total == 3


def test_no_matches_message_is_distinct_from_error():
    view = build_view(FakeLoop(snapshot=ranked_snapshot()), "dogecoin")
    assert view.error is None
    assert view.rows == []
    assert view.message == NO_MATCHES_MESSAGE
