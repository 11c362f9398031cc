import dataclasses
import random

import pytest

from coin_search.config import ProviderShape
from coin_search.core.normalize import normalize
from coin_search.core.ranking import rank_records
from coin_search.models import AssetRecord, Snapshot

from conftest import coingecko_item


def make_record(identifier: str, market_cap: float | None) -> AssetRecord:
    return AssetRecord(identifier=identifier, display_name=identifier.upper(), symbol=identifier, market_cap=market_cap)


def test_end_to_end_three_items(settings):
    payload = [
        coingecko_item("a", "A", "a", 500),
        coingecko_item("b", "B", "b", 1500),
        coingecko_item("c", "C", "c", 1000),
    ]
    ranked = rank_records(normalize(payload, ProviderShape.COINGECKO, settings))
    assert [(r.display_name, r.rank) for r in ranked] == [("B", 1), ("C", 2), ("A", 3)]


def test_ranks_are_contiguous_and_caps_non_increasing():
    rng = random.Random(7)
    records = [make_record(f"c{i}", float(rng.randint(0, 50))) for i in range(200)]
    ranked = rank_records(records)
    assert [r.rank for r in ranked] == list(range(1, 201))
    caps = [r.market_cap for r in ranked]
    assert all(a >= b for a, b in zip(caps, caps[1:]))


def test_ties_preserve_input_order():
    records = [make_record("x", 10), make_record("y", 20), make_record("z", 10), make_record("w", 20)]
    ranked = rank_records(records)
    assert [r.identifier for r in ranked] == ["y", "w", "x", "z"]


def test_unknown_market_cap_ranks_last():
    ranked = rank_records([make_record("none", None), make_record("zero", 0), make_record("big", 5)])
    assert [r.identifier for r in ranked] == ["big", "zero", "none"]
    assert ranked[-1].rank == 3


def test_existing_rank_is_overwritten():
    stale = make_record("a", 1).model_copy(update={"rank": 42})
    assert rank_records([make_record("b", 2), stale])[1].rank == 2


def test_snapshot_index_matches_records():
    snapshot = Snapshot.from_ranked(rank_records([make_record("a", 1), make_record("b", 2)]), ProviderShape.COINGECKO)
    assert len(snapshot) == 2
    assert snapshot.get("b").rank == 1
    assert snapshot.index["a"] is snapshot.records[1]
    assert snapshot.get("missing") is None


def test_snapshot_cannot_be_mutated_after_publishing():
    snapshot = Snapshot.from_ranked(rank_records([AssetRecord(identifier="a", display_name="A", symbol="A", market_cap=1)]), ProviderShape.COINGECKO)
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.records = ()
    with pytest.raises(TypeError):
        snapshot.index["b"] = snapshot.records[0]
