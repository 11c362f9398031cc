"""Coin table endpoints backed by the latest published snapshot."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.view import CoinTableView, build_view
from ..jobs.loop import RefreshLoop
from ..models import AssetRecord
from ._deps import get_refresh_loop

router = APIRouter()


@router.get("", response_model=CoinTableView)
async def list_coins(
    search: str = Query(default="", max_length=100),
    loop: RefreshLoop = Depends(get_refresh_loop),
) -> CoinTableView:
    return build_view(loop, search)


@router.get("/{identifier}", response_model=AssetRecord)
async def get_coin(identifier: str, loop: RefreshLoop = Depends(get_refresh_loop)) -> AssetRecord:
    snapshot = loop.snapshot
    record = snapshot.get(identifier) if snapshot is not None else None
    if record is None:
        raise HTTPException(status_code=404, detail=f"Unknown coin {identifier!r}")
    return record
