from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from ..jobs.loop import RefreshLoop
from ._deps import get_refresh_loop

router = APIRouter()


@router.get("/health")
async def health(loop: RefreshLoop = Depends(get_refresh_loop)) -> dict[str, Any]:
    """Refresh loop status: cycle counters, last success/error, current record count."""
    state = loop.health_state()
    state["status"] = "ok" if loop.snapshot is not None and loop.error is None else "degraded"
    state["asof"] = datetime.now(timezone.utc).isoformat()
    return state
