from fastapi import HTTPException, Request

from ..jobs.loop import RefreshLoop


def get_refresh_loop(request: Request) -> RefreshLoop:
    loop = getattr(request.app.state, "refresh_loop", None)
    if loop is None:
        raise HTTPException(status_code=503, detail="Refresh loop is not running")
    return loop
