import asyncio

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter()


async def _until_disconnect(ws: WebSocket) -> None:
    # Inbound frames are ignored; only the close matters.
    while True:
        message = await ws.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/coins")
async def stream_coins(ws: WebSocket):
    loop = getattr(ws.app.state, "refresh_loop", None)
    await ws.accept()
    if loop is None:
        await ws.close(code=1011)
        return
    # Latest snapshot first, then one message per publish.
    with loop.broadcast.subscribe() as subscription:
        disconnected = asyncio.create_task(_until_disconnect(ws))
        pending = None
        try:
            while True:
                pending = asyncio.create_task(subscription.get())
                done, _ = await asyncio.wait({pending, disconnected}, return_when=asyncio.FIRST_COMPLETED)
                if disconnected in done:
                    break
                await ws.send_json({"type": "snapshot", **pending.result().as_payload()})
        except WebSocketDisconnect:
            pass
        finally:
            disconnected.cancel()
            if pending is not None:
                pending.cancel()
