"""Forwarding relay: proxies one fixed upstream endpoint so browsers can reach it cross-origin."""
from __future__ import annotations

import logging

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from ..config import Settings, get_settings
from ..observability import record_fetch_latency, record_relay

LOGGER = logging.getLogger(__name__)

RELAY_ERROR_BODY = {"error": "Failed to fetch data"}


def create_relay_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Crypto Search Relay", docs_url=None, redoc_url=None, openapi_url=None)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/api/coins")
    async def relay_coins() -> Response:
        try:
            async with httpx.AsyncClient(
                timeout=settings.relay_timeout_sec,
                headers={"accept": settings.relay_accept},
                transport=transport,
            ) as client:
                with record_fetch_latency("relay", settings):
                    upstream = await client.get(settings.relay_upstream_url)
                upstream.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            LOGGER.warning("Relay upstream request failed: %s", exc)
            return _relay_failure(settings)
        except Exception:
            LOGGER.exception("Relay request could not be completed")
            return _relay_failure(settings)

        record_relay(200, settings)
        return Response(
            content=upstream.content,
            status_code=200,
            media_type=upstream.headers.get("content-type", "application/json"),
        )

    return app


def _relay_failure(settings: Settings) -> JSONResponse:
    record_relay(500, settings)
    return JSONResponse(RELAY_ERROR_BODY, status_code=500)


app = create_relay_app()
