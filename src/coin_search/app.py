from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config import Settings, get_settings
from .jobs.loop import RefreshLoop
from .routers import coins, health, panel as panel_router, stream


def create_app(settings: Settings | None = None, refresh_loop: RefreshLoop | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        loop = refresh_loop or RefreshLoop.from_settings(settings)
        app.state.refresh_loop = loop
        loop.start()
        yield
        # Shutdown
        await loop.aclose()

    app = FastAPI(title="Crypto Search", description="Live market-cap ranking with search", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(panel_router.router, tags=["panel"])
    app.include_router(coins.router, prefix="/coins", tags=["coins"])
    app.include_router(stream.router, prefix="/stream", tags=["stream"])

    if settings.metrics_enabled:
        @app.get("/metrics", include_in_schema=False)
        async def metrics_endpoint() -> Response:
            return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
