from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import Settings, get_settings
from .routers import rooms as rooms_router
from .routers import websockets as ws_router
from .state import manager

logger = logging.getLogger(__name__)


async def _sweep_idle_rooms(ttl_seconds: float, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        manager.submit_expire(ttl_seconds)


# Custom StaticFiles variant that disables caching for the client assets.
class NoCacheStaticFiles(StaticFiles):
    async def get_response(self, path: str, scope):  # type: ignore[override]
        response = await super().get_response(path, scope)
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        manager.start()
        sweeper: Optional[asyncio.Task] = None
        if settings.ROOM_IDLE_TTL_SECONDS > 0:
            sweeper = asyncio.create_task(
                _sweep_idle_rooms(settings.ROOM_IDLE_TTL_SECONDS, settings.ROOM_SWEEP_INTERVAL_SECONDS)
            )
            logger.info("Idle rooms expire after %ss", settings.ROOM_IDLE_TTL_SECONDS)
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                try:
                    await sweeper
                except asyncio.CancelledError:
                    pass
            await manager.stop()

    # -----------------------------
    # FastAPI app instance
    # -----------------------------

    application = FastAPI(title="Aeroplane Chess Matchmaking", lifespan=lifespan)

    # Allow all origins during development – adjust for production.
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers before the catch-all static mount.
    application.include_router(rooms_router.router)
    application.include_router(ws_router.router)

    # Everything else is a client asset; missing files fall back to 404.html.
    application.mount(
        "/",
        NoCacheStaticFiles(directory=settings.STATIC_DIR, html=True, check_dir=False),
        name="frontend",
    )

    return application


app = create_app()

__all__ = ["app", "create_app"]
