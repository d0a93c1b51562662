"""Application lifespan: startup and shutdown.

Single place for startup/shutdown wiring (shared HTTP client, Firestore,
Redis session cache, telemetry flush); no business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from account_purge.core.config import get_settings
from account_purge.infrastructure.firebase.client import close_firebase, init_firebase
from account_purge.shared.telemetry.telemetry import get_telemetry, set_telemetry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: shared HTTP client, Firestore, Redis cache (if enabled).
    Telemetry is set up in create_app (instrumentation adds middleware, which
    must happen before the app starts); its provider is flushed here.
    """
    settings = get_settings()

    # ---- Startup ----
    # Shared HTTP client for Identity Toolkit calls (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)

    if not init_firebase(settings):
        logger.warning("Firestore not configured; account deletion is unavailable")

    if settings.redis_enabled:
        from account_purge.infrastructure.cache.redis_cache import CacheService

        cache = CacheService(settings=settings)
        await cache.connect()
        app.state.cache = cache
    else:
        app.state.cache = None

    yield

    # ---- Shutdown ----
    telemetry = get_telemetry()
    if telemetry is not None:
        telemetry.shutdown()
        set_telemetry(None)

    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        logger.info("Cache disconnected")

    await close_firebase()

    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("Shared HTTP client closed")
