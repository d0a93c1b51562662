"""FastAPI application entry point.

Wiring only: logging, telemetry, lifespan, exception handlers, middleware,
routers. No business logic here. See account_purge.core.lifespan and
account_purge.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and optionally
clear get_settings cache) before importing or calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from account_purge.api.v1 import api_router
from account_purge.core.config import Settings, get_settings
from account_purge.core.exception_handlers import register_exception_handlers
from account_purge.core.lifespan import create_lifespan
from account_purge.core.limiter import limiter
from account_purge.shared.telemetry import TelemetryConfig, set_telemetry, setup_logging


def _setup_telemetry(app: FastAPI, settings: Settings) -> None:
    """Configure tracing and instrument the app before it starts serving."""
    telemetry = TelemetryConfig.from_settings(settings)
    if telemetry.setup() is None:
        return
    set_telemetry(telemetry)
    telemetry.instrument(app)


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    setup_logging()
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")

    if settings.telemetry_enabled:
        _setup_telemetry(app, settings)

    return app


app = create_app()
