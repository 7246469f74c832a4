"""Application factory for creating FastAPI instances."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from app.api.v1.router import router as v1_router
from app.cache.rate_limit import setup_rate_limiting
from app.core.config import Settings, get_settings
from app.core.events.lifespan import lifespan
from app.core.exceptions import setup_exception_handlers
from app.core.middleware import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from app.observability.metrics import setup_metrics
from app.observability.tracing import setup_tracing


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        settings: Optional settings override. If not provided, uses get_settings().

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Kitchen companion API: recipes, pantry, shopping lists and more",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_non_production else None,
        redoc_url="/redoc" if settings.is_non_production else None,
        openapi_url="/openapi.json" if settings.is_non_production else None,
        debug=settings.app.debug,
    )
    app.state.settings = settings

    setup_exception_handlers(app)
    setup_rate_limiting(app)

    # Middleware is executed in reverse order of addition
    _setup_middleware(app, settings)

    app.include_router(v1_router, prefix=settings.api.v1_prefix)

    setup_tracing(app, settings)
    setup_metrics(app)

    return app


def _setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure the middleware stack.

    Order from the request's perspective: security headers, request ID,
    request logging, gzip, CORS.
    """
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Process-Time"],
        )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    prefix = settings.api.v1_prefix
    app.add_middleware(
        RequestLoggingMiddleware,
        exclude_paths={f"{prefix}/health", f"{prefix}/ready", f"{prefix}/metrics"},
    )
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
