"""Application entry point."""

import sys

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app
from pydantic import ValidationError
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from weather_lookup import __version__
from weather_lookup.api.errors import EXCEPTION_HANDLERS
from weather_lookup.api.routes import api_router, root_router
from weather_lookup.config import Settings, get_settings
from weather_lookup.middleware.errors import UnhandledErrorMiddleware
from weather_lookup.middleware.logging import LoggingMiddleware, configure_logging
from weather_lookup.middleware.security import (
    BodySizeLimitMiddleware,
    SecurityHeadersMiddleware,
)

logger = structlog.get_logger()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = settings or get_settings()

    configure_logging(settings)

    app = FastAPI(
        title="Weather Lookup API",
        description="Proxy for OpenWeatherMap current weather and city search",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Rate limiting, in-memory per process
    app.state.limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
    )
    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    # Middleware added last runs first
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET"],
        allow_headers=["Content-Type"],
        max_age=86400,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(LoggingMiddleware)

    app.include_router(root_router)
    app.include_router(api_router)
    app.dependency_overrides[get_settings] = lambda: settings

    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    logger.info(
        "Application configured",
        environment=settings.environment,
        rate_limit=settings.rate_limit,
        cors_origins=settings.allowed_origins,
    )
    return app


def run() -> None:
    """Run the application with uvicorn.

    Missing required settings (API key, upstream URL) terminate the process.
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        missing = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
        logger.error("Invalid or missing configuration", fields=missing)
        sys.exit(1)

    uvicorn.run(
        "weather_lookup.main:create_app",
        factory=True,
        host=settings.app_host,
        port=settings.app_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
