"""FastAPI application wired with structured access logging."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from access_log.config import Settings, get_settings
from access_log.logging_config import configure_logging
from access_log.middleware import RequestLoggingMiddleware

logger = structlog.get_logger()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build an app with logging configured and the access log installed.

    Args:
        settings: Explicit settings; defaults to ``get_settings()``.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        configure_logging(
            environment=str(settings.environment),
            log_level=settings.log_level,
        )
        logger.info("app_started", environment=str(settings.environment))
        yield
        logger.info("app_stopped")

    app = FastAPI(
        title="Access Log",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.is_dev,
    )
    app.add_middleware(
        RequestLoggingMiddleware,
        **RequestLoggingMiddleware.options_from_settings(settings),
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
