#!/usr/bin/env python3
"""
FastAPI Application Entry Point

Wires the caching and metrics core into a FastAPI application:
- Redis key-value store and the strategy-based cache service
- Prometheus metrics registry, HTTP metrics middleware and system sampler
- /metrics and /health routes

Author: Platform Team
Date: 2025-12-05
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from qa_platform.application.api.middleware import HttpMetricsMiddleware
from qa_platform.application.api.routes.health import router as health_router
from qa_platform.application.api.routes.metrics import router as metrics_router
from qa_platform.core.config.constants import HEADER_REQUEST_ID
from qa_platform.core.config.settings import get_settings
from qa_platform.core.exceptions import CacheConnectionError, QAPlatformError
from qa_platform.core.logging.logger import (
    clear_request_id,
    get_logger,
    set_request_id,
    setup_logging,
)
from qa_platform.infrastructure.cache.cache_service import close_cache_service, init_cache_service
from qa_platform.infrastructure.cache.redis_client import close_redis, get_redis_client, init_redis
from qa_platform.infrastructure.monitoring.metrics_registry import get_metrics_registry
from qa_platform.infrastructure.monitoring.system_metrics import SystemMetricsSampler

logger = get_logger(__name__)


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).

    Redis being unreachable at startup is not fatal: the cache strategies
    treat store failures as misses, /health reports "degraded", and the
    Redis client reconnects on a later call once the server is back.
    """
    settings = get_settings()

    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    logger.info(
        "Starting question-answer platform",
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
    )

    metrics = get_metrics_registry()
    sampler = SystemMetricsSampler(metrics, settings=settings)

    try:
        try:
            store = await init_redis()
            logger.info("Redis connected")
        except CacheConnectionError as e:
            store = get_redis_client()
            logger.warning("Redis unavailable, running with degraded cache", error=e.message)

        app.state.store = store
        app.state.metrics = metrics
        app.state.sampler = sampler
        app.state.cache_service = init_cache_service(store, settings)

        await sampler.start()

        logger.info("Application startup complete")

        yield

    finally:
        logger.info("Shutting down application")

        await sampler.stop()
        close_cache_service()
        await close_redis()

        logger.info("Application shutdown complete")


# ============================================================================
# Application Factory
# ============================================================================


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Caching and metrics core for the question-answer platform",
        lifespan=lifespan,
    )

    app.add_middleware(HttpMetricsMiddleware, settings=settings)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Bind a request ID for log correlation and echo it back."""
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        set_request_id(request_id)
        try:
            response = await call_next(request)
            response.headers[HEADER_REQUEST_ID] = request_id
            return response
        finally:
            clear_request_id()

    @app.exception_handler(QAPlatformError)
    async def platform_exception_handler(request: Request, exc: QAPlatformError):
        logger.error(
            f"Platform exception: {exc.message}",
            error_type=type(exc).__name__,
            request_id=exc.request_id,
        )
        return JSONResponse(status_code=500, content=exc.to_dict())

    app.include_router(health_router)
    app.include_router(metrics_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "qa_platform.application.app:app",
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_level=settings.logging.LOG_LEVEL.lower(),
    )
