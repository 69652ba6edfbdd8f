"""
FastAPI Dependencies

Accessors for the singletons created in the application lifespan and
stored on ``app.state``. When the lifespan has not run (TestClient used
without a context manager), the process-wide instances are used instead.
"""

from typing import Annotated

from fastapi import Depends, Request

from qa_platform.core.config.settings import Settings, get_settings
from qa_platform.infrastructure.monitoring.metrics_registry import (
    MetricsRegistry,
    get_metrics_registry,
)


def get_metrics(request: Request) -> MetricsRegistry:
    metrics = getattr(request.app.state, "metrics", None)
    return metrics if metrics is not None else get_metrics_registry()


def get_store(request: Request):
    """The key-value store behind the cache, or None when Redis is unavailable."""
    return getattr(request.app.state, "store", None)


SettingsDep = Annotated[Settings, Depends(get_settings)]
MetricsDep = Annotated[MetricsRegistry, Depends(get_metrics)]
