"""
Storage and Cache Instrumentation

Decorators that wrap sync or async callables and record Prometheus metrics
around them:

    @track_storage_operation("select", "questions")
    async def find_question(question_id): ...

    @track_cache("redis", "question:*")
    async def cached_question(question_id): ...

Recording never changes the wrapped call's outcome: the original return
value or exception always reaches the caller.

Author: Platform Team
Date: 2025-12-15
"""

import functools
import inspect
import time
from collections.abc import Callable, Sized
from typing import Any

from qa_platform.core.config.constants import STATUS_ERROR, STATUS_SUCCESS
from qa_platform.core.logging.logger import get_logger
from qa_platform.infrastructure.monitoring.metrics_registry import (
    MetricsRegistry,
    get_metrics_registry,
)

logger = get_logger(__name__)


def is_cache_hit(result: Any) -> bool:
    """
    Classify a cached-call result.

    None and empty collections are misses. Everything else is a hit,
    including falsy scalars such as 0, False and "".
    """
    if result is None:
        return False
    if isinstance(result, (str, bytes)):
        return True
    if isinstance(result, Sized):
        return len(result) > 0
    return True


# =============================================================================
# Storage-operation instrumentation
# =============================================================================


def _record_storage(
    registry: MetricsRegistry | None, operation: str, table: str, status: str, started: float
) -> None:
    duration = time.perf_counter() - started
    try:
        (registry or get_metrics_registry()).record_storage_operation(
            operation, table, status, duration
        )
    except Exception as e:
        logger.warning(
            "Failed to record storage metrics",
            stage="M.STORAGE",
            operation=operation,
            table=table,
            error=str(e),
        )


def track_storage_operation(
    operation: str, table: str, registry: MetricsRegistry | None = None
) -> Callable[[Callable], Callable]:
    """
    Record duration and outcome of a storage operation.

    Emits ``database_query_duration_seconds{operation, table}`` and
    ``database_queries_total{operation, table, status}`` with status
    ``success`` or ``error``. Errors are re-raised after recording.
    """

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception:
                    _record_storage(registry, operation, table, STATUS_ERROR, started)
                    raise
                _record_storage(registry, operation, table, STATUS_SUCCESS, started)
                return result

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                _record_storage(registry, operation, table, STATUS_ERROR, started)
                raise
            _record_storage(registry, operation, table, STATUS_SUCCESS, started)
            return result

        return sync_wrapper

    return decorator


# =============================================================================
# Cache instrumentation
# =============================================================================


def _record_cache(
    registry: MetricsRegistry | None, cache_type: str, key_pattern: str, result: Any
) -> None:
    try:
        metrics = registry or get_metrics_registry()
        if is_cache_hit(result):
            metrics.record_cache_hit(cache_type, key_pattern)
        else:
            metrics.record_cache_miss(cache_type, key_pattern)
    except Exception as e:
        logger.warning(
            "Failed to record cache metrics",
            stage="M.CACHE",
            cache_type=cache_type,
            key_pattern=key_pattern,
            error=str(e),
        )


def track_cache(
    cache_type: str, key_pattern: str, registry: MetricsRegistry | None = None
) -> Callable[[Callable], Callable]:
    """
    Count hits and misses of a cache lookup.

    The wrapped call's return value is classified with is_cache_hit(). A
    call that raises records neither a hit nor a miss.
    """

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                result = await func(*args, **kwargs)
                _record_cache(registry, cache_type, key_pattern, result)
                return result

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            result = func(*args, **kwargs)
            _record_cache(registry, cache_type, key_pattern, result)
            return result

        return sync_wrapper

    return decorator
