#!/usr/bin/env python3
"""
Metrics Registry with Prometheus Integration

This module owns every Prometheus instrument exposed by the platform:
- HTTP request latency histogram, request and error counters
- Storage-operation (database query) latency histogram and counter
- Cache hit/miss counters by cache type and key pattern
- Active connection, memory and CPU gauges

Architectural Decision: one explicit registry object
- Instruments live on a private CollectorRegistry, registered once
- Tests build a fresh MetricsRegistry instead of sharing module globals
- The process-wide instance is reachable through get_metrics_registry()

Author: Platform Team
Date: 2025-12-05
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from prometheus_client.gc_collector import GCCollector
from prometheus_client.platform_collector import PlatformCollector
from prometheus_client.process_collector import ProcessCollector

from qa_platform.core.config.constants import (
    DB_DURATION_BUCKETS,
    HTTP_DURATION_BUCKETS,
    METRIC_ACTIVE_CONNECTIONS,
    METRIC_APP_INFO,
    METRIC_CACHE_HITS_TOTAL,
    METRIC_CACHE_MISSES_TOTAL,
    METRIC_CPU_USAGE,
    METRIC_DB_QUERIES_TOTAL,
    METRIC_DB_QUERY_DURATION,
    METRIC_HTTP_REQUEST_DURATION,
    METRIC_HTTP_REQUEST_ERRORS_TOTAL,
    METRIC_HTTP_REQUESTS_TOTAL,
    METRIC_MEMORY_USAGE,
)
from qa_platform.core.config.settings import Settings, get_settings
from qa_platform.core.exceptions import MetricsError
from qa_platform.core.logging.logger import get_logger

logger = get_logger(__name__)

HTTP_LABELS = ("method", "route", "status_code")
STORAGE_DURATION_LABELS = ("operation", "table")
STORAGE_TOTAL_LABELS = ("operation", "table", "status")
CACHE_LABELS = ("cache_type", "key_pattern")


class MetricsRegistry:
    """
    Centralized metrics registry.

    STAGE-M: Metrics collection

    Usage:
        metrics = MetricsRegistry()

        metrics.record_http_request("GET", "/questions/{question_id}", 200, 0.042)
        metrics.record_cache_hit("redis", "question:*")

        output = metrics.get_metrics()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        registry: CollectorRegistry | None = None,
        default_collectors: bool | None = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry or CollectorRegistry()

        if default_collectors is None:
            default_collectors = self.settings.metrics.METRICS_DEFAULT_COLLECTORS
        if default_collectors:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

        # HTTP metrics
        self.http_request_duration = Histogram(
            METRIC_HTTP_REQUEST_DURATION,
            'Duration of HTTP requests in seconds',
            HTTP_LABELS,
            buckets=HTTP_DURATION_BUCKETS,
            registry=self.registry,
        )
        self.http_requests_total = Counter(
            METRIC_HTTP_REQUESTS_TOTAL,
            'Total number of HTTP requests',
            HTTP_LABELS,
            registry=self.registry,
        )
        self.http_request_errors_total = Counter(
            METRIC_HTTP_REQUEST_ERRORS_TOTAL,
            'Total number of HTTP request errors',
            HTTP_LABELS,
            registry=self.registry,
        )

        # Storage-operation metrics
        self.db_query_duration = Histogram(
            METRIC_DB_QUERY_DURATION,
            'Duration of database queries in seconds',
            STORAGE_DURATION_LABELS,
            buckets=DB_DURATION_BUCKETS,
            registry=self.registry,
        )
        self.db_queries_total = Counter(
            METRIC_DB_QUERIES_TOTAL,
            'Total number of database queries',
            STORAGE_TOTAL_LABELS,
            registry=self.registry,
        )

        # Cache metrics
        self.cache_hits_total = Counter(
            METRIC_CACHE_HITS_TOTAL,
            'Total number of cache hits',
            CACHE_LABELS,
            registry=self.registry,
        )
        self.cache_misses_total = Counter(
            METRIC_CACHE_MISSES_TOTAL,
            'Total number of cache misses',
            CACHE_LABELS,
            registry=self.registry,
        )

        # System metrics
        self.active_connections = Gauge(
            METRIC_ACTIVE_CONNECTIONS,
            'Number of active connections',
            ['type'],
            registry=self.registry,
        )
        self.memory_usage = Gauge(
            METRIC_MEMORY_USAGE,
            'Memory usage in bytes',
            ['type'],
            registry=self.registry,
        )
        self.cpu_usage = Gauge(
            METRIC_CPU_USAGE,
            'CPU usage percentage',
            registry=self.registry,
        )

        self.app_info = Info(METRIC_APP_INFO, 'Application information', registry=self.registry)
        self.app_info.info({
            'app': self.settings.app.APP_NAME,
            'version': self.settings.app.APP_VERSION,
            'environment': self.settings.app.ENVIRONMENT,
        })

        logger.info(
            "Metrics registry initialized",
            stage="M.0",
            default_collectors=default_collectors,
        )

    # =========================================================================
    # HTTP Metrics
    # =========================================================================

    def record_http_request(
        self, method: str, route: str, status_code: int | str, duration_seconds: float
    ) -> None:
        """
        Record one completed HTTP request.

        Observes the duration, increments the request counter and, for status
        codes >= 400, the error counter.
        """
        try:
            code = int(status_code)
        except (TypeError, ValueError) as e:
            raise MetricsError(
                f"Invalid HTTP status code: {status_code!r}",
                details={"method": method, "route": route},
            ) from e

        labels = {"method": method, "route": route, "status_code": str(code)}
        self.http_request_duration.labels(**labels).observe(duration_seconds)
        self.http_requests_total.labels(**labels).inc()
        if code >= 400:
            self.http_request_errors_total.labels(**labels).inc()

    # =========================================================================
    # Storage-operation Metrics
    # =========================================================================

    def record_storage_operation(
        self, operation: str, table: str, status: str, duration_seconds: float
    ) -> None:
        self.db_query_duration.labels(operation=operation, table=table).observe(duration_seconds)
        self.db_queries_total.labels(operation=operation, table=table, status=status).inc()

    # =========================================================================
    # Cache Metrics
    # =========================================================================

    def record_cache_hit(self, cache_type: str, key_pattern: str) -> None:
        self.cache_hits_total.labels(cache_type=cache_type, key_pattern=key_pattern).inc()

    def record_cache_miss(self, cache_type: str, key_pattern: str) -> None:
        self.cache_misses_total.labels(cache_type=cache_type, key_pattern=key_pattern).inc()

    # =========================================================================
    # System Metrics
    # =========================================================================

    def set_active_connections(self, count: int, connection_type: str = "http") -> None:
        self.active_connections.labels(type=connection_type).set(count)

    def increment_connections(self, connection_type: str = "http") -> None:
        self.active_connections.labels(type=connection_type).inc()

    def decrement_connections(self, connection_type: str = "http") -> None:
        self.active_connections.labels(type=connection_type).dec()

    def set_memory_usage(self, memory_type: str, value_bytes: float) -> None:
        self.memory_usage.labels(type=memory_type).set(value_bytes)

    def set_cpu_usage(self, percent: float) -> None:
        self.cpu_usage.set(percent)

    # =========================================================================
    # Export
    # =========================================================================

    def get_metrics(self) -> bytes:
        """
        Render every metric in this registry.

        Returns:
            bytes: Prometheus text exposition format
        """
        return generate_latest(self.registry)

    def get_content_type(self) -> str:
        return CONTENT_TYPE_LATEST


# Global metrics registry
_metrics: MetricsRegistry | None = None


def get_metrics_registry() -> MetricsRegistry:
    """Get the process-wide metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics


def reset_metrics_registry() -> None:
    """Drop the process-wide registry (tests)."""
    global _metrics
    _metrics = None
