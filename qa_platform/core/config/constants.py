"""
System Constants and Enumerations

This module defines system-wide constants and enumerations used across
the caching and metrics core.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for magic numbers
- Type-safe enums for the closed set of cache strategies
- Metric names and histogram buckets shared by registry and dashboards

Author: Platform Team
Date: 2025-12-05
"""

from enum import Enum

# ============================================================================
# Cache Strategies
# ============================================================================


class CacheStrategyName(str, Enum):
    """
    Identifiers of the built-in cache strategies.

    The value is what the registry is keyed by and what callers pass as
    ``CacheOptions.strategy``.
    """

    TTL = "TTL"
    CACHE_ASIDE = "CACHE_ASIDE"
    WRITE_THROUGH = "WRITE_THROUGH"


DEFAULT_CACHE_STRATEGY = CacheStrategyName.TTL.value

TTL_STRATEGY_DEFAULT_TTL = 3600  # 1 hour
CACHE_ASIDE_DEFAULT_TTL = 1800  # 30 minutes

# ============================================================================
# Cache Keys
# ============================================================================

CACHE_KEY_DEFAULT_PREFIX = "cache"
CACHE_KEY_DEFAULT_SEPARATOR = ":"
CACHE_KEY_LIST_SEGMENT = "list"
CACHE_MATCH_ALL_PATTERN = "*"

# ============================================================================
# Metric Names
# ============================================================================

METRIC_HTTP_REQUEST_DURATION = "http_request_duration_seconds"
METRIC_HTTP_REQUESTS_TOTAL = "http_requests_total"
METRIC_HTTP_REQUEST_ERRORS_TOTAL = "http_request_errors_total"
METRIC_DB_QUERY_DURATION = "database_query_duration_seconds"
METRIC_DB_QUERIES_TOTAL = "database_queries_total"
METRIC_CACHE_HITS_TOTAL = "cache_hits_total"
METRIC_CACHE_MISSES_TOTAL = "cache_misses_total"
METRIC_ACTIVE_CONNECTIONS = "active_connections"
METRIC_MEMORY_USAGE = "memory_usage_bytes"
METRIC_CPU_USAGE = "cpu_usage_percent"
METRIC_APP_INFO = "app"

# Sub-second to 10s granularity for request latency
HTTP_DURATION_BUCKETS = (0.1, 0.3, 0.5, 0.7, 1.0, 3.0, 5.0, 7.0, 10.0)
DB_DURATION_BUCKETS = (0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0)

# ============================================================================
# Instrumentation
# ============================================================================

METRICS_ENDPOINT_PATH = "/metrics"
HEALTH_ENDPOINT_PATH = "/health"
DEFAULT_EXCLUDED_ROUTES = (METRICS_ENDPOINT_PATH, HEALTH_ENDPOINT_PATH, "/favicon.ico")

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"

SYSTEM_METRICS_INTERVAL_SECONDS = 5.0

# ============================================================================
# HTTP Headers
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"
