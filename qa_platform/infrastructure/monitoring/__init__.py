"""
Monitoring Module

Prometheus metrics registry, instrumentation decorators and the system
metrics sampler.
"""

from qa_platform.infrastructure.monitoring.instrumentation import (
    is_cache_hit,
    track_cache,
    track_storage_operation,
)
from qa_platform.infrastructure.monitoring.metrics_registry import (
    MetricsRegistry,
    get_metrics_registry,
    reset_metrics_registry,
)
from qa_platform.infrastructure.monitoring.system_metrics import SystemMetricsSampler

__all__ = [
    "MetricsRegistry",
    "SystemMetricsSampler",
    "get_metrics_registry",
    "is_cache_hit",
    "reset_metrics_registry",
    "track_cache",
    "track_storage_operation",
]
