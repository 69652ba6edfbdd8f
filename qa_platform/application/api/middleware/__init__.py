"""
Middleware Package

- http_metrics: Prometheus request count, error count and latency
"""

from qa_platform.application.api.middleware.http_metrics import (
    HttpMetricsMiddleware,
    sanitize_route_path,
)

__all__ = ["HttpMetricsMiddleware", "sanitize_route_path"]
