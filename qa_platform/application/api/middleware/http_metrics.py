"""
HTTP Metrics Middleware

Records Prometheus metrics for every instrumented HTTP request:

    http_request_duration_seconds{method, route, status_code}
    http_requests_total{method, route, status_code}
    http_request_errors_total{method, route, status_code}   (status >= 400)

The route label is the matched route template (``/questions/{question_id}``)
so label cardinality stays bounded; unmatched requests fall back to the
sanitized path.

Requests to excluded routes or with excluded methods, and requests dropped
by sampling, pass through untouched.
"""

import random
import time
from collections.abc import Callable, Iterable

from fastapi import Request, Response
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from qa_platform.core.config.settings import Settings, get_settings
from qa_platform.core.logging.logger import get_logger
from qa_platform.infrastructure.monitoring.metrics_registry import (
    MetricsRegistry,
    get_metrics_registry,
)

logger = get_logger(__name__)


def sanitize_route_path(path: str) -> str:
    """
    Normalize a raw request path for use as a label.

    Drops the query string and trailing slashes; an empty result becomes "/".
    """
    path = path.split("?", 1)[0].rstrip("/")
    return path or "/"


class HttpMetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware recording request count, error count and latency.

    Each instrumented request is recorded exactly once, after the response
    is produced or the handler has raised. Handler exceptions are re-raised
    unchanged; a failure while recording is logged and never replaces the
    request's outcome.
    """

    def __init__(
        self,
        app,
        registry: MetricsRegistry | None = None,
        settings: Settings | None = None,
        enabled: bool | None = None,
        excluded_routes: Iterable[str] | None = None,
        excluded_methods: Iterable[str] | None = None,
        sample_rate: float | None = None,
    ):
        super().__init__(app)
        cfg = (settings or get_settings()).metrics
        self._registry = registry
        self.enabled = cfg.METRICS_ENABLED if enabled is None else enabled
        if excluded_routes is None:
            excluded_routes = cfg.METRICS_EXCLUDED_ROUTES
        if excluded_methods is None:
            excluded_methods = cfg.METRICS_EXCLUDED_METHODS
        self.excluded_routes = {sanitize_route_path(route) for route in excluded_routes}
        self.excluded_methods = {method.upper() for method in excluded_methods}
        self.sample_rate = cfg.METRICS_SAMPLE_RATE if sample_rate is None else sample_rate

    def registry_for(self, request: Request) -> MetricsRegistry:
        if self._registry is not None:
            return self._registry
        app_metrics = getattr(request.app.state, "metrics", None)
        return app_metrics if app_metrics is not None else get_metrics_registry()

    def should_track(self, request: Request) -> bool:
        if not self.enabled:
            return False
        if sanitize_route_path(request.url.path) in self.excluded_routes:
            return False
        if request.method.upper() in self.excluded_methods:
            return False
        if self.sample_rate < 1.0 and random.random() >= self.sample_rate:
            return False
        return True

    @staticmethod
    def route_label(request: Request) -> str:
        route = request.scope.get("route")
        template = getattr(route, "path", None)
        if template:
            return template
        return sanitize_route_path(request.url.path)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.should_track(request):
            return await call_next(request)

        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except HTTPException as e:
            status_code = e.status_code
            raise
        finally:
            self._record(request, status_code, time.perf_counter() - start_time)

    def _record(self, request: Request, status_code: int, duration: float) -> None:
        try:
            self.registry_for(request).record_http_request(
                request.method, self.route_label(request), status_code, duration
            )
        except Exception as e:
            logger.warning(
                "Failed to record HTTP metrics",
                stage="M.HTTP",
                method=request.method,
                path=request.url.path,
                error=str(e),
            )
