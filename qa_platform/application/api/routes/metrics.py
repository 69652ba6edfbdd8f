"""
Metrics Route

GET /metrics renders the metrics registry in the Prometheus text
exposition format for scraping.
"""

from fastapi import APIRouter, Response

from qa_platform.application.api.dependencies import MetricsDep
from qa_platform.core.config.constants import METRICS_ENDPOINT_PATH

router = APIRouter(tags=["Metrics"])


@router.get(METRICS_ENDPOINT_PATH, include_in_schema=False)
async def prometheus_metrics(metrics: MetricsDep) -> Response:
    return Response(content=metrics.get_metrics(), media_type=metrics.get_content_type())
