"""
Health Check Routes

GET /health reports application status and whether the key-value store
answers a ping. The cache degrades to misses when Redis is down, so an
unreachable store marks the service "degraded" (HTTP 503) rather than dead.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from qa_platform.application.api.dependencies import SettingsDep, get_store
from qa_platform.core.config.constants import HEALTH_ENDPOINT_PATH
from qa_platform.core.logging.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str  # "healthy" or "degraded"
    timestamp: str
    version: str
    components: dict | None = None


@router.get(HEALTH_ENDPOINT_PATH, response_model=HealthResponse)
async def health_check(settings: SettingsDep, store=Depends(get_store)):
    """
    Returns:
        200 with status "healthy" when the store answers a ping,
        503 with status "degraded" otherwise

    Stores that expose health_check() (the Redis client) also report ping
    latency and pool size under components.
    """
    store_ok = False
    details: dict = {}

    if store is not None:
        store_health = getattr(store, "health_check", None)
        if store_health is not None:
            report = await store_health()
            store_ok = report["status"] == "healthy"
            details = {
                "redis_ping_latency_ms": report["ping_latency_ms"],
                "redis_pool_size": report["pool_size"],
            }
        else:
            store_ok = await store.ping()

    body = HealthResponse(
        status="healthy" if store_ok else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app.APP_VERSION,
        components={"redis": "up" if store_ok else "down", **details},
    )

    if not store_ok:
        logger.warning("Health check degraded", stage="HEALTH", redis="down")
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
