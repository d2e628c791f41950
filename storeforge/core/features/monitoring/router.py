from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from storeforge.core.features.monitoring.service import (
    check_db_status,
    check_event_bus_status,
    check_redis_status,
)

router = APIRouter(
    prefix="/monitoring",
    tags=["monitoring"]
)

@router.get("/health")
async def health_check():
    db_status = await check_db_status()
    redis_status = await check_redis_status()
    event_bus = await check_event_bus_status()

    # A disconnected event bus degrades delivery to the HTTP fallback only
    status = "ok" if db_status and redis_status else "error"
    if status == "ok" and not event_bus["connected"]:
        status = "degraded"

    return {
        "status": status,
        "details": {
            "database": "up" if db_status else "down",
            "redis": "up" if redis_status else "down",
            "event_bus": "up" if event_bus["connected"] else "down",
        }
    }

@router.get("/metrics")
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
