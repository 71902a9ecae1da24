# =============================================================================
# app/routers/metrics.py - Prometheus Metrics Endpoints
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter, Response

from lib.metrics import get_metrics_collector

router = APIRouter()


@router.get("", response_class=Response)
async def get_metrics():
    """Application metrics in Prometheus text format."""
    body, content_type = get_metrics_collector().export()
    return Response(content=body, media_type=content_type)


@router.get("/health")
async def metrics_health():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "message": "Metrics endpoint is healthy",
    }
