# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
#
# Indicator results look like:
#   {"database": {"status": "up", "message": "Database connection is healthy"}}
#
# /health/ready, /health/database and /health/stellar answer 503 when any
# indicator is down.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.config import settings
from core.services.stellar_service import StellarService, get_stellar_service
from lib.metrics import get_metrics_collector
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter()

APP_VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str
    message: str


class HealthCheckResponse(BaseModel):
    """Aggregate of one or more indicators."""
    status: str
    info: dict[str, Any]
    error: dict[str, Any]
    details: dict[str, Any]


# =============================================================================
# Indicators
# =============================================================================

def check_database() -> dict[str, Any]:
    """Run a cheap query against the database."""
    try:
        SupabaseClient.ping()
    except SupabaseClientError as e:
        logger.error(f"Database health check failed: {e}")
        get_metrics_collector().record_db_connection_status(False)
        return {"database": {"status": "down", "message": e.message}}

    get_metrics_collector().record_db_connection_status(True)
    return {"database": {"status": "up", "message": "Database connection is healthy"}}


async def check_stellar(stellar: StellarService) -> dict[str, Any]:
    """Ask Horizon whether the network is reachable."""
    if await stellar.check_network_health():
        return {"stellar": {
            "status": "up",
            "message": "Stellar network is reachable",
            "network": stellar.get_network_info(),
        }}

    logger.error("Stellar health check failed")
    return {"stellar": {"status": "down", "message": "Unable to connect to Stellar network"}}


def _aggregate(*results: dict[str, Any]) -> JSONResponse:
    details: dict[str, Any] = {}
    for result in results:
        details.update(result)

    info = {name: result for name, result in details.items() if result["status"] == "up"}
    error = {name: result for name, result in details.items() if result["status"] != "up"}
    healthy = not error

    body = HealthCheckResponse(
        status="ok" if healthy else "error",
        info=info,
        error=error,
        details=details,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Returns basic health status for load balancers and monitoring.
    """
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.ENVIRONMENT,
        version=APP_VERSION,
    )


@router.get("/ready", response_model=HealthCheckResponse)
async def readiness_check(stellar: StellarService = Depends(get_stellar_service)):
    """
    Readiness check endpoint.

    Checks the database and the Stellar network.
    """
    return _aggregate(await run_in_threadpool(check_database), await check_stellar(stellar))


@router.get("/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive.
    Used by Kubernetes/Docker for restart decisions.
    """
    return LivenessResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        message="Application is alive",
    )


@router.get("/database", response_model=HealthCheckResponse)
def database_check():
    return _aggregate(check_database())


@router.get("/stellar", response_model=HealthCheckResponse)
async def stellar_check(stellar: StellarService = Depends(get_stellar_service)):
    return _aggregate(await check_stellar(stellar))
