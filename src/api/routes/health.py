"""
Health check endpoints for the application.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse, Response

from src.api.dependencies import HealthCheckerDep, SyncServiceDep
from src.api.schemas.sync import SyncHealthResponse
from src.config.logging import get_logger
from src.infrastructure.monitoring.metrics import get_metrics, get_metrics_content_type

logger = get_logger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/")
async def health_check(health_checker: HealthCheckerDep) -> Dict[str, Any]:
    """Overall health with per-component details."""
    health_status = await health_checker.get_overall_health()
    return health_status.to_dict()


@router.get("/ready")
async def readiness_check(health_checker: HealthCheckerDep) -> Dict[str, Any]:
    """Readiness check for Kubernetes."""
    readiness = await health_checker.check_readiness()

    if not readiness.is_healthy:
        logger.warning("Service not ready", checks=readiness.checks)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready",
        )

    return {"status": "ready", "timestamp": readiness.timestamp}


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    """Liveness check for Kubernetes."""
    return {"status": "alive", "timestamp": _timestamp()}


@router.get("/sync", response_model=SyncHealthResponse)
async def sync_health_check(sync_service: SyncServiceDep):
    """Webhook delivery health over the trailing window. 503 when degraded."""
    health = await sync_service.check_sync_health()

    if not health.healthy:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health.to_dict()
        )

    return SyncHealthResponse(**health.to_dict())


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """Prometheus metrics endpoint."""
    try:
        metrics_data = get_metrics()
        content_type = get_metrics_content_type()

        logger.debug("Prometheus metrics requested")

        return Response(content=metrics_data, media_type=content_type)

    except Exception as e:
        logger.error("Failed to generate Prometheus metrics", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate metrics",
        )
