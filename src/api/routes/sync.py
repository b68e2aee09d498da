"""
Operator endpoints for the sync queue and failure audit trail.
"""

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query

from src.api.dependencies import SyncMonitorDep, SyncServiceDep, WorkerManagerDep
from src.api.schemas.sync import (
    EndpointResultSchema,
    FailureStatsResponse,
    ProcessQueueRequest,
    ProcessQueueResponse,
    QueueStatsResponse,
    SyncFailureResponse,
    SyncNowResponse,
)
from src.application.services.webhook_dispatcher import DispatchResult
from src.config.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/sync", tags=["sync"])


def _sync_now_response(result: DispatchResult) -> SyncNowResponse:
    return SyncNowResponse(
        message=f"Event delivered to {len(result.endpoint_results)} endpoint(s)",
        event_id=result.event_id,
        endpoints=[
            EndpointResultSchema(
                url=endpoint.url,
                success=endpoint.success,
                status_code=endpoint.status_code,
                duration_ms=endpoint.duration_ms,
            )
            for endpoint in result.endpoint_results
        ],
    )


@router.get("/queue/stats", response_model=QueueStatsResponse)
async def get_queue_stats(sync_service: SyncServiceDep):
    """Get sync queue statistics."""
    return QueueStatsResponse(**sync_service.get_queue_stats().to_dict())


@router.post("/queue/process", response_model=ProcessQueueResponse)
async def process_queue(
    sync_service: SyncServiceDep, body: Optional[ProcessQueueRequest] = None
):
    """Run one queue processing cycle now."""
    batch_size = body.batch_size if body else None
    result = await sync_service.process_queue(batch_size)

    logger.info("Manual queue processing triggered", **result.to_dict())

    return ProcessQueueResponse(
        **result.to_dict(),
        queue=QueueStatsResponse(**sync_service.get_queue_stats().to_dict()),
    )


@router.get("/failures", response_model=List[SyncFailureResponse])
async def get_recent_failures(
    monitor: SyncMonitorDep, limit: int = Query(50, ge=1, le=500)
):
    """Get the most recent failure records, newest first."""
    failures = await monitor.get_recent_failures(limit)
    return [SyncFailureResponse(**asdict(failure)) for failure in failures]


@router.get("/failures/stats", response_model=FailureStatsResponse)
async def get_failure_stats(
    monitor: SyncMonitorDep,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
):
    """Aggregate failures by event type and resource type."""
    stats = await monitor.get_failure_stats(start, end)
    return FailureStatsResponse(**stats.to_dict())


@router.post("/enrollments/{enrollment_id}/sync-now", response_model=SyncNowResponse)
async def sync_enrollment_now(enrollment_id: str, sync_service: SyncServiceDep):
    """Deliver the current enrollment snapshot immediately."""
    result = await sync_service.sync_enrollment_now(enrollment_id)
    return _sync_now_response(result)


@router.post("/profiles/{user_id}/sync-now", response_model=SyncNowResponse)
async def sync_profile_now(user_id: str, sync_service: SyncServiceDep):
    """Deliver the current profile snapshot immediately."""
    result = await sync_service.sync_profile_now(user_id)
    return _sync_now_response(result)


@router.get("/workers/status")
async def get_workers_status(worker_manager: WorkerManagerDep) -> Dict[str, Any]:
    """Get status of the background queue workers."""
    if worker_manager is None:
        return {"status": "disabled", "workers": {}}
    return worker_manager.get_health_status()
