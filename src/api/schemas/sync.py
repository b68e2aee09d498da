"""
Sync-related API schemas.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .common import BaseResponse


class QueueStatsResponse(BaseModel):
    """Sync queue counters."""

    total: int = Field(..., description="Items currently held by the queue")
    processing: int = Field(..., description="Items being dispatched")
    pending: int = Field(..., description="Items waiting for their next attempt")
    failed: int = Field(..., description="Exhausted items awaiting audit")


class ProcessQueueRequest(BaseModel):
    """Manual queue processing request."""

    batch_size: Optional[int] = Field(None, ge=1, le=1000)


class ProcessQueueResponse(BaseResponse):
    """Result of one processing cycle."""

    processed: int
    completed: int
    failed: int
    exhausted: int
    evicted: int
    queue: QueueStatsResponse


class SyncFailureResponse(BaseModel):
    """Failure audit record."""

    id: str
    event_id: Optional[str] = None
    event_type: Optional[str] = None
    resource_id: Optional[str] = None
    resource_type: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0
    first_failed_at: Optional[datetime] = None
    last_failed_at: Optional[datetime] = None
    resolved: bool = False
    resolved_at: Optional[datetime] = None
    terminal: bool = False


class FailureStatsResponse(BaseModel):
    """Failure counts over a time range."""

    total_failures: int
    failures_by_type: Dict[str, int]
    failures_by_resource: Dict[str, int]
    average_retries: float


class SyncHealthResponse(BaseModel):
    """Delivery health verdict."""

    healthy: bool
    failure_rate: float
    recent_failures: int
    recent_successes: int
    message: str


class EndpointResultSchema(BaseModel):
    """Outcome of one webhook call."""

    url: str
    success: bool
    status_code: Optional[int] = None
    duration_ms: float = 0.0


class SyncNowResponse(BaseResponse):
    """Result of an immediate sync."""

    event_id: str
    endpoints: List[EndpointResultSchema] = Field(default_factory=list)
