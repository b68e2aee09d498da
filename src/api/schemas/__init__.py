"""
API schemas for the Course Sync Service.
"""

from .common import BaseResponse, ErrorResponse
from .sync import (
    EndpointResultSchema,
    FailureStatsResponse,
    ProcessQueueRequest,
    ProcessQueueResponse,
    QueueStatsResponse,
    SyncFailureResponse,
    SyncHealthResponse,
    SyncNowResponse,
)

__all__ = [
    "BaseResponse",
    "ErrorResponse",
    "QueueStatsResponse",
    "ProcessQueueRequest",
    "ProcessQueueResponse",
    "SyncFailureResponse",
    "FailureStatsResponse",
    "SyncHealthResponse",
    "EndpointResultSchema",
    "SyncNowResponse",
]
