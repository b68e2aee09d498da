"""
API package.
"""

from .app import create_app
from .dependencies import *
from .middleware import *
from .routes import *
from .schemas import *

__all__ = [
    "create_app",
    # Dependencies
    "build_sync_service",
    "SyncServiceDep",
    "SyncMonitorDep",
    "HealthCheckerDep",
    "WorkerManagerDep",
    # Middleware
    "ErrorHandlerMiddleware",
    "LoggingMiddleware",
    # Routes
    "health_router",
    "sync_router",
    # Schemas
    "BaseResponse",
    "ErrorResponse",
    "QueueStatsResponse",
    "ProcessQueueResponse",
    "SyncFailureResponse",
    "FailureStatsResponse",
    "SyncHealthResponse",
    "SyncNowResponse",
]
