"""
Application services package.
"""

from .retry_handler import (
    RetryHandler,
    calculate_backoff,
    calculate_base_delay,
    retry_with_backoff,
)
from .sync_monitor import FailureStats, LoggingAlertNotifier, SyncHealth, SyncMonitor
from .sync_queue import QueueFailure, QueueStats, SyncQueue
from .sync_service import ProcessQueueResult, SyncConfig, SyncService
from .webhook_dispatcher import DispatchResult, EndpointResult, WebhookDispatcher

__all__ = [
    "RetryHandler",
    "calculate_backoff",
    "calculate_base_delay",
    "retry_with_backoff",
    "SyncQueue",
    "QueueFailure",
    "QueueStats",
    "WebhookDispatcher",
    "DispatchResult",
    "EndpointResult",
    "SyncMonitor",
    "SyncHealth",
    "FailureStats",
    "LoggingAlertNotifier",
    "SyncService",
    "SyncConfig",
    "ProcessQueueResult",
]
