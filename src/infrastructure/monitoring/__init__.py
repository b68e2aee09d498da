"""
Monitoring package.
"""

from .health_checks import HealthChecker, HealthStatus
from .metrics import (
    get_metrics,
    get_metrics_content_type,
    get_registry,
    record_event_completed,
    record_event_emitted,
    record_event_failed,
    record_queue_stats,
    record_webhook_delivery,
)

__all__ = [
    "HealthChecker",
    "HealthStatus",
    "get_metrics",
    "get_metrics_content_type",
    "get_registry",
    "record_event_emitted",
    "record_event_completed",
    "record_event_failed",
    "record_webhook_delivery",
    "record_queue_stats",
]
