"""
Application layer package.

This package contains the services and interfaces that implement event
emission, delivery and monitoring.
"""

from .interfaces.repositories import (
    AuditLogRepositoryInterface,
    ResourceRepositoryInterface,
)
from .interfaces.services import AlertNotifierInterface
from .services.retry_handler import RetryHandler
from .services.sync_monitor import SyncMonitor
from .services.sync_queue import SyncQueue
from .services.sync_service import SyncConfig, SyncService
from .services.webhook_dispatcher import WebhookDispatcher

__all__ = [
    # Interfaces
    "AuditLogRepositoryInterface",
    "ResourceRepositoryInterface",
    "AlertNotifierInterface",
    # Services
    "RetryHandler",
    "SyncQueue",
    "WebhookDispatcher",
    "SyncMonitor",
    "SyncConfig",
    "SyncService",
]
