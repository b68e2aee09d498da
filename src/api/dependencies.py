"""
FastAPI dependency injection container.
"""

from typing import Annotated, Optional

import httpx
from fastapi import Depends, Request

from src.application.interfaces.repositories import (
    AuditLogRepositoryInterface,
    ResourceRepositoryInterface,
)
from src.application.services.retry_handler import RetryHandler
from src.application.services.sync_monitor import SyncMonitor
from src.application.services.sync_queue import SyncQueue
from src.application.services.sync_service import SyncConfig, SyncService
from src.application.services.webhook_dispatcher import WebhookDispatcher
from src.background.workers import WorkerManager
from src.config.database import get_session_factory
from src.config.logging import get_logger
from src.config.settings import Settings
from src.infrastructure.database.repositories.audit_log_repository import (
    AuditLogRepository,
)
from src.infrastructure.database.repositories.memory_audit_log_repository import (
    InMemoryAuditLogRepository,
)
from src.infrastructure.database.repositories.resource_repository import (
    ResourceRepository,
)
from src.infrastructure.monitoring.health_checks import HealthChecker

logger = get_logger(__name__)


def build_audit_log_repository(settings: Settings) -> AuditLogRepositoryInterface:
    """Select the audit trail backend from settings."""
    if settings.AUDIT_LOG_BACKEND == "memory":
        return InMemoryAuditLogRepository()
    return AuditLogRepository(get_session_factory())


def build_sync_service(
    settings: Settings,
    audit_repo: Optional[AuditLogRepositoryInterface] = None,
    resources: Optional[ResourceRepositoryInterface] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SyncService:
    """Wire queue, dispatcher and monitor into a sync service."""
    config = SyncConfig.from_settings(settings)

    queue = SyncQueue(
        max_attempts=config.max_retry_attempts,
        base_delay_ms=config.initial_retry_delay_ms,
        max_delay_ms=config.max_retry_delay_ms,
    )
    dispatcher = WebhookDispatcher(
        config.webhook_urls,
        timeout_ms=config.webhook_timeout_ms,
        signing_secret=config.webhook_secret,
        transport=transport,
    )
    monitor = SyncMonitor(
        audit_repo or build_audit_log_repository(settings),
        retry_handler=RetryHandler(max_attempts=3, base_delay_ms=100, max_delay_ms=1000),
        health_window_minutes=settings.SYNC_HEALTH_WINDOW_MINUTES,
        max_failure_rate=settings.SYNC_HEALTH_MAX_FAILURE_RATE,
        max_failures=settings.SYNC_HEALTH_MAX_FAILURES,
    )

    logger.info(
        "Sync service configured",
        endpoints=len(dispatcher.webhook_urls),
        max_retry_attempts=config.max_retry_attempts,
        audit_log_backend=settings.AUDIT_LOG_BACKEND,
    )

    return SyncService(
        config=config,
        queue=queue,
        dispatcher=dispatcher,
        monitor=monitor,
        resources=resources or ResourceRepository(get_session_factory()),
    )


# Application state dependencies
async def get_sync_service(request: Request) -> SyncService:
    """Get the sync service created at startup."""
    return request.app.state.sync_service


async def get_sync_monitor(
    sync_service: SyncService = Depends(get_sync_service),
) -> SyncMonitor:
    """Get the sync monitor behind the sync service."""
    return sync_service.monitor


async def get_health_checker(request: Request) -> HealthChecker:
    """Get the health checker created at startup."""
    return request.app.state.health_checker


async def get_worker_manager(request: Request) -> Optional[WorkerManager]:
    """Get the worker manager, if background workers are enabled."""
    return getattr(request.app.state, "worker_manager", None)


# Type aliases for cleaner dependency injection
SyncServiceDep = Annotated[SyncService, Depends(get_sync_service)]
SyncMonitorDep = Annotated[SyncMonitor, Depends(get_sync_monitor)]
HealthCheckerDep = Annotated[HealthChecker, Depends(get_health_checker)]
WorkerManagerDep = Annotated[Optional[WorkerManager], Depends(get_worker_manager)]
