"""
Sync monitoring: failure audit trail, statistics and health checks.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from src.application.interfaces.repositories import AuditLogRepositoryInterface
from src.application.interfaces.services import AlertNotifierInterface
from src.application.services.retry_handler import RetryHandler
from src.config.logging import get_logger
from src.domain.entities.audit_record import (
    SYNC_FAILURE_ACTION,
    SYNC_RECOVERY_ACTION,
    AuditRecord,
)
from src.domain.entities.sync_failure import SyncFailure
from src.domain.events.sync_event import SyncEvent, SyncEventType

logger = get_logger(__name__)

SUCCESS_ACTIONS = [event_type.audit_action for event_type in SyncEventType]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _assume_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Query strings without an offset are read as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class FailureStats:
    """Aggregated failure counts."""

    total_failures: int = 0
    failures_by_type: Dict[str, int] = field(default_factory=dict)
    failures_by_resource: Dict[str, int] = field(default_factory=dict)
    average_retries: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_failures": self.total_failures,
            "failures_by_type": self.failures_by_type,
            "failures_by_resource": self.failures_by_resource,
            "average_retries": self.average_retries,
        }


@dataclass
class SyncHealth:
    """Health verdict over the trailing window."""

    healthy: bool
    failure_rate: float
    recent_failures: int
    recent_successes: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "healthy": self.healthy,
            "failure_rate": self.failure_rate,
            "recent_failures": self.recent_failures,
            "recent_successes": self.recent_successes,
            "message": self.message,
        }


class LoggingAlertNotifier(AlertNotifierInterface):
    """Default notifier: the critical log line is the alert."""

    async def notify(self, event: SyncEvent, error: str) -> None:
        logger.debug("No paging integration configured", event_id=event.id)


class SyncMonitor:
    """
    Observer of delivery outcomes, outside the dispatch critical path.

    Writes go to the audit trail through the persistence collaborator and are
    retried with backoff. A write that still fails is logged and reported as
    ``False``; monitoring never raises into the dispatch path.
    """

    def __init__(
        self,
        audit_repo: AuditLogRepositoryInterface,
        notifier: Optional[AlertNotifierInterface] = None,
        retry_handler: Optional[RetryHandler] = None,
        health_window_minutes: int = 60,
        max_failure_rate: float = 0.10,
        max_failures: int = 10,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.audit_repo = audit_repo
        self.notifier = notifier or LoggingAlertNotifier()
        self.retry_handler = retry_handler or RetryHandler(
            max_attempts=3, base_delay_ms=100, max_delay_ms=1000
        )
        self.health_window_minutes = health_window_minutes
        self.max_failure_rate = max_failure_rate
        self.max_failures = max_failures
        self._clock = clock

    async def log_failure(
        self,
        event: SyncEvent,
        error: str,
        terminal: bool = False,
        attempts: Optional[int] = None,
    ) -> bool:
        """Append a ``sync.failure`` record for a failed dispatch."""
        now = self._clock()
        attempts = event.retry_count if attempts is None else attempts
        first_failed_at = event.first_failed_at or now

        record = AuditRecord(
            action=SYNC_FAILURE_ACTION,
            resource_type=event.resource_type.value,
            resource_id=event.resource_id,
            details={
                "eventId": event.id,
                "eventType": event.type.value,
                "resourceType": event.resource_type.value,
                "error": error,
                "attempts": attempts,
                "firstFailedAt": first_failed_at.isoformat(),
                "lastFailedAt": now.isoformat(),
                "resolved": False,
                "terminal": terminal,
                "timestamp": event.timestamp.isoformat(),
            },
            created_at=now,
        )

        recorded = await self._write(record)

        if recorded:
            logger.error(
                "Sync failure logged",
                event_id=event.id,
                event_type=event.type.value,
                resource_id=event.resource_id,
                error=error,
                attempts=attempts,
                terminal=terminal,
            )

        return recorded

    async def log_recovery(self, event: SyncEvent) -> bool:
        """Record a delivery that succeeded after earlier failures."""
        now = self._clock()

        record = AuditRecord(
            action=SYNC_RECOVERY_ACTION,
            resource_type=event.resource_type.value,
            resource_id=event.resource_id,
            details={
                "eventId": event.id,
                "eventType": event.type.value,
                "attempts": event.retry_count,
                "timestamp": event.timestamp.isoformat(),
            },
            created_at=now,
        )

        recorded = await self._write(record)

        try:
            resolved = await self.audit_repo.mark_failures_resolved(event.id, now)
        except Exception as e:
            logger.error(
                "Failed to mark sync failures resolved", event_id=event.id, error=str(e)
            )
            return False

        logger.info(
            "Sync recovery logged",
            event_id=event.id,
            event_type=event.type.value,
            resource_id=event.resource_id,
            attempts=event.retry_count,
            resolved_failures=resolved,
        )

        return recorded

    async def log_success(self, event: SyncEvent) -> bool:
        """Record a successful delivery, counted by the health check."""
        record = AuditRecord(
            action=event.type.audit_action,
            resource_type=event.resource_type.value,
            resource_id=event.resource_id,
            details={
                "eventId": event.id,
                "success": True,
                "timestamp": event.timestamp.isoformat(),
            },
            created_at=self._clock(),
        )
        return await self._write(record)

    async def get_recent_failures(self, limit: int = 50) -> List[SyncFailure]:
        """Get the most recent failure records, newest first."""
        try:
            records = await self.audit_repo.find([SYNC_FAILURE_ACTION], limit=limit)
        except Exception as e:
            logger.error("Failed to fetch sync failures", error=str(e))
            return []

        return [SyncFailure.from_audit_record(record) for record in records]

    async def get_failure_stats(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> FailureStats:
        """Aggregate failures by event type and resource type."""
        start, end = _assume_utc(start), _assume_utc(end)

        try:
            records = await self.audit_repo.find(
                [SYNC_FAILURE_ACTION], start=start, end=end
            )
        except Exception as e:
            logger.error("Failed to get failure stats", error=str(e))
            return FailureStats()

        failures = [SyncFailure.from_audit_record(record) for record in records]
        if not failures:
            return FailureStats()

        by_type = Counter(failure.event_type or "unknown" for failure in failures)
        by_resource = Counter(failure.resource_type or "unknown" for failure in failures)
        total_retries = sum(failure.attempts or 0 for failure in failures)

        return FailureStats(
            total_failures=len(failures),
            failures_by_type=dict(by_type),
            failures_by_resource=dict(by_resource),
            average_retries=total_retries / len(failures),
        )

    async def check_sync_health(self) -> SyncHealth:
        """Health verdict from failures and successes in the trailing window."""
        window_start = self._clock() - timedelta(minutes=self.health_window_minutes)

        try:
            recent_failures = await self.audit_repo.count(
                [SYNC_FAILURE_ACTION], start=window_start
            )
            recent_successes = await self.audit_repo.count(
                SUCCESS_ACTIONS, start=window_start
            )
        except Exception as e:
            logger.error("Failed to check sync health", error=str(e))
            return SyncHealth(
                healthy=False,
                failure_rate=1.0,
                recent_failures=0,
                recent_successes=0,
                message="Unable to determine sync health",
            )

        total = recent_failures + recent_successes
        failure_rate = recent_failures / total if total > 0 else 0.0

        healthy = (
            failure_rate <= self.max_failure_rate
            and recent_failures <= self.max_failures
        )

        if healthy:
            message = "Sync system is healthy"
        else:
            message = (
                f"Sync system degraded: {recent_failures} failures in "
                f"{self._window_label()} ({failure_rate * 100:.1f}% failure rate)"
            )

        return SyncHealth(
            healthy=healthy,
            failure_rate=failure_rate,
            recent_failures=recent_failures,
            recent_successes=recent_successes,
            message=message,
        )

    async def alert_on_critical_failure(self, event: SyncEvent, error: str) -> bool:
        """Log at highest severity, record a terminal failure and page."""
        logger.critical(
            "CRITICAL SYNC FAILURE",
            event_id=event.id,
            event_type=event.type.value,
            resource_id=event.resource_id,
            resource_type=event.resource_type.value,
            error=error,
            attempts=event.retry_count,
            timestamp=event.timestamp.isoformat(),
        )

        recorded = await self.log_failure(event, error, terminal=True)

        try:
            await self.notifier.notify(event, error)
        except Exception as e:
            logger.error("Alert notifier failed", event_id=event.id, error=str(e))

        return recorded

    async def _write(self, record: AuditRecord) -> bool:
        try:
            await self.retry_handler.execute_with_retry(
                lambda: self.audit_repo.create(record),
                operation_key=f"audit:{record.action}",
            )
            return True
        except Exception as e:
            logger.error(
                "Failed to write audit record",
                action=record.action,
                resource_id=record.resource_id,
                error=str(e),
            )
            return False

    def _window_label(self) -> str:
        if self.health_window_minutes == 60:
            return "last hour"
        return f"last {self.health_window_minutes} minutes"
