"""
Sync service: emits domain change events and drives their delivery.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Set, Union

from src.application.interfaces.repositories import ResourceRepositoryInterface
from src.application.services.sync_monitor import SyncHealth, SyncMonitor
from src.application.services.sync_queue import QueueStats, SyncQueue
from src.application.services.webhook_dispatcher import DispatchResult, WebhookDispatcher
from src.config.logging import get_logger
from src.domain.events.sync_event import ResourceType, SyncEvent, SyncEventType
from src.domain.exceptions.sync_error import (
    ResourceNotFoundError,
    SyncRetryExceededError,
)
from src.domain.exceptions.validation_error import (
    InvalidEventTypeError,
    RequiredFieldError,
)
from src.domain.value_objects.sync_status import SyncStatus
from src.infrastructure.monitoring.metrics import (
    record_event_completed,
    record_event_emitted,
    record_event_failed,
    record_queue_stats,
)

logger = get_logger(__name__)

SYNC_NOW_PREFIX = "sync-now"

ENROLLMENT_EVENT_TYPES: FrozenSet[SyncEventType] = frozenset(
    {
        SyncEventType.ENROLLMENT_CREATED,
        SyncEventType.ENROLLMENT_UPDATED,
        SyncEventType.ENROLLMENT_DELETED,
    }
)
USER_EVENT_TYPES: FrozenSet[SyncEventType] = frozenset(
    {SyncEventType.USER_CREATED, SyncEventType.USER_UPDATED}
)

# Outcomes of a single queued dispatch
COMPLETED = "completed"
FAILED = "failed"
EXHAUSTED = "exhausted"


@dataclass
class SyncConfig:
    """Delivery settings for the sync core."""

    max_retry_attempts: int = 3
    initial_retry_delay_ms: int = 1000
    max_retry_delay_ms: int = 30000
    webhook_timeout_ms: int = 10000
    batch_size: int = 10
    webhook_urls: List[str] = field(default_factory=list)
    webhook_secret: Optional[str] = None
    dispatch_on_emit: bool = True

    @classmethod
    def from_settings(cls, settings) -> "SyncConfig":
        return cls(
            max_retry_attempts=settings.SYNC_MAX_RETRY_ATTEMPTS,
            initial_retry_delay_ms=settings.SYNC_INITIAL_RETRY_DELAY_MS,
            max_retry_delay_ms=settings.SYNC_MAX_RETRY_DELAY_MS,
            webhook_timeout_ms=settings.SYNC_WEBHOOK_TIMEOUT_MS,
            batch_size=settings.SYNC_BATCH_SIZE,
            webhook_urls=list(settings.SYNC_WEBHOOK_URLS or []),
            webhook_secret=settings.SYNC_WEBHOOK_SECRET,
            dispatch_on_emit=settings.SYNC_DISPATCH_ON_EMIT,
        )


@dataclass
class ProcessQueueResult:
    """Counters for one queue processing cycle."""

    processed: int = 0
    completed: int = 0
    failed: int = 0
    exhausted: int = 0
    evicted: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "processed": self.processed,
            "completed": self.completed,
            "failed": self.failed,
            "exhausted": self.exhausted,
            "evicted": self.evicted,
        }


class SyncService:
    """
    Facade over queue, dispatcher and monitor.

    Emitters snapshot the resource, enqueue the event and, while the service
    is running, hand it to a tracked background task for immediate dispatch.
    Anything that fails there is left to the retry schedule and picked up by
    ``process_queue``. The ``sync_now`` family dispatches in the caller's
    context and raises on failure.
    """

    def __init__(
        self,
        config: SyncConfig,
        queue: SyncQueue,
        dispatcher: WebhookDispatcher,
        monitor: SyncMonitor,
        resources: ResourceRepositoryInterface,
    ):
        self.config = config
        self.queue = queue
        self.dispatcher = dispatcher
        self.monitor = monitor
        self.resources = resources
        self._tasks: Set[asyncio.Task] = set()
        self._finalizing: Set[str] = set()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Enable inline dispatch of emitted events."""
        self._running = True
        logger.info(
            "Sync service started",
            endpoints=len(self.dispatcher.webhook_urls),
            dispatch_on_emit=self.config.dispatch_on_emit,
        )

    async def stop(self) -> None:
        """Stop inline dispatch and wait for outstanding deliveries."""
        self._running = False
        await self.drain()
        logger.info("Sync service stopped", queued=len(self.queue))

    async def drain(self) -> None:
        """Wait until every background dispatch task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # Emitters

    async def emit_enrollment_event(
        self,
        event_type: Union[SyncEventType, str],
        enrollment_id: str,
        data: Optional[Any] = None,
    ) -> SyncEvent:
        """Emit a sync event for enrollment changes."""
        event_type = self._resolve_event_type(
            event_type, ENROLLMENT_EVENT_TYPES, ResourceType.ENROLLMENT
        )
        if data is None:
            data = await self._load_snapshot(event_type, enrollment_id)
        return self._emit(event_type, enrollment_id, data)

    async def emit_profile_event(
        self, user_id: str, data: Optional[Any] = None
    ) -> SyncEvent:
        """Emit a sync event for profile changes."""
        event_type = SyncEventType.PROFILE_UPDATED
        if data is None:
            data = await self._load_snapshot(event_type, user_id)
        return self._emit(event_type, user_id, data)

    async def emit_progress_event(
        self, user_id: str, course_id: str, data: Optional[Any] = None
    ) -> SyncEvent:
        """Emit a sync event for progress updates."""
        if data is None:
            data = await self.resources.get_progress_snapshot(user_id, course_id)
        return self._emit(SyncEventType.PROGRESS_UPDATED, f"{user_id}-{course_id}", data)

    async def emit_user_event(
        self,
        event_type: Union[SyncEventType, str],
        user_id: str,
        data: Optional[Any] = None,
    ) -> SyncEvent:
        """Emit a sync event for user lifecycle changes."""
        event_type = self._resolve_event_type(
            event_type, USER_EVENT_TYPES, ResourceType.USER
        )
        if data is None:
            data = await self._load_snapshot(event_type, user_id)
        return self._emit(event_type, user_id, data)

    # Immediate delivery

    async def sync_now(
        self,
        event_type: Union[SyncEventType, str],
        resource_id: str,
        data: Optional[Any] = None,
    ) -> DispatchResult:
        """
        Deliver an event right away, bypassing the queue.

        Raises:
            ResourceNotFoundError: the resource snapshot cannot be loaded.
            WebhookDeliveryError: any endpoint did not accept the event.
            InvalidEventDataError: the snapshot is not JSON serializable.
        """
        event_type = self._resolve_event_type(event_type, frozenset(SyncEventType))
        if data is None:
            data = await self._load_snapshot(event_type, resource_id)

        event = SyncEvent.create(
            event_type,
            resource_id,
            data,
            status=SyncStatus.PROCESSING,
            id_prefix=SYNC_NOW_PREFIX,
        )
        record_event_emitted(event_type.value, "sync")

        logger.info(
            "Immediate sync requested",
            event_id=event.id,
            event_type=event_type.value,
            resource_id=resource_id,
        )

        result = await self.dispatcher.dispatch(event)

        if result.success:
            record_event_completed(event_type.value)
            if result.endpoint_results:
                await self.monitor.log_success(event)
            return result

        record_event_failed(event_type.value, terminal=False)
        await self.monitor.log_failure(event, result.error_message, attempts=1)
        result.raise_for_failure()

    async def sync_enrollment_now(self, enrollment_id: str) -> DispatchResult:
        """Sync enrollment data immediately (for critical operations)."""
        return await self.sync_now(SyncEventType.ENROLLMENT_UPDATED, enrollment_id)

    async def sync_profile_now(self, user_id: str) -> DispatchResult:
        """Sync profile data immediately (for critical operations)."""
        return await self.sync_now(SyncEventType.PROFILE_UPDATED, user_id)

    # Queue processing

    async def process_queue(self, batch_size: Optional[int] = None) -> ProcessQueueResult:
        """
        Run one processing cycle over the queue.

        Exhausted events whose terminal failure could not be audited earlier
        are audited and evicted first, then the next batch of eligible events
        is dispatched one by one.
        """
        result = ProcessQueueResult()

        for event in self.queue.get_exhausted():
            if event.id in self._finalizing:
                continue
            if await self._finalize_exhausted(event, alert=False):
                result.evicted += 1

        batch = self.queue.get_next_batch(batch_size or self.config.batch_size)

        if batch:
            logger.info("Processing queued sync events", count=len(batch))

        for event in batch:
            outcome = await self._dispatch_queued(event)
            result.processed += 1
            if outcome == COMPLETED:
                result.completed += 1
            elif outcome == FAILED:
                result.failed += 1
            else:
                result.exhausted += 1

        record_queue_stats(self.queue.get_stats().to_dict())

        return result

    def get_queue_stats(self) -> QueueStats:
        """Get sync queue statistics."""
        stats = self.queue.get_stats()
        record_queue_stats(stats.to_dict())
        return stats

    async def check_sync_health(self) -> SyncHealth:
        return await self.monitor.check_sync_health()

    # Internals

    def _emit(self, event_type: SyncEventType, resource_id: str, data: Any) -> SyncEvent:
        event = SyncEvent.create(event_type, resource_id, data)
        self.queue.add(event)
        record_event_emitted(event_type.value, "async")

        logger.info(
            "Sync event emitted",
            event_id=event.id,
            event_type=event_type.value,
            resource_id=resource_id,
        )

        if self._running and self.config.dispatch_on_emit and self.queue.claim(event.id):
            task = asyncio.create_task(self._dispatch_queued(event))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        return event

    async def _dispatch_queued(self, event: SyncEvent) -> str:
        """Dispatch an in-flight queued event and settle its queue state."""
        try:
            result = await self.dispatcher.dispatch(event)
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.error("Unexpected dispatch error", event_id=event.id, error=error)
            return await self._handle_failure(event, error)

        if not result.success:
            return await self._handle_failure(event, result.error_message)

        had_failed = event.retry_count > 0
        self.queue.complete(event.id)
        record_event_completed(event.type.value)

        if result.endpoint_results:
            await self.monitor.log_success(event)
        if had_failed:
            await self.monitor.log_recovery(event)

        return COMPLETED

    async def _handle_failure(self, event: SyncEvent, error: str) -> str:
        failure = self.queue.fail(event.id, error)

        if failure is None:
            logger.warning("Failed sync event is no longer queued", event_id=event.id)
            return FAILED

        record_event_failed(event.type.value, terminal=failure.exhausted)

        if not failure.exhausted:
            logger.warning(
                "Sync event scheduled for retry",
                event_id=event.id,
                attempts=failure.attempts,
                next_retry_at=failure.next_retry_at.isoformat(),
            )
            await self.monitor.log_failure(event, error)
            return FAILED

        await self._finalize_exhausted(event, alert=True)
        return EXHAUSTED

    async def _finalize_exhausted(self, event: SyncEvent, alert: bool) -> bool:
        """Audit a terminal failure, then evict the event from the queue."""
        error = str(
            SyncRetryExceededError(event.id, self.queue.max_attempts, event.error)
        )

        self._finalizing.add(event.id)
        try:
            if alert:
                recorded = await self.monitor.alert_on_critical_failure(event, error)
            else:
                recorded = await self.monitor.log_failure(event, error, terminal=True)
        finally:
            self._finalizing.discard(event.id)

        if not recorded:
            logger.error(
                "Terminal sync failure not audited, eviction deferred",
                event_id=event.id,
            )
            return False

        self.queue.evict(event.id)
        logger.info("Exhausted sync event evicted", event_id=event.id)
        return True

    async def _load_snapshot(self, event_type: SyncEventType, resource_id: str) -> Any:
        resource_type = event_type.resource_type

        if resource_type == ResourceType.ENROLLMENT:
            snapshot = await self.resources.get_enrollment_snapshot(resource_id)
        elif event_type == SyncEventType.PROFILE_UPDATED:
            snapshot = await self.resources.get_profile_snapshot(resource_id)
        elif resource_type == ResourceType.USER:
            snapshot = await self.resources.get_user_snapshot(resource_id)
        else:
            # Progress ids are composite; callers supply the snapshot
            raise RequiredFieldError("data")

        if snapshot is None:
            raise ResourceNotFoundError(resource_type.value, resource_id)

        return snapshot

    @staticmethod
    def _resolve_event_type(
        event_type: Union[SyncEventType, str],
        allowed: FrozenSet[SyncEventType],
        resource_type: Optional[ResourceType] = None,
    ) -> SyncEventType:
        expected = resource_type.value if resource_type else "any"
        try:
            resolved = SyncEventType(event_type)
        except ValueError:
            raise InvalidEventTypeError(str(event_type), expected)

        if resolved not in allowed:
            raise InvalidEventTypeError(resolved.value, expected)

        return resolved
