"""
In-memory sync queue with retry scheduling and in-flight tracking.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Set

from src.application.services.retry_handler import calculate_backoff
from src.config.logging import get_logger
from src.domain.events.sync_event import SyncEvent

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _QueueItem:
    """Scheduling state of one queued event. Never leaves the queue."""

    event: SyncEvent
    attempts: int = 0
    next_retry_at: datetime = field(default_factory=_utc_now)

    @property
    def id(self) -> str:
        return self.event.id


@dataclass
class QueueFailure:
    """Outcome of recording a failed dispatch."""

    event: SyncEvent
    attempts: int
    exhausted: bool
    next_retry_at: Optional[datetime] = None


@dataclass
class QueueStats:
    """Point-in-time queue counters."""

    total: int
    processing: int
    pending: int
    failed: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "processing": self.processing,
            "pending": self.pending,
            "failed": self.failed,
        }


class SyncQueue:
    """
    Volatile queue of sync events awaiting delivery.

    Every item is in exactly one state: scheduled (``next_retry_at`` in the
    future), eligible, in-flight (member of the in-flight set), or exhausted
    (attempts at the maximum, kept only until its terminal failure has been
    audited and it is evicted). All mutations happen under one lock, so two
    overlapping batch fetches never hand out the same event.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay_ms: float = 1000,
        max_delay_ms: float = 30000,
        clock: Callable[[], datetime] = _utc_now,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self._clock = clock
        self._items: Dict[str, _QueueItem] = {}
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    def add(self, event: SyncEvent) -> None:
        """Add event to sync queue, eligible immediately."""
        with self._lock:
            self._items[event.id] = _QueueItem(
                event=event, attempts=0, next_retry_at=self._clock()
            )

        logger.debug("Sync event queued", event_id=event.id, event_type=event.type.value)

    def get_next_batch(self, batch_size: int = 10) -> List[SyncEvent]:
        """Select up to ``batch_size`` eligible events and mark them in-flight."""
        now = self._clock()
        batch: List[SyncEvent] = []

        with self._lock:
            for item in self._items.values():
                if len(batch) >= batch_size:
                    break
                if self._is_eligible(item, now):
                    batch.append(item.event)

            for event in batch:
                self._in_flight.add(event.id)

        return batch

    def claim(self, event_id: str) -> bool:
        """Mark a single eligible event in-flight."""
        now = self._clock()

        with self._lock:
            item = self._items.get(event_id)
            if item is None or not self._is_eligible(item, now):
                return False
            self._in_flight.add(event_id)
            return True

    def complete(self, event_id: str) -> None:
        """Mark item as completed and remove it from the queue."""
        with self._lock:
            self._items.pop(event_id, None)
            self._in_flight.discard(event_id)

    def fail(self, event_id: str, error: str) -> Optional[QueueFailure]:
        """
        Record a failed dispatch and schedule the next attempt.

        Returns None for unknown events. Once attempts reach the maximum the
        outcome is exhausted; the item stays observable as failed until it is
        evicted and is never handed out again.
        """
        with self._lock:
            item = self._items.get(event_id)
            if item is None:
                return None

            self._in_flight.discard(event_id)

            if item.attempts >= self.max_attempts:
                return QueueFailure(
                    event=item.event, attempts=item.attempts, exhausted=True
                )

            item.attempts += 1
            item.event.mark_failed(
                error, retry_count=item.attempts, failed_at=self._clock()
            )

            if item.attempts >= self.max_attempts:
                return QueueFailure(
                    event=item.event, attempts=item.attempts, exhausted=True
                )

            delay_ms = calculate_backoff(
                item.attempts, self.base_delay_ms, self.max_delay_ms
            )
            item.next_retry_at = self._clock() + timedelta(milliseconds=delay_ms)

            return QueueFailure(
                event=item.event,
                attempts=item.attempts,
                exhausted=False,
                next_retry_at=item.next_retry_at,
            )

    def evict(self, event_id: str) -> bool:
        """Permanently remove an exhausted item."""
        with self._lock:
            item = self._items.get(event_id)
            if item is None or item.attempts < self.max_attempts:
                return False
            del self._items[event_id]
            self._in_flight.discard(event_id)
            return True

    def get_exhausted(self) -> List[SyncEvent]:
        """Events that used up their attempts but have not been evicted yet."""
        with self._lock:
            return [
                item.event
                for item in self._items.values()
                if item.attempts >= self.max_attempts
            ]

    def get_attempts(self, event_id: str) -> Optional[int]:
        with self._lock:
            item = self._items.get(event_id)
            return item.attempts if item else None

    def contains(self, event_id: str) -> bool:
        with self._lock:
            return event_id in self._items

    def get_stats(self) -> QueueStats:
        """Get queue statistics."""
        with self._lock:
            total = len(self._items)
            processing = len(self._in_flight)
            failed = sum(
                1
                for item in self._items.values()
                if item.attempts >= self.max_attempts
            )

        return QueueStats(
            total=total,
            processing=processing,
            pending=total - processing - failed,
            failed=failed,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _is_eligible(self, item: _QueueItem, now: datetime) -> bool:
        return (
            item.id not in self._in_flight
            and item.next_retry_at <= now
            and item.attempts < self.max_attempts
        )
