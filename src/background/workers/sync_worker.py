"""
Sync Queue Worker for draining the in-memory sync queue.
"""

import asyncio

from src.application.services.sync_service import SyncService
from src.config.logging import get_logger

logger = get_logger(__name__)


class SyncQueueWorker:
    """Periodically runs a queue processing cycle on the sync service."""

    def __init__(self, sync_service: SyncService, batch_size: int = None):
        self.sync_service = sync_service
        self.batch_size = batch_size
        self.is_running = False
        self.cycle_count = 0
        self.processed_count = 0
        self.completed_count = 0
        self.failed_count = 0
        self.exhausted_count = 0
        self.error_count = 0
        self._stop_event = asyncio.Event()

    async def process_once(self) -> int:
        """Run one processing cycle and return how many events were dispatched."""
        try:
            result = await self.sync_service.process_queue(self.batch_size)
        except Exception as e:
            logger.error("Error in sync queue processing", error=str(e), exc_info=True)
            self.error_count += 1
            return 0

        self.cycle_count += 1
        self.processed_count += result.processed
        self.completed_count += result.completed
        self.failed_count += result.failed
        self.exhausted_count += result.exhausted

        if result.processed or result.evicted:
            logger.info("Sync queue processing cycle completed", **result.to_dict())

        return result.processed

    async def start_continuous_processing(self, interval_seconds: int = 5):
        """
        Start continuous processing of the sync queue.

        Args:
            interval_seconds: Interval between processing cycles
        """
        logger.info(
            "Starting continuous sync queue processing",
            interval_seconds=interval_seconds,
        )

        self.is_running = True

        while not self._stop_event.is_set():
            await self.process_once()
            try:
                # Wakes early when stopped
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval_seconds)
            except asyncio.TimeoutError:
                pass

        self.is_running = False
        self._stop_event.clear()
        logger.info("Sync queue processing stopped", cycles=self.cycle_count)

    def stop_continuous_processing(self):
        """Stop continuous processing."""
        logger.info("Stopping continuous sync queue processing")
        self.is_running = False
        self._stop_event.set()

    def get_stats(self) -> dict:
        """Get worker statistics."""
        return {
            "is_running": self.is_running,
            "cycles": self.cycle_count,
            "total_processed": self.processed_count,
            "total_completed": self.completed_count,
            "total_failed": self.failed_count,
            "total_exhausted": self.exhausted_count,
            "total_errors": self.error_count,
            "success_rate": (self.completed_count / self.processed_count)
            if self.processed_count > 0
            else 0,
        }
