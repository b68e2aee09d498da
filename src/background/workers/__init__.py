"""
Worker management and coordination.
"""

import asyncio
from typing import Any, Dict

from src.application.services.sync_service import SyncService
from src.background.workers.sync_worker import SyncQueueWorker
from src.config.logging import get_logger

logger = get_logger(__name__)


class WorkerManager:
    """Manages and coordinates all background workers."""

    def __init__(
        self,
        sync_service: SyncService,
        drain_interval_seconds: int = 5,
        shutdown_timeout_seconds: float = 30,
    ):
        self.sync_service = sync_service
        self.drain_interval_seconds = drain_interval_seconds
        self.shutdown_timeout_seconds = shutdown_timeout_seconds
        self.logger = logger

        self.sync_worker = SyncQueueWorker(
            sync_service, batch_size=sync_service.config.batch_size
        )

        # Worker tasks
        self.worker_tasks: Dict[str, asyncio.Task] = {}
        self.is_running = False

    async def start_all_workers(self):
        """Start all background workers."""
        try:
            self.logger.info("Starting all background workers")

            sync_task = asyncio.create_task(
                self.sync_worker.start_continuous_processing(
                    interval_seconds=self.drain_interval_seconds
                )
            )
            self.worker_tasks["sync_queue"] = sync_task

            self.is_running = True

            self.logger.info("All background workers started successfully")

        except Exception as e:
            self.logger.error(
                "Error starting background workers", error=str(e), exc_info=True
            )
            raise

    async def stop_all_workers(self):
        """
        Stop all background workers.

        A processing cycle that is already running is allowed to finish so the
        events it claimed are completed or rescheduled. Workers still busy after
        the shutdown timeout are cancelled.
        """
        self.logger.info("Stopping all background workers")

        self.sync_worker.stop_continuous_processing()

        for name, task in self.worker_tasks.items():
            if task.done():
                continue
            try:
                await asyncio.wait_for(
                    asyncio.shield(task), timeout=self.shutdown_timeout_seconds
                )
            except asyncio.TimeoutError:
                self.logger.warning(
                    "Worker did not stop in time, cancelling",
                    worker=name,
                    timeout_seconds=self.shutdown_timeout_seconds,
                )
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        self.worker_tasks.clear()
        self.is_running = False

        self.logger.info("All background workers stopped successfully")

    def get_health_status(self) -> Dict[str, Any]:
        """Get health status of all workers."""
        return {
            "status": "healthy" if self.is_running else "stopped",
            "workers": {
                "sync_queue": {
                    "status": "running" if self.sync_worker.is_running else "stopped",
                    "stats": self.sync_worker.get_stats(),
                },
            },
        }


__all__ = [
    "SyncQueueWorker",
    "WorkerManager",
]
