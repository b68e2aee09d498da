"""
Unit tests for background queue workers.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.application.services.sync_service import ProcessQueueResult, SyncService
from src.background.workers import SyncQueueWorker, WorkerManager


@pytest.fixture
def mock_sync_service():
    service = MagicMock(spec=SyncService)
    service.config = MagicMock(batch_size=25)
    service.process_queue = AsyncMock(
        return_value=ProcessQueueResult(processed=2, completed=1, failed=1)
    )
    return service


class TestSyncQueueWorker:
    """Test cases for SyncQueueWorker."""

    @pytest.mark.asyncio
    async def test_process_once_accumulates_stats(self, mock_sync_service):
        worker = SyncQueueWorker(mock_sync_service, batch_size=25)

        assert await worker.process_once() == 2
        assert await worker.process_once() == 2

        mock_sync_service.process_queue.assert_awaited_with(25)
        stats = worker.get_stats()
        assert stats["cycles"] == 2
        assert stats["total_processed"] == 4
        assert stats["total_completed"] == 2
        assert stats["total_failed"] == 2
        assert stats["success_rate"] == 0.5

    @pytest.mark.asyncio
    async def test_process_once_survives_errors(self, mock_sync_service):
        mock_sync_service.process_queue.side_effect = RuntimeError("boom")
        worker = SyncQueueWorker(mock_sync_service)

        assert await worker.process_once() == 0
        assert worker.get_stats()["total_errors"] == 1

    @pytest.mark.asyncio
    async def test_continuous_processing_stops(self, mock_sync_service):
        worker = SyncQueueWorker(mock_sync_service)

        task = asyncio.create_task(worker.start_continuous_processing(interval_seconds=0.01))
        await asyncio.sleep(0.01)
        worker.stop_continuous_processing()
        await asyncio.wait_for(task, timeout=1)

        assert worker.is_running is False
        assert worker.cycle_count >= 1


class TestWorkerManager:
    """Test cases for WorkerManager."""

    @pytest.mark.asyncio
    async def test_start_and_stop(self, mock_sync_service):
        manager = WorkerManager(mock_sync_service, drain_interval_seconds=60)

        await manager.start_all_workers()
        await asyncio.sleep(0)

        assert manager.is_running is True
        assert manager.sync_worker.batch_size == 25
        health = manager.get_health_status()
        assert health["status"] == "healthy"
        assert health["workers"]["sync_queue"]["status"] == "running"

        await manager.stop_all_workers()

        assert manager.is_running is False
        assert manager.worker_tasks == {}
        assert manager.get_health_status()["status"] == "stopped"

    @pytest.mark.asyncio
    async def test_stop_lets_running_cycle_finish(self, mock_sync_service):
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_cycle(batch_size):
            started.set()
            await release.wait()
            return ProcessQueueResult(processed=1, completed=1)

        mock_sync_service.process_queue = AsyncMock(side_effect=slow_cycle)
        manager = WorkerManager(mock_sync_service, drain_interval_seconds=60)

        await manager.start_all_workers()
        await asyncio.wait_for(started.wait(), timeout=1)
        stopping = asyncio.create_task(manager.stop_all_workers())
        await asyncio.sleep(0.01)

        assert not stopping.done()

        release.set()
        await asyncio.wait_for(stopping, timeout=1)

        assert manager.sync_worker.cycle_count == 1
        assert manager.sync_worker.completed_count == 1
        assert manager.sync_worker.is_running is False
        mock_sync_service.process_queue.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stuck_cycle_is_cancelled_after_timeout(self, mock_sync_service):
        started = asyncio.Event()

        async def stuck_cycle(batch_size):
            started.set()
            await asyncio.Event().wait()

        mock_sync_service.process_queue = AsyncMock(side_effect=stuck_cycle)
        manager = WorkerManager(
            mock_sync_service, drain_interval_seconds=60, shutdown_timeout_seconds=0.05
        )

        await manager.start_all_workers()
        await asyncio.wait_for(started.wait(), timeout=1)
        await asyncio.wait_for(manager.stop_all_workers(), timeout=1)

        assert manager.worker_tasks == {}
        assert manager.is_running is False

    @pytest.mark.asyncio
    async def test_stop_before_first_cycle(self, mock_sync_service):
        manager = WorkerManager(mock_sync_service, drain_interval_seconds=60)

        await manager.start_all_workers()
        await asyncio.wait_for(manager.stop_all_workers(), timeout=1)

        assert manager.sync_worker.is_running is False


class TestWorkerShutdownWithQueue:
    """Shutdown against a real queue."""

    @pytest.mark.asyncio
    async def test_claimed_events_are_settled_on_stop(self, build_sync_service):
        in_flight = asyncio.Event()
        release = asyncio.Event()

        async def slow_handler(request):
            in_flight.set()
            await release.wait()
            return httpx.Response(200)

        service = build_sync_service(handler=slow_handler, dispatch_on_emit=False)
        await service.emit_user_event("user.created", "user_1", {"id": "user_1"})
        manager = WorkerManager(service, drain_interval_seconds=60)

        await manager.start_all_workers()
        await asyncio.wait_for(in_flight.wait(), timeout=1)
        assert service.get_queue_stats().processing == 1

        stopping = asyncio.create_task(manager.stop_all_workers())
        await asyncio.sleep(0.01)
        release.set()
        await asyncio.wait_for(stopping, timeout=1)

        stats = service.get_queue_stats()
        assert stats.processing == 0
        assert stats.total == 0
