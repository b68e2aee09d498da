"""
Unit tests for SyncMonitor.
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from src.application.interfaces.services import AlertNotifierInterface
from src.application.services.sync_monitor import SyncMonitor
from src.domain.entities.audit_record import (
    SYNC_FAILURE_ACTION,
    SYNC_RECOVERY_ACTION,
    AuditRecord,
)
from src.domain.events.sync_event import SyncEventType


async def seed(repo, action, count, created_at, resource_type="enrollment", **details):
    for i in range(count):
        await repo.create(
            AuditRecord(
                action=action,
                resource_type=resource_type,
                resource_id=f"res_{i}",
                details=dict(details),
                created_at=created_at,
            )
        )


class TestSyncMonitor:
    """Test cases for SyncMonitor."""

    @pytest.fixture
    def monitor(self, audit_repo, fast_retry_handler, clock):
        return SyncMonitor(audit_repo, retry_handler=fast_retry_handler, clock=clock)

    @pytest.mark.asyncio
    async def test_log_failure_records_details(self, monitor, audit_repo, make_event):
        event = make_event()
        event.mark_failed("Webhook failed with status 500", retry_count=2)

        recorded = await monitor.log_failure(event, "Webhook failed with status 500")

        assert recorded is True
        failures = await monitor.get_recent_failures()
        assert len(failures) == 1
        failure = failures[0]
        assert failure.event_id == event.id
        assert failure.event_type == "enrollment.created"
        assert failure.resource_type == "enrollment"
        assert failure.resource_id == event.resource_id
        assert failure.attempts == 2
        assert failure.resolved is False
        assert failure.terminal is False
        assert failure.first_failed_at is not None

    @pytest.mark.asyncio
    async def test_write_errors_are_reported_not_raised(
        self, monitor, audit_repo, make_event
    ):
        audit_repo.fail_writes = True

        assert await monitor.log_failure(make_event(), "boom") is False
        assert await monitor.log_success(make_event()) is False
        assert len(audit_repo) == 0

    @pytest.mark.asyncio
    async def test_log_success_uses_event_action(self, monitor, audit_repo, make_event):
        event = make_event(SyncEventType.PROFILE_UPDATED, resource_id="user_1")

        assert await monitor.log_success(event) is True

        records = await audit_repo.find(["sync.profile.updated"])
        assert len(records) == 1
        assert records[0].resource_type == "user"
        assert records[0].details["success"] is True

    @pytest.mark.asyncio
    async def test_log_recovery_resolves_failures(self, monitor, audit_repo, make_event):
        event = make_event()
        event.mark_failed("boom", retry_count=1)
        await monitor.log_failure(event, "boom")

        assert await monitor.log_recovery(event) is True

        failures = await monitor.get_recent_failures()
        assert failures[0].resolved is True
        assert failures[0].resolved_at is not None
        assert await audit_repo.count([SYNC_RECOVERY_ACTION]) == 1

    @pytest.mark.asyncio
    async def test_unhealthy_with_many_failures(self, monitor, audit_repo, clock):
        await seed(audit_repo, SYNC_FAILURE_ACTION, 11, clock.now)

        health = await monitor.check_sync_health()

        assert health.healthy is False
        assert health.recent_failures == 11
        assert health.recent_successes == 0
        assert health.failure_rate == 1.0
        assert health.message == (
            "Sync system degraded: 11 failures in last hour (100.0% failure rate)"
        )

    @pytest.mark.asyncio
    async def test_healthy_with_low_failure_rate(self, monitor, audit_repo, clock):
        await seed(audit_repo, SYNC_FAILURE_ACTION, 1, clock.now)
        await seed(audit_repo, "sync.enrollment.created", 99, clock.now)

        health = await monitor.check_sync_health()

        assert health.healthy is True
        assert health.failure_rate == pytest.approx(0.01)
        assert health.message == "Sync system is healthy"

    @pytest.mark.asyncio
    async def test_boundary_is_healthy(self, monitor, audit_repo, clock):
        await seed(audit_repo, SYNC_FAILURE_ACTION, 10, clock.now)
        await seed(audit_repo, "sync.user.created", 90, clock.now, resource_type="user")

        health = await monitor.check_sync_health()

        assert health.failure_rate == pytest.approx(0.10)
        assert health.healthy is True

    @pytest.mark.asyncio
    async def test_high_rate_with_few_failures_is_unhealthy(
        self, monitor, audit_repo, clock
    ):
        await seed(audit_repo, SYNC_FAILURE_ACTION, 2, clock.now)
        await seed(audit_repo, "sync.progress.updated", 8, clock.now)

        health = await monitor.check_sync_health()

        assert health.healthy is False
        assert "(20.0% failure rate)" in health.message

    @pytest.mark.asyncio
    async def test_no_traffic_is_healthy(self, monitor):
        health = await monitor.check_sync_health()

        assert health.healthy is True
        assert health.failure_rate == 0.0

    @pytest.mark.asyncio
    async def test_records_outside_window_are_ignored(self, monitor, audit_repo, clock):
        await seed(audit_repo, SYNC_FAILURE_ACTION, 20, clock.now - timedelta(hours=2))

        health = await monitor.check_sync_health()

        assert health.healthy is True
        assert health.recent_failures == 0

    @pytest.mark.asyncio
    async def test_unknown_health_when_store_unavailable(self, fast_retry_handler):
        repo = AsyncMock()
        repo.count = AsyncMock(side_effect=ConnectionError("down"))
        monitor = SyncMonitor(repo, retry_handler=fast_retry_handler)

        health = await monitor.check_sync_health()

        assert health.healthy is False
        assert health.failure_rate == 1.0
        assert health.message == "Unable to determine sync health"

    @pytest.mark.asyncio
    async def test_failure_stats(self, monitor, audit_repo, clock):
        await seed(
            audit_repo,
            SYNC_FAILURE_ACTION,
            2,
            clock.now,
            eventType="enrollment.created",
            resourceType="enrollment",
            attempts=3,
        )
        await seed(
            audit_repo,
            SYNC_FAILURE_ACTION,
            1,
            clock.now,
            resource_type="user",
            eventType="profile.updated",
            resourceType="user",
            attempts=1,
        )

        stats = await monitor.get_failure_stats()

        assert stats.total_failures == 3
        assert stats.failures_by_type == {"enrollment.created": 2, "profile.updated": 1}
        assert stats.failures_by_resource == {"enrollment": 2, "user": 1}
        assert stats.average_retries == pytest.approx(7 / 3)

    @pytest.mark.asyncio
    async def test_failure_stats_empty(self, monitor):
        stats = await monitor.get_failure_stats()

        assert stats.total_failures == 0
        assert stats.average_retries == 0.0

    @pytest.mark.asyncio
    async def test_recent_failures_newest_first_with_limit(
        self, monitor, audit_repo, clock
    ):
        for minutes_ago in (30, 10, 20):
            await seed(
                audit_repo,
                SYNC_FAILURE_ACTION,
                1,
                clock.now - timedelta(minutes=minutes_ago),
                eventId=f"evt-{minutes_ago}",
            )

        failures = await monitor.get_recent_failures(limit=2)

        assert [failure.event_id for failure in failures] == ["evt-10", "evt-20"]

    @pytest.mark.asyncio
    async def test_alert_on_critical_failure(
        self, audit_repo, fast_retry_handler, clock, make_event
    ):
        notifier = AsyncMock(spec=AlertNotifierInterface)
        monitor = SyncMonitor(
            audit_repo, notifier=notifier, retry_handler=fast_retry_handler, clock=clock
        )
        event = make_event()
        event.mark_failed("boom", retry_count=3)

        recorded = await monitor.alert_on_critical_failure(event, "gave up")

        assert recorded is True
        notifier.notify.assert_awaited_once_with(event, "gave up")
        failures = await monitor.get_recent_failures()
        assert failures[0].terminal is True
        assert failures[0].attempts == 3

    @pytest.mark.asyncio
    async def test_notifier_errors_do_not_propagate(
        self, audit_repo, fast_retry_handler, make_event
    ):
        notifier = AsyncMock(spec=AlertNotifierInterface)
        notifier.notify.side_effect = RuntimeError("pager down")
        monitor = SyncMonitor(audit_repo, notifier=notifier, retry_handler=fast_retry_handler)

        assert await monitor.alert_on_critical_failure(make_event(), "gave up") is True

    @pytest.mark.asyncio
    async def test_failure_stats_with_naive_window(self, monitor, audit_repo, clock):
        await seed(audit_repo, SYNC_FAILURE_ACTION, 1, clock.now, eventType="user.created")
        naive_start = (clock.now - timedelta(minutes=5)).replace(tzinfo=None)
        naive_end = (clock.now + timedelta(minutes=5)).replace(tzinfo=None)

        stats = await monitor.get_failure_stats(naive_start, naive_end)

        assert stats.total_failures == 1
        assert stats.failures_by_type == {"user.created": 1}

    @pytest.mark.asyncio
    async def test_failure_stats_naive_window_excludes_outside(
        self, monitor, audit_repo, clock
    ):
        await seed(audit_repo, SYNC_FAILURE_ACTION, 1, clock.now)
        naive_start = (clock.now + timedelta(minutes=1)).replace(tzinfo=None)

        stats = await monitor.get_failure_stats(start=naive_start)

        assert stats.total_failures == 0
