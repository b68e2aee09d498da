"""
Integration tests for the SQLAlchemy audit log repository.
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.domain.entities.audit_record import (
    SYNC_FAILURE_ACTION,
    SYNC_RECOVERY_ACTION,
    AuditRecord,
)

BASE_TIME = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def failure_record(event_id: str, created_at: datetime, **details) -> AuditRecord:
    return AuditRecord(
        action=SYNC_FAILURE_ACTION,
        resource_type="enrollment",
        resource_id="enr_1",
        details={"eventId": event_id, "resolved": False, **details},
        created_at=created_at,
    )


class TestAuditLogRepository:
    """Test cases for AuditLogRepository."""

    @pytest.mark.asyncio
    async def test_create_and_find(self, sql_audit_repo):
        record = failure_record(
            "evt-1", BASE_TIME, attempts=2, firstFailedAt=BASE_TIME
        )

        await sql_audit_repo.create(record)
        found = await sql_audit_repo.find([SYNC_FAILURE_ACTION])

        assert len(found) == 1
        stored = found[0]
        assert stored.id == record.id
        assert stored.resource_type == "enrollment"
        assert stored.details["attempts"] == 2
        assert stored.details["firstFailedAt"] == "2026-10-01T12:00:00+00:00"
        assert stored.created_at == BASE_TIME

    @pytest.mark.asyncio
    async def test_find_orders_newest_first_and_limits(self, sql_audit_repo):
        for minutes in (5, 15, 10):
            await sql_audit_repo.create(
                failure_record(f"evt-{minutes}", BASE_TIME + timedelta(minutes=minutes))
            )

        found = await sql_audit_repo.find([SYNC_FAILURE_ACTION], limit=2)

        assert [r.details["eventId"] for r in found] == ["evt-15", "evt-10"]

    @pytest.mark.asyncio
    async def test_find_filters_by_action_and_range(self, sql_audit_repo):
        await sql_audit_repo.create(failure_record("evt-old", BASE_TIME - timedelta(hours=2)))
        await sql_audit_repo.create(failure_record("evt-new", BASE_TIME))
        await sql_audit_repo.create(
            AuditRecord(
                action="sync.enrollment.created",
                resource_type="enrollment",
                resource_id="enr_1",
                details={"eventId": "evt-ok", "success": True},
                created_at=BASE_TIME,
            )
        )

        found = await sql_audit_repo.find(
            [SYNC_FAILURE_ACTION], start=BASE_TIME - timedelta(hours=1)
        )

        assert [r.details["eventId"] for r in found] == ["evt-new"]

    @pytest.mark.asyncio
    async def test_count(self, sql_audit_repo):
        for i in range(3):
            await sql_audit_repo.create(failure_record(f"evt-{i}", BASE_TIME))
        await sql_audit_repo.create(
            AuditRecord(
                action="sync.user.created",
                resource_type="user",
                resource_id="user_1",
                created_at=BASE_TIME,
            )
        )

        window_start = BASE_TIME - timedelta(minutes=1)
        assert await sql_audit_repo.count([SYNC_FAILURE_ACTION], start=window_start) == 3
        assert (
            await sql_audit_repo.count(
                [SYNC_FAILURE_ACTION, "sync.user.created"], start=window_start
            )
            == 4
        )
        assert (
            await sql_audit_repo.count(
                [SYNC_FAILURE_ACTION], end=BASE_TIME - timedelta(seconds=1)
            )
            == 0
        )

    @pytest.mark.asyncio
    async def test_mark_failures_resolved(self, sql_audit_repo):
        await sql_audit_repo.create(failure_record("evt-1", BASE_TIME))
        await sql_audit_repo.create(
            failure_record("evt-1", BASE_TIME + timedelta(seconds=2))
        )
        await sql_audit_repo.create(failure_record("evt-2", BASE_TIME))
        resolved_at = BASE_TIME + timedelta(minutes=1)

        updated = await sql_audit_repo.mark_failures_resolved("evt-1", resolved_at)

        assert updated == 2
        found = await sql_audit_repo.find([SYNC_FAILURE_ACTION])
        by_event = {}
        for record in found:
            by_event.setdefault(record.details["eventId"], []).append(record)
        assert all(r.details["resolved"] for r in by_event["evt-1"])
        assert by_event["evt-1"][0].details["resolvedAt"] == resolved_at.isoformat()
        assert by_event["evt-2"][0].details["resolved"] is False

        # Already resolved records are left alone
        assert await sql_audit_repo.mark_failures_resolved("evt-1", resolved_at) == 0

    @pytest.mark.asyncio
    async def test_mark_failures_resolved_ignores_other_actions(self, sql_audit_repo):
        await sql_audit_repo.create(
            AuditRecord(
                action=SYNC_RECOVERY_ACTION,
                resource_type="enrollment",
                resource_id="enr_1",
                details={"eventId": "evt-1"},
                created_at=BASE_TIME,
            )
        )

        assert await sql_audit_repo.mark_failures_resolved("evt-1", BASE_TIME) == 0
