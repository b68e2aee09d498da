"""Audit log repository implementation."""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.application.interfaces.repositories import AuditLogRepositoryInterface
from src.config.logging import get_logger
from src.domain.entities.audit_record import SYNC_FAILURE_ACTION, AuditRecord
from src.domain.events.sync_event import to_json_safe
from src.infrastructure.database.models.audit_log import AuditLogModel
from src.infrastructure.database.models.base import as_utc

logger = get_logger(__name__)


class AuditLogRepository(AuditLogRepositoryInterface):
    """
    Audit log repository backed by SQLAlchemy.

    Each operation runs in its own session so the repository can be shared
    by background dispatch tasks.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def create(self, record: AuditRecord) -> AuditRecord:
        """Append an audit record."""
        model = AuditLogModel(
            id=record.id,
            action=record.action,
            resource_type=record.resource_type,
            resource_id=record.resource_id,
            details=to_json_safe(record.details),
            created_at=record.created_at,
        )

        async with self.session_factory() as session:
            session.add(model)
            await session.commit()

        return record

    async def find(
        self,
        actions: Sequence[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[AuditRecord]:
        """Find records by action, newest first."""
        stmt = self._filter(select(AuditLogModel), actions, start, end).order_by(
            AuditLogModel.created_at.desc()
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            models = result.scalars().all()

        return [self._model_to_entity(model) for model in models]

    async def count(
        self,
        actions: Sequence[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        """Count records by action within an optional time range."""
        stmt = self._filter(
            select(func.count()).select_from(AuditLogModel), actions, start, end
        )

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def mark_failures_resolved(self, event_id: str, resolved_at: datetime) -> int:
        """Mark unresolved failure records of an event as resolved."""
        stmt = select(AuditLogModel).where(
            AuditLogModel.action == SYNC_FAILURE_ACTION,
            AuditLogModel.details["eventId"].as_string() == event_id,
        )

        updated = 0
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            for model in result.scalars().all():
                details = dict(model.details or {})
                if details.get("resolved"):
                    continue
                details["resolved"] = True
                details["resolvedAt"] = resolved_at.isoformat()
                # Reassign so the JSON column is flagged dirty
                model.details = details
                updated += 1

            await session.commit()

        if updated:
            logger.info("Sync failures resolved", event_id=event_id, count=updated)

        return updated

    @staticmethod
    def _filter(stmt, actions, start, end):
        stmt = stmt.where(AuditLogModel.action.in_(list(actions)))
        if start is not None:
            stmt = stmt.where(AuditLogModel.created_at >= start)
        if end is not None:
            stmt = stmt.where(AuditLogModel.created_at <= end)
        return stmt

    def _model_to_entity(self, model: AuditLogModel) -> AuditRecord:
        """Convert SQLAlchemy model to domain entity."""
        return AuditRecord(
            id=model.id,
            action=model.action,
            resource_type=model.resource_type,
            resource_id=model.resource_id,
            details=dict(model.details or {}),
            created_at=as_utc(model.created_at),
        )
