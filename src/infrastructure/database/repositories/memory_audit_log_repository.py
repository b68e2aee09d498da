"""In-memory audit log, for tests and single-process deployments."""

import copy
from datetime import datetime
from typing import List, Optional, Sequence

from src.application.interfaces.repositories import AuditLogRepositoryInterface
from src.domain.entities.audit_record import SYNC_FAILURE_ACTION, AuditRecord
from src.domain.events.sync_event import to_json_safe


class InMemoryAuditLogRepository(AuditLogRepositoryInterface):
    """Audit log kept in a process-local list. Contents are lost on restart."""

    def __init__(self):
        self._records: List[AuditRecord] = []

    async def create(self, record: AuditRecord) -> AuditRecord:
        stored = copy.copy(record)
        stored.details = to_json_safe(record.details)
        self._records.append(stored)
        return record

    async def find(
        self,
        actions: Sequence[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[AuditRecord]:
        matches = sorted(
            self._matching(actions, start, end),
            key=lambda record: record.created_at,
            reverse=True,
        )
        if limit is not None:
            matches = matches[:limit]
        return [copy.deepcopy(record) for record in matches]

    async def count(
        self,
        actions: Sequence[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        return len(self._matching(actions, start, end))

    async def mark_failures_resolved(self, event_id: str, resolved_at: datetime) -> int:
        updated = 0
        for record in self._records:
            if record.action != SYNC_FAILURE_ACTION:
                continue
            if record.details.get("eventId") != event_id or record.details.get("resolved"):
                continue
            record.details["resolved"] = True
            record.details["resolvedAt"] = resolved_at.isoformat()
            updated += 1
        return updated

    def __len__(self) -> int:
        return len(self._records)

    def _matching(self, actions, start, end) -> List[AuditRecord]:
        actions = set(actions)
        return [
            record
            for record in self._records
            if record.action in actions
            and (start is None or record.created_at >= start)
            and (end is None or record.created_at <= end)
        ]
