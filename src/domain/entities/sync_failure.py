"""
Sync failure entity, a typed view over failure audit records.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from src.domain.entities.audit_record import SYNC_FAILURE_ACTION, AuditRecord


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class SyncFailure:
    """Failed delivery of a sync event, as recorded in the audit trail."""

    id: str
    event_id: str
    event_type: str
    resource_id: Optional[str]
    resource_type: str
    error: str
    attempts: int
    first_failed_at: Optional[datetime]
    last_failed_at: Optional[datetime]
    resolved: bool = False
    resolved_at: Optional[datetime] = None
    terminal: bool = False

    @classmethod
    def from_audit_record(cls, record: AuditRecord) -> "SyncFailure":
        """Build a failure view from a ``sync.failure`` audit record."""
        if record.action != SYNC_FAILURE_ACTION:
            raise ValueError(f"Audit record {record.id} is not a sync failure")

        details = record.details or {}
        return cls(
            id=record.id,
            event_id=details.get("eventId", ""),
            event_type=details.get("eventType", "unknown"),
            resource_id=record.resource_id,
            resource_type=details.get("resourceType", record.resource_type),
            error=details.get("error", ""),
            attempts=details.get("attempts", 0),
            first_failed_at=_parse_datetime(details.get("firstFailedAt")),
            last_failed_at=_parse_datetime(details.get("lastFailedAt"))
            or record.created_at,
            resolved=details.get("resolved", False),
            resolved_at=_parse_datetime(details.get("resolvedAt")),
            terminal=details.get("terminal", False),
        )
