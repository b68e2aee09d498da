"""
Sync event domain event.
"""

import copy
import json
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from src.domain.exceptions.validation_error import InvalidEventDataError
from src.domain.value_objects.sync_status import SyncStatus


class ResourceType(str, Enum):
    """Kinds of domain resources that emit sync events."""

    ENROLLMENT = "enrollment"
    USER = "user"
    PROGRESS = "progress"


class SyncEventType(str, Enum):
    """Sync event types."""

    ENROLLMENT_CREATED = "enrollment.created"
    ENROLLMENT_UPDATED = "enrollment.updated"
    ENROLLMENT_DELETED = "enrollment.deleted"
    PROFILE_UPDATED = "profile.updated"
    PROGRESS_UPDATED = "progress.updated"
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"

    @property
    def resource_type(self) -> ResourceType:
        """Resource kind the event type describes."""
        if self.value.startswith("enrollment."):
            return ResourceType.ENROLLMENT
        if self == self.PROGRESS_UPDATED:
            return ResourceType.PROGRESS
        return ResourceType.USER

    @property
    def audit_action(self) -> str:
        """Audit log action recorded for a successful delivery."""
        return f"sync.{self.value}"


def to_json_safe(value: Any) -> Any:
    """Convert a snapshot value into plain JSON types."""
    if isinstance(value, dict):
        return {str(key): to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_json_safe(item) for item in value]
    if isinstance(value, Enum):
        return to_json_safe(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    return value


@dataclass
class SyncEvent:
    """Event describing a domain change to propagate to subscribers."""

    id: str
    type: SyncEventType
    resource_id: str
    resource_type: ResourceType
    data: Any
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    retry_count: int = 0
    status: SyncStatus = SyncStatus.PENDING
    error: Optional[str] = None
    first_failed_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        event_type: SyncEventType,
        resource_id: str,
        data: Any,
        status: SyncStatus = SyncStatus.PENDING,
        id_prefix: Optional[str] = None,
    ) -> "SyncEvent":
        """
        Build a new event with a snapshot copy of ``data``.

        Raises ``InvalidEventDataError`` when ``data`` cannot be rendered as
        JSON, so an event that could never be delivered is never queued.
        """
        try:
            json.dumps(to_json_safe(data), allow_nan=False)
        except (TypeError, ValueError) as e:
            raise InvalidEventDataError(event_type.value, resource_id, str(e)) from e

        timestamp = datetime.now(timezone.utc)
        millis = int(timestamp.timestamp() * 1000)
        event_id = f"{event_type.value}-{resource_id}-{millis}-{uuid4().hex[:8]}"
        if id_prefix:
            event_id = f"{id_prefix}-{event_id}"

        return cls(
            id=event_id,
            type=event_type,
            resource_id=resource_id,
            resource_type=event_type.resource_type,
            data=copy.deepcopy(data),
            timestamp=timestamp,
            status=status,
        )

    def mark_processing(self) -> None:
        self.status = SyncStatus.PROCESSING

    def mark_completed(self) -> None:
        self.status = SyncStatus.COMPLETED
        self.error = None

    def mark_failed(
        self,
        error: str,
        retry_count: Optional[int] = None,
        failed_at: Optional[datetime] = None,
    ) -> None:
        """
        Record a failed delivery attempt.

        ``failed_at`` comes from whoever counts attempts; the first one given
        is kept as ``first_failed_at``.
        """
        self.status = SyncStatus.FAILED
        self.error = error
        if retry_count is not None:
            self.retry_count = retry_count
        if failed_at is not None and self.first_failed_at is None:
            self.first_failed_at = failed_at

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the event into the webhook body format."""
        body = {
            "id": self.id,
            "type": self.type.value,
            "resourceId": self.resource_id,
            "resourceType": self.resource_type.value,
            "data": to_json_safe(self.data),
            "timestamp": self.timestamp.isoformat(),
            "retryCount": self.retry_count,
            "status": self.status.value,
        }
        if self.error:
            body["error"] = self.error
        return body
