"""
Repository interfaces for dependency inversion.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from src.domain.entities.audit_record import AuditRecord


class ResourceRepositoryInterface(ABC):
    """Read-only lookups used to build event payload snapshots."""

    @abstractmethod
    async def get_enrollment_snapshot(
        self, enrollment_id: str
    ) -> Optional[Dict[str, Any]]:
        """Get enrollment with its user and course summary."""
        pass

    @abstractmethod
    async def get_profile_snapshot(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get user identity fields with the attached profile."""
        pass

    @abstractmethod
    async def get_user_snapshot(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get user identity fields."""
        pass

    @abstractmethod
    async def get_progress_snapshot(
        self, user_id: str, course_id: str
    ) -> Dict[str, Any]:
        """Get all progress rows of a user within a course."""
        pass


class AuditLogRepositoryInterface(ABC):
    """Append-only audit trail."""

    @abstractmethod
    async def create(self, record: AuditRecord) -> AuditRecord:
        """Append an audit record."""
        pass

    @abstractmethod
    async def find(
        self,
        actions: Sequence[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[AuditRecord]:
        """Find records by action, newest first."""
        pass

    @abstractmethod
    async def count(
        self,
        actions: Sequence[str],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        """Count records by action within an optional time range."""
        pass

    @abstractmethod
    async def mark_failures_resolved(self, event_id: str, resolved_at: datetime) -> int:
        """Mark unresolved failure records of an event as resolved."""
        pass
