"""
Audit record entity for the append-only audit trail.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4


SYNC_FAILURE_ACTION = "sync.failure"
SYNC_RECOVERY_ACTION = "sync.recovery"


@dataclass
class AuditRecord:
    """Audit trail entry."""

    action: str
    resource_type: str
    resource_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Initialize timestamps."""
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)
