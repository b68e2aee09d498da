"""
Domain entities package.
"""

from .audit_record import SYNC_FAILURE_ACTION, SYNC_RECOVERY_ACTION, AuditRecord
from .sync_failure import SyncFailure

__all__ = [
    "AuditRecord",
    "SyncFailure",
    "SYNC_FAILURE_ACTION",
    "SYNC_RECOVERY_ACTION",
]
