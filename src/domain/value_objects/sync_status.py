"""
Sync status value object.
"""

from enum import Enum


class SyncStatus(str, Enum):
    """Delivery status of a sync event."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
