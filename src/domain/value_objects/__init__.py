"""
Domain value objects package.
"""

from .sync_status import SyncStatus

__all__ = [
    "SyncStatus",
]
