"""
Background workers package.
"""

from .workers import SyncQueueWorker, WorkerManager

__all__ = [
    "SyncQueueWorker",
    "WorkerManager",
]
