"""
Domain events package.
"""

from .sync_event import ResourceType, SyncEvent, SyncEventType, to_json_safe

__all__ = [
    "ResourceType",
    "SyncEvent",
    "SyncEventType",
    "to_json_safe",
]
