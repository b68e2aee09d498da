"""
Domain package.
"""

from .entities import *
from .events import *
from .exceptions import *
from .value_objects import *

__all__ = [
    # Entities
    "AuditRecord",
    "SyncFailure",

    # Events
    "ResourceType",
    "SyncEvent",
    "SyncEventType",

    # Exceptions
    "SyncError",
    "ResourceNotFoundError",
    "SyncRetryExceededError",
    "ValidationError",
    "InvalidEventTypeError",
    "WebhookError",
    "WebhookDeliveryError",

    # Value Objects
    "SyncStatus",
]
