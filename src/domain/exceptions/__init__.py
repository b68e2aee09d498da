"""
Domain exceptions package.
"""

from .sync_error import ResourceNotFoundError, SyncError, SyncRetryExceededError
from .validation_error import (
    InvalidEventDataError,
    InvalidEventTypeError,
    RequiredFieldError,
    ValidationError,
)
from .webhook_error import (
    WebhookDeliveryError,
    WebhookError,
    WebhookNetworkError,
    WebhookStatusError,
    WebhookTimeoutError,
)

__all__ = [
    "SyncError",
    "ResourceNotFoundError",
    "SyncRetryExceededError",
    "ValidationError",
    "RequiredFieldError",
    "InvalidEventTypeError",
    "InvalidEventDataError",
    "WebhookError",
    "WebhookTimeoutError",
    "WebhookNetworkError",
    "WebhookStatusError",
    "WebhookDeliveryError",
]
