"""
Sync-related domain exceptions.
"""


class SyncError(Exception):
    """Base exception for sync-related errors."""

    pass


class ResourceNotFoundError(SyncError):
    """Raised when the resource an event describes cannot be loaded."""

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type.capitalize()} {resource_id} not found")


class SyncRetryExceededError(SyncError):
    """Raised when maximum retry attempts are exceeded."""

    def __init__(self, event_id: str, max_attempts: int, last_error: str = None):
        self.event_id = event_id
        self.max_attempts = max_attempts
        self.last_error = last_error
        message = f"Sync event {event_id} failed after {max_attempts} attempts"
        if last_error:
            message += f": {last_error}"
        super().__init__(message)
