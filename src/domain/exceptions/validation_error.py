"""
Validation-related domain exceptions.
"""


class ValidationError(Exception):
    """Base exception for validation errors."""

    pass


class RequiredFieldError(ValidationError):
    """Raised when required field is missing."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Required field '{field_name}' is missing")


class InvalidEventTypeError(ValidationError):
    """Raised when an event type does not match the emitting resource."""

    def __init__(self, event_type: str, resource_type: str):
        self.event_type = event_type
        self.resource_type = resource_type
        super().__init__(
            f"Event type '{event_type}' cannot be emitted for resource '{resource_type}'"
        )


class InvalidEventDataError(ValidationError):
    """Raised when event data cannot be serialized into a webhook body."""

    def __init__(self, event_type: str, resource_id: str, reason: str):
        self.event_type = event_type
        self.resource_id = resource_id
        super().__init__(
            f"Data for '{event_type}' event on '{resource_id}' is not JSON serializable: {reason}"
        )
