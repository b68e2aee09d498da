"""
Webhook delivery exceptions.
"""

from typing import List

from .sync_error import SyncError


class WebhookError(SyncError):
    """Base exception for a failed delivery to a single endpoint."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(message)


class WebhookTimeoutError(WebhookError):
    """Raised when an endpoint does not answer within the call timeout."""

    def __init__(self, url: str, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(url, f"Webhook to {url} timed out after {timeout_ms}ms")


class WebhookNetworkError(WebhookError):
    """Raised when the request cannot be completed at the transport level."""

    def __init__(self, url: str, reason: str):
        self.reason = reason
        super().__init__(url, f"Webhook to {url} failed: {reason}")


class WebhookStatusError(WebhookError):
    """Raised when an endpoint answers with a non-2xx status."""

    def __init__(self, url: str, status_code: int):
        self.status_code = status_code
        super().__init__(url, f"Webhook failed with status {status_code}")


class WebhookDeliveryError(SyncError):
    """Raised when an event was not accepted by every configured endpoint."""

    def __init__(self, event_id: str, failures: List[WebhookError]):
        self.event_id = event_id
        self.failures = failures
        details = "; ".join(failure.message for failure in failures)
        super().__init__(
            f"Delivery of sync event {event_id} failed for "
            f"{len(failures)} endpoint(s): {details}"
        )
