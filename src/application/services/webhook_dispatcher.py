"""
Webhook dispatcher delivering sync events to subscriber endpoints.
"""

import asyncio
import hashlib
import hmac
import json
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import httpx

from src.config.logging import get_logger
from src.domain.events.sync_event import SyncEvent
from src.domain.exceptions.webhook_error import (
    WebhookDeliveryError,
    WebhookError,
    WebhookNetworkError,
    WebhookStatusError,
    WebhookTimeoutError,
)
from src.infrastructure.external.http_client import HTTPClient
from src.infrastructure.monitoring.metrics import record_webhook_delivery

logger = get_logger(__name__)

EVENT_ID_HEADER = "X-Sync-Event-Id"
EVENT_TYPE_HEADER = "X-Sync-Event-Type"
SIGNATURE_HEADER = "X-Webhook-Signature"


def compute_signature(body: str, secret: str) -> str:
    """Hex HMAC-SHA256 of the request body."""
    return hmac.new(
        key=secret.encode("utf-8"),
        msg=body.encode("utf-8"),
        digestmod=hashlib.sha256,
    ).hexdigest()


@dataclass
class EndpointResult:
    """Outcome of one webhook call."""

    url: str
    success: bool
    status_code: Optional[int] = None
    error: Optional[WebhookError] = None
    duration_ms: float = 0.0


@dataclass
class DispatchResult:
    """Outcome of delivering one event to every configured endpoint."""

    event_id: str
    endpoint_results: List[EndpointResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        # No subscribers counts as success.
        return all(result.success for result in self.endpoint_results)

    @property
    def failures(self) -> List[WebhookError]:
        return [
            result.error
            for result in self.endpoint_results
            if not result.success and result.error is not None
        ]

    @property
    def error_message(self) -> Optional[str]:
        if self.success:
            return None
        return "; ".join(failure.message for failure in self.failures)

    def raise_for_failure(self) -> None:
        """Raise WebhookDeliveryError if any endpoint failed."""
        if not self.success:
            raise WebhookDeliveryError(self.event_id, self.failures)


class WebhookDispatcher:
    """
    Fans an event out to all configured webhook URLs concurrently.

    Delivery is all-or-nothing: the event only counts as delivered when every
    endpoint answers 2xx within the timeout. There is no per-endpoint
    acknowledgment, so a retry re-sends the event to endpoints that already
    accepted it.
    """

    def __init__(
        self,
        webhook_urls: Sequence[str],
        timeout_ms: int = 10000,
        signing_secret: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_urls = [url.strip() for url in webhook_urls if url and url.strip()]
        self.timeout_ms = timeout_ms
        self.signing_secret = signing_secret
        self.transport = transport

    async def dispatch(self, event: SyncEvent) -> DispatchResult:
        """Deliver ``event`` to every endpoint and update its status."""
        if not self.webhook_urls:
            event.mark_completed()
            logger.debug("No webhooks configured, event completed", event_id=event.id)
            return DispatchResult(event_id=event.id)

        event.mark_processing()
        body = json.dumps(event.to_dict())
        headers = self._build_headers(event, body)

        async with HTTPClient(
            timeout=self.timeout_ms / 1000, transport=self.transport
        ) as client:
            endpoint_results = await asyncio.gather(
                *(self._deliver(client, url, body, headers) for url in self.webhook_urls)
            )

        result = DispatchResult(event_id=event.id, endpoint_results=list(endpoint_results))

        if result.success:
            event.mark_completed()
            logger.info(
                "Sync event delivered",
                event_id=event.id,
                event_type=event.type.value,
                endpoints=len(self.webhook_urls),
            )
        else:
            event.mark_failed(result.error_message)
            logger.warning(
                "Sync event delivery failed",
                event_id=event.id,
                event_type=event.type.value,
                failed_endpoints=len(result.failures),
                endpoints=len(self.webhook_urls),
                error=result.error_message,
            )

        return result

    def _build_headers(self, event: SyncEvent, body: str) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            EVENT_ID_HEADER: event.id,
            EVENT_TYPE_HEADER: event.type.value,
        }
        if self.signing_secret:
            headers[SIGNATURE_HEADER] = compute_signature(body, self.signing_secret)
        return headers

    async def _deliver(
        self, client: HTTPClient, url: str, body: str, headers: Dict[str, str]
    ) -> EndpointResult:
        """Call one endpoint. Never raises; failures are returned as results."""
        start_time = time.time()

        try:
            response = await asyncio.wait_for(
                client.post(url, content=body, headers=headers),
                timeout=self.timeout_ms / 1000,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            error = WebhookTimeoutError(url, self.timeout_ms)
            return self._failed(url, error, "timeout", start_time)
        except Exception as e:
            error = WebhookNetworkError(url, str(e) or e.__class__.__name__)
            return self._failed(url, error, "network", start_time)

        duration = time.time() - start_time

        if not response.is_success:
            return self._failed(
                url,
                WebhookStatusError(url, response.status_code),
                "status",
                start_time,
                status_code=response.status_code,
            )

        record_webhook_delivery("success", duration)
        return EndpointResult(
            url=url,
            success=True,
            status_code=response.status_code,
            duration_ms=duration * 1000,
        )

    def _failed(
        self,
        url: str,
        error: WebhookError,
        outcome: str,
        start_time: float,
        status_code: Optional[int] = None,
    ) -> EndpointResult:
        duration = time.time() - start_time
        record_webhook_delivery(outcome, duration)

        logger.warning(
            "Webhook call failed",
            url=url,
            outcome=outcome,
            status_code=status_code,
            error=error.message,
        )

        return EndpointResult(
            url=url,
            success=False,
            status_code=status_code,
            error=error,
            duration_ms=duration * 1000,
        )
