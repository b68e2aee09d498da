"""
HTTP client used for outbound webhook calls.
"""

import time
from typing import Dict, Optional, Union

import httpx

from src.config.logging import get_logger

logger = get_logger(__name__)

USER_AGENT = "course-sync-service/webhooks"


class HTTPClient:
    """
    Thin async wrapper over ``httpx.AsyncClient`` with request timing logs.

    One client is opened per dispatch so connections to the configured
    endpoints are shared across the fan-out. ``transport`` lets tests swap in
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HTTPClient":
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=False,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()
            self.client = None

    async def post(
        self,
        url: str,
        content: Union[str, bytes],
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """POST a pre-serialized body. Transport errors propagate to the caller."""
        if self.client is None:
            raise RuntimeError("HTTPClient used outside of its async context")

        start_time = time.time()

        try:
            response = await self.client.post(url, content=content, headers=headers)
        except httpx.HTTPError as e:
            logger.debug(
                "Webhook request raised",
                url=url,
                error=str(e) or e.__class__.__name__,
                elapsed_ms=round((time.time() - start_time) * 1000, 2),
            )
            raise

        logger.debug(
            "Webhook request answered",
            url=url,
            status_code=response.status_code,
            elapsed_ms=round((time.time() - start_time) * 1000, 2),
        )

        return response
