"""
Retry Handler service: exponential backoff with jitter and bounded retries.
"""

import asyncio
import inspect
import random
from typing import Any, Awaitable, Callable, TypeVar, Union

from src.config.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Fraction of the computed delay added at most as random jitter.
JITTER_RATIO = 0.3

DEFAULT_BASE_DELAY_MS = 1000
DEFAULT_MAX_DELAY_MS = 30000


def calculate_base_delay(
    attempt: int,
    base_delay_ms: float = DEFAULT_BASE_DELAY_MS,
    max_delay_ms: float = DEFAULT_MAX_DELAY_MS,
) -> float:
    """Exponential delay before jitter: ``min(base * 2^attempt, cap)``."""
    if attempt < 0:
        raise ValueError("attempt must be non-negative")
    return min(base_delay_ms * (2 ** attempt), max_delay_ms)


def calculate_backoff(
    attempt: int,
    base_delay_ms: float = DEFAULT_BASE_DELAY_MS,
    max_delay_ms: float = DEFAULT_MAX_DELAY_MS,
) -> float:
    """
    Calculate retry delay in milliseconds with exponential backoff and jitter.

    Up to 30% of the capped delay is added uniformly at random so that events
    failing together do not retry in lockstep. The result always lies in
    ``[d, 1.3 * d]`` where ``d`` is the pre-jitter delay.
    """
    delay = calculate_base_delay(attempt, base_delay_ms, max_delay_ms)
    jitter = random.uniform(0, JITTER_RATIO * delay)
    return delay + jitter


async def retry_with_backoff(
    operation: Callable[[], Union[T, Awaitable[T]]],
    max_attempts: int = 3,
    base_delay_ms: float = DEFAULT_BASE_DELAY_MS,
    max_delay_ms: float = DEFAULT_MAX_DELAY_MS,
    operation_key: str = "default",
) -> T:
    """
    Execute operation with bounded retries and exponential backoff.

    Args:
        operation: Sync or async callable taking no arguments
        max_attempts: Total number of attempts, including the first one
        base_delay_ms: Base delay for exponential backoff
        max_delay_ms: Cap applied before jitter
        operation_key: Label used in log records

    Returns:
        Result of the operation

    Raises:
        Exception: The last error once all attempts are exhausted
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_exception = None

    for attempt in range(max_attempts):
        try:
            result = operation()
            if inspect.isawaitable(result):
                result = await result
            return result

        except Exception as e:
            last_exception = e

            if attempt == max_attempts - 1:
                logger.error(
                    "Operation failed after all retries",
                    operation_key=operation_key,
                    total_attempts=attempt + 1,
                    final_error=str(e),
                )
                break

            delay_ms = calculate_backoff(attempt, base_delay_ms, max_delay_ms)

            logger.warning(
                "Operation failed, retrying",
                operation_key=operation_key,
                attempt=attempt + 1,
                max_attempts=max_attempts,
                error=str(e),
                next_retry_in_ms=round(delay_ms, 1),
            )

            await asyncio.sleep(delay_ms / 1000)

    raise last_exception


class RetryHandlerInterface:
    """Interface for retry handling operations."""

    async def execute_with_retry(
        self, operation: Callable[[], Any], operation_key: str = "default"
    ) -> Any:
        """Execute operation with retry logic."""
        raise NotImplementedError


class RetryHandler(RetryHandlerInterface):
    """Retry handler with exponential backoff and jitter."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay_ms: float = DEFAULT_BASE_DELAY_MS,
        max_delay_ms: float = DEFAULT_MAX_DELAY_MS,
    ):
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def execute_with_retry(
        self, operation: Callable[[], Any], operation_key: str = "default"
    ) -> Any:
        """Execute operation with the handler's retry policy."""
        return await retry_with_backoff(
            operation,
            max_attempts=self.max_attempts,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms,
            operation_key=operation_key,
        )
