"""
Retry Policy - Exponential Backoff for Async Remote Calls

Transient failures (5xx or no status) are retried with doubling delays;
client errors (status < 500) are raised immediately.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from .errors import is_transient_status, status_of
from .reliability_config import RETRY_CONFIG

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RetryPolicy:
    """
    Exponential backoff retry policy

    Features:
    - Exponential backoff (delay = base_delay * exponential_base ^ attempt)
    - Retryable vs non-retryable classification by status code
    - Original exception re-raised unchanged when giving up

    Only the calling coroutine waits during backoff; the event loop keeps
    running other work.
    """

    def __init__(self, max_retries: Optional[int] = None,
                 base_delay: Optional[float] = None,
                 exponential_base: Optional[float] = None,
                 sleep: Optional[Callable[[float], Awaitable[Any]]] = None):
        """
        Initialize retry policy (defaults from RETRY_CONFIG)

        Args:
            max_retries: Retries after the first attempt
            base_delay: Delay before the first retry, in seconds
            exponential_base: Multiplier applied to the delay after each retry
            sleep: Async sleep function (defaults to asyncio.sleep)
        """
        self.max_retries = RETRY_CONFIG['max_retries'] if max_retries is None else max_retries
        self.base_delay = RETRY_CONFIG['base_delay'] if base_delay is None else base_delay
        self.exponential_base = (RETRY_CONFIG['exponential_base']
                                 if exponential_base is None else exponential_base)
        self._sleep = sleep or asyncio.sleep

    def is_retryable(self, error: BaseException) -> bool:
        """
        Classify error as retryable or not

        Non-retryable: any error carrying a status code below 500.
        Retryable: 5xx, or no status at all (network blips, bad payloads).
        """
        return is_transient_status(status_of(error))

    def get_delay(self, attempt: int) -> float:
        """
        Delay before retry number attempt (0-indexed)

        Returns:
            Delay in seconds
        """
        return self.base_delay * (self.exponential_base ** attempt)

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run operation with retry logic

        Args:
            operation: Zero-argument callable returning an awaitable

        Returns:
            Result of the first successful attempt

        Raises:
            The last exception, unmodified, once retries are exhausted or
            the error is non-retryable
        """
        attempt = 0

        while True:
            try:
                return await operation()

            except Exception as e:
                retries_left = self.max_retries - attempt
                if retries_left <= 0 or not self.is_retryable(e):
                    if retries_left <= 0 and attempt > 0:
                        logger.error(f"Giving up after {attempt} retries: {e!r}")
                    raise

                delay = self.get_delay(attempt)
                logger.warning(
                    f"Transient failure ({e!r}); retrying in {delay:.1f}s "
                    f"({retries_left} retries left)"
                )
                await self._sleep(delay)
                attempt += 1

    def get_stats(self) -> Dict[str, Any]:
        return {
            'max_retries': self.max_retries,
            'base_delay': self.base_delay,
            'exponential_base': self.exponential_base,
            'worst_case_backoff': sum(self.get_delay(i) for i in range(self.max_retries))
        }


async def with_retry(operation: Callable[[], Awaitable[T]], retries: int = 3,
                     delay: float = 1.0) -> T:
    """
    Function form of RetryPolicy

    Args:
        operation: Zero-argument callable returning an awaitable
        retries: Retry budget after the first attempt
        delay: First backoff delay in seconds, doubled on each retry

    Example:
        indices = await with_retry(lambda: client.fetch_market_indices())
    """
    policy = RetryPolicy(max_retries=retries, base_delay=delay, exponential_base=2)
    return await policy.execute(operation)
