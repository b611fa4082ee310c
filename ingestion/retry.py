"""
Bounded retry for a single asynchronous operation.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from core.exceptions import RetryableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryingExecutor:
    """
    Invoke an async operation up to `max_attempts` times.

    Only RetryableError subclasses (network faults, rate limits, GraphQL
    errors) are retried. Anything else, including client errors and
    programming errors, propagates on the first occurrence. The first
    successful attempt short-circuits the rest; when every attempt fails,
    the last exception propagates unchanged.

    A rate-limited attempt waits for the `retry_after` the API asked for
    before trying again.

    Attributes:
        max_attempts: Total attempts including the first (default: 3)
        retry_delay: Minimum pause between attempts in seconds (default: 0)
    """

    def __init__(
        self,
        max_attempts: int = 3,
        retry_delay: float = 0.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.sleep = sleep

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        description: str = "operation"
    ) -> T:
        last_exception = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()

            except RetryableError as e:
                last_exception = e
                if attempt < self.max_attempts:
                    delay = max(self.retry_delay, getattr(e, "retry_after", None) or 0)
                    logger.warning(
                        f"{description} failed (attempt {attempt}/{self.max_attempts}): {e}"
                        + (f", retrying in {delay}s" if delay else "")
                    )
                    if delay > 0:
                        await self.sleep(delay)
                else:
                    logger.error(
                        f"{description} failed after {self.max_attempts} attempts: {e}"
                    )

        raise last_exception
