"""
Bounded retry policy with a fixed delay between attempts.

The sleep function is injectable so callers (and tests) control time.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from clubhouse.services.errors import is_transient_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(RuntimeError):
    """Raised when every attempt failed with a retryable error."""

    def __init__(self, attempts: int, last_error: BaseException):
        super().__init__(f"Gave up after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class RetryPolicy:
    """
    Run an async operation up to ``max_attempts`` times.

    Only errors accepted by ``is_retryable`` are retried, with ``delay_seconds``
    between attempts; any other error propagates from the attempt that raised it.
    """

    def __init__(
        self,
        max_attempts: int = 5,
        delay_seconds: float = 3.0,
        is_retryable: Callable[[BaseException], bool] = is_transient_error,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if delay_seconds < 0:
            raise ValueError("delay_seconds cannot be negative")
        self.max_attempts = max_attempts
        self.delay_seconds = delay_seconds
        self.is_retryable = is_retryable
        self._sleep = sleep or asyncio.sleep

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Call ``operation`` until it succeeds or attempts run out.

        Raises:
            RetryExhaustedError: If the last allowed attempt failed with a retryable error
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except Exception as e:
                if not self.is_retryable(e):
                    raise
                if attempt == self.max_attempts:
                    raise RetryExhaustedError(attempt, e) from e
                logger.warning(
                    f"Attempt {attempt}/{self.max_attempts} failed ({e}); "
                    f"retrying in {self.delay_seconds}s"
                )
                await self._sleep(self.delay_seconds)
