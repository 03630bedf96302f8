"""
Retry policy for fallible async operations.

Linear backoff: after failed attempt n the policy waits n * base_delay
seconds before trying again. No wait follows the final attempt.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from loguru import logger

T = TypeVar("T")

MAX_RETRY_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 1.0


class RetryError(Exception):
    """Raised when every attempt failed. ``last_error`` holds the final failure."""

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Failed after {attempts} attempts: {last_error}")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with linear backoff."""

    max_attempts: int = MAX_RETRY_ATTEMPTS
    base_delay: float = RETRY_DELAY_SECONDS
    sleep: Callable[[float], Awaitable[object]] = field(default=asyncio.sleep, repr=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must not be negative, got {self.base_delay}")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return attempt * self.base_delay

    async def run(self, operation: Callable[[int], Awaitable[T]], label: str = "operation") -> T:
        """
        Run operation until it succeeds or the attempt budget is spent.

        Args:
            operation: Async callable receiving the 1-based attempt number
            label: Name used in log messages

        Returns:
            The operation's result from the first successful attempt

        Raises:
            RetryError: If every attempt raised
        """
        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation(attempt)
            except Exception as e:
                last_error = e
                logger.warning(f"{label}: attempt {attempt}/{self.max_attempts} failed: {e}")
                if attempt < self.max_attempts:
                    await self.sleep(self.delay_for(attempt))

        raise RetryError(self.max_attempts, last_error)
