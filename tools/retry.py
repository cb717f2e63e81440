"""
RetryPolicy — Bounded retries with exponential backoff for external calls.

Only callers of the narrative service retry. The orchestrator loop never does.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from pydantic import BaseModel, Field

logger = logging.getLogger("Retry")

T = TypeVar("T")


class RetryExhaustedError(RuntimeError):
    """Every attempt failed. `last_error` holds the final exception."""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(f"Call failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class RetryPolicy(BaseModel):
    """max_attempts includes the first try. Delay before attempt n+1 is
    base_delay * multiplier**(n-1)."""

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=1.0, ge=0.0)
    multiplier: float = Field(default=2.0, ge=1.0)

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (self.multiplier ** (attempt - 1))


NO_RETRY = RetryPolicy(max_attempts=1, base_delay=0.0)


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "call",
) -> T:
    """Await fn() until it succeeds or the policy runs out of attempts."""
    last_error: Exception = None
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await fn()
        except retry_on as e:
            last_error = e
            logger.warning(f"{label} attempt {attempt}/{policy.max_attempts} failed: {e}")
            if attempt < policy.max_attempts:
                await sleep(policy.delay_for(attempt))

    raise RetryExhaustedError(policy.max_attempts, last_error)
