"""
RateLimiter — Token bucket in front of the narrative service.

Each NarrativeClient owns its own limiter; nothing is shared at module level.
"""

import time
import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger('RateLimiter')


class RateLimiter:
    """Token bucket: bursts up to `max_tokens`, refilled at `refill_rate`
    tokens per second. A refill_rate of 0 disables limiting.

    `clock` and `sleep` are injectable so tests don't have to wait.
    """

    def __init__(
        self,
        max_tokens: int = 15,
        refill_rate: float = 0.25,
        name: str = "narrative",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.max_tokens = max_tokens
        self.refill_rate = refill_rate
        self.name = name
        self._clock = clock
        self._sleep = sleep
        self.tokens = float(max_tokens)
        self.last_refill = clock()
        self._lock = asyncio.Lock()

    @classmethod
    def unlimited(cls) -> "RateLimiter":
        return cls(max_tokens=1, refill_rate=0.0, name="unlimited")

    @property
    def enabled(self) -> bool:
        return self.refill_rate > 0

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self.last_refill
        self.tokens = min(self.max_tokens, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    def _wait_time(self) -> Optional[float]:
        if self.tokens >= 1.0:
            return None
        return (1.0 - self.tokens) / self.refill_rate

    def try_acquire(self) -> bool:
        """Take a token if one is free right now. Never waits."""
        if not self.enabled:
            return True
        self._refill()
        if self._wait_time() is not None:
            return False
        self.tokens -= 1.0
        return True

    async def acquire(self) -> None:
        """Wait until a token is available, then consume one."""
        if not self.enabled:
            return
        async with self._lock:
            self._refill()
            wait = self._wait_time()
            if wait is not None:
                logger.warning(f"[{self.name}] Rate limited, waiting {wait:.1f}s")
                await self._sleep(wait)
                self._refill()
            self.tokens = max(0.0, self.tokens - 1.0)

    @property
    def available(self) -> float:
        if not self.enabled:
            return float("inf")
        self._refill()
        return self.tokens
