from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable


@dataclass
class AsyncTokenBucket:
    """
    Token bucket shared by every dispatch of a throttled run.

    Holds at most `capacity` tokens and refills `capacity` tokens per
    `refill_interval` seconds, so no more than `capacity` requests start in
    any interval. A non-positive interval disables throttling.
    """

    capacity: int
    refill_interval: float
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {self.capacity}")
        self.tokens = float(self.capacity)
        self.last = self.clock()
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self.refill_interval > 0

    @property
    def rate_per_sec(self) -> float:
        return self.capacity / self.refill_interval

    async def acquire(self, tokens: float = 1.0) -> None:
        if not self.enabled:
            return
        if tokens > self.capacity:
            raise ValueError(f"cannot acquire {tokens} tokens from a bucket of {self.capacity}")

        async with self._lock:
            while True:
                now = self.clock()
                elapsed = now - self.last
                self.last = now
                self.tokens = min(float(self.capacity), self.tokens + elapsed * self.rate_per_sec)
                if self.tokens >= tokens:
                    self.tokens -= tokens
                    return
                sleep_for = (tokens - self.tokens) / self.rate_per_sec
                await self.sleep(max(sleep_for, 0.01))
