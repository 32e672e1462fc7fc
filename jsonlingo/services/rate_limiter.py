"""
Sliding-window rate limiter for outbound translation calls.

Keeps the timestamps of recent admissions. A caller waiting for a slot is
suspended (never busy-spins) and re-checks at most once per second, or
sooner if the oldest admission leaves the window earlier.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

MAX_POLL_INTERVAL = 1.0  # seconds


class RateLimiter:
    """
    Allow at most `max_requests` admissions per trailing `window_ms`.
    
    Shared by every job in the process. Check-and-record happens without
    an await in between, so concurrent waiters cannot over-admit.
    """
    
    def __init__(
        self,
        max_requests: int = 60,
        window_ms: int = 60_000,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        self.max_requests = max_requests
        self.window_ms = window_ms
        self._clock = clock
        self._sleep = sleep
        self._requests: deque[float] = deque()
    
    @property
    def window(self) -> float:
        """Window length in seconds."""
        return self.window_ms / 1000
    
    def _cleanup(self, now: float) -> None:
        while self._requests and now - self._requests[0] >= self.window:
            self._requests.popleft()
    
    async def wait_for_slot(self) -> None:
        """Suspend until a slot is free, then claim it."""
        while True:
            now = self._clock()
            self._cleanup(now)
            if len(self._requests) < self.max_requests:
                self._requests.append(now)
                return
            
            wait = max(0.0, self._requests[0] + self.window - now)
            logger.debug(f"Rate limit reached, next slot in {wait:.2f}s")
            await self._sleep(min(wait, MAX_POLL_INTERVAL))
    
    def remaining_requests(self) -> int:
        self._cleanup(self._clock())
        return max(0, self.max_requests - len(self._requests))
    
    def reset_time(self) -> float:
        """Clock time at which the oldest admission leaves the window (0 if none)."""
        if not self._requests:
            return 0.0
        return self._requests[0] + self.window
    
    def reset(self) -> None:
        """Forget all admissions. Use between sessions, not mid-session."""
        self._requests.clear()
    
    def stats(self) -> dict[str, float]:
        self._cleanup(self._clock())
        return {
            "current_requests": len(self._requests),
            "max_requests": self.max_requests,
            "window_ms": self.window_ms,
            "reset_time": self.reset_time(),
        }
