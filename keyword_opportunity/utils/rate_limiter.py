"""Async sliding-window rate limiter shared by the LLM and metrics clients."""

import asyncio
import logging
import time
from collections import deque
from typing import Optional

logger = logging.getLogger(__name__)

MINUTE = 60.0
HOUR = 3600.0


class RateLimiter:
    """Sliding-window limiter over requests-per-minute and, optionally, per hour.

    Usage::

        limiter = RateLimiter(requests_per_minute=30, name="keywords_everywhere")

        await limiter.acquire()
        # or
        async with limiter:
            await make_request()
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: Optional[int] = None,
        name: str = "default",
    ):
        if requests_per_minute < 1:
            raise ValueError("requests_per_minute must be at least 1")
        self._rpm = requests_per_minute
        self._rph = requests_per_hour
        self._name = name
        self._minute_window: deque[float] = deque()
        self._hour_window: deque[float] = deque()
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return self._name

    def _evict(self, now: float) -> None:
        while self._minute_window and now - self._minute_window[0] >= MINUTE:
            self._minute_window.popleft()
        while self._hour_window and now - self._hour_window[0] >= HOUR:
            self._hour_window.popleft()

    def seconds_until_available(self) -> float:
        """How long the next caller would wait; 0 when a slot is free."""
        now = time.monotonic()
        self._evict(now)
        wait = 0.0
        if len(self._minute_window) >= self._rpm:
            wait = MINUTE - (now - self._minute_window[0])
        if self._rph and len(self._hour_window) >= self._rph:
            wait = max(wait, HOUR - (now - self._hour_window[0]))
        return max(wait, 0.0)

    async def acquire(self) -> None:
        """Wait for a free slot, then claim it."""
        async with self._lock:
            wait = self.seconds_until_available()
            while wait > 0:
                logger.debug("RateLimiter(%s) sleeping %.2fs", self._name, wait)
                await asyncio.sleep(wait)
                wait = self.seconds_until_available()
            now = time.monotonic()
            self._minute_window.append(now)
            if self._rph:
                self._hour_window.append(now)

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, *args):
        return None

    @property
    def requests_in_last_minute(self) -> int:
        self._evict(time.monotonic())
        return len(self._minute_window)
