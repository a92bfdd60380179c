"""Implementation of a rate limiter.

Controls the frequency of outgoing requests so batch runs respect the usage
policies of free public APIs (e.g. Nominatim's one request per second).
Uses a simple sliding window algorithm.
"""

import time
import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 1
DEFAULT_TIME_WINDOW_SECONDS = 1.0


class RateLimiter:
    """Simple sliding window rate limiter."""

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        time_window: float = DEFAULT_TIME_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initializes the rate limiter.

        Args:
            max_requests: Maximum number of requests allowed in the time window.
            time_window: The time window in seconds. Zero disables limiting.
            clock: Monotonic clock, injectable for tests.
            sleep: Awaitable sleep used while waiting for the window.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if time_window < 0:
            raise ValueError("time_window must not be negative")
        self.max_requests = max_requests
        self.time_window = time_window
        self.clock = clock
        self.sleep = sleep
        self.timestamps: Deque[float] = deque()
        self._lock = asyncio.Lock()
        logger.debug(f"RateLimiter initialized: {max_requests} requests / {time_window} seconds")

    @classmethod
    def fixed_interval(
        cls,
        delay_s: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> "RateLimiter":
        """One request per `delay_s` seconds."""
        return cls(max_requests=1, time_window=delay_s, clock=clock, sleep=sleep)

    def _cleanup_timestamps(self) -> None:
        """Removes timestamps older than the time window."""
        now = self.clock()
        while self.timestamps and now - self.timestamps[0] >= self.time_window:
            self.timestamps.popleft()

    def _wait_time_locked(self) -> float:
        self._cleanup_timestamps()
        if len(self.timestamps) < self.max_requests:
            return 0.0
        oldest_timestamp = self.timestamps[0]
        return max(0.0, oldest_timestamp + self.time_window - self.clock())

    async def wait_for_permission(self) -> float:
        """Waits until a request is permitted. Returns the total time waited."""
        if self.time_window == 0:
            return 0.0
        waited = 0.0
        while True:
            async with self._lock:
                wait_time = self._wait_time_locked()
                if wait_time <= 0 and len(self.timestamps) < self.max_requests:
                    self.timestamps.append(self.clock())
                    logger.debug("Rate limit permission granted.")
                    return waited

            logger.debug(f"Rate limit reached. Waiting for {wait_time:.2f} seconds.")
            await self.sleep(wait_time)
            waited += wait_time
