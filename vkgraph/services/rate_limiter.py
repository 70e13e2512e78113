"""
RateLimiter - minimum-interval gate for outbound API calls.

VK rejects user tokens that exceed ~3 requests/second (error 6), so every
request waits until at least `min_interval` has passed since the previous
one. A single limiter is shared by everything that talks to the API.

Usage:
    limiter = RateLimiter(min_interval=0.35)
    await limiter.acquire()
    response = await client.get(...)
"""
import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    """Timestamp-based minimum-interval limiter"""

    def __init__(
        self,
        min_interval: float = 0.35,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None
        self._lock = asyncio.Lock()
        self.calls = 0

    async def acquire(self) -> float:
        """
        Wait for the next slot.

        Returns:
            Seconds spent waiting (0.0 when the interval had already elapsed)
        """
        async with self._lock:
            waited = 0.0
            if self._last_call is not None and self.min_interval > 0:
                elapsed = self._clock() - self._last_call
                remaining = self.min_interval - elapsed
                if remaining > 0:
                    logger.debug(f"⏳ Rate limit: sleeping {remaining:.3f}s")
                    await self._sleep(remaining)
                    waited = remaining

            self._last_call = self._clock()
            self.calls += 1
            return waited

    def reset(self):
        """Forget the previous call so the next acquire is immediate"""
        self._last_call = None
