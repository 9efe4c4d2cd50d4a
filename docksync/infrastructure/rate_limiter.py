"""
Adaptive request pacing driven by the remote host's rate-limit headers.
"""

import asyncio
import random
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from .logger import logger


@dataclass
class RateLimitInfo:
    """Latest rate-limit state reported by the remote host."""

    limit: int = 5000
    remaining: int = 5000
    used: int = 0
    reset_time: Optional[datetime] = None

    @property
    def is_exhausted(self) -> bool:
        return self.remaining <= 10

    @property
    def reset_in_seconds(self) -> float:
        if not self.reset_time:
            return 0.0
        return max((self.reset_time - datetime.now()).total_seconds(), 0.0)


class RateLimiter:
    """
    Spaces out requests and waits for the reset window when the quota is
    nearly exhausted.
    """

    def __init__(
        self,
        default_delay: float = 0.0,
        max_delay: float = 60.0,
        adaptive: bool = True
    ):
        self.default_delay = default_delay
        self.max_delay = max_delay
        self.adaptive = adaptive
        self.rate_limit_info = RateLimitInfo()
        self._last_request = 0.0
        self._consecutive_limits = 0
        self._lock = asyncio.Lock()

    def _calculate_delay(self) -> float:
        if not self.adaptive or self.default_delay <= 0:
            return self.default_delay

        # Back off harder each time the quota was found exhausted in a row
        delay = self.default_delay * (2 ** self._consecutive_limits)
        delay *= random.uniform(0.9, 1.1)
        return min(delay, self.max_delay)

    async def acquire(self) -> None:
        """Wait until the next request may be sent."""

        now = time.time()

        if self.rate_limit_info.is_exhausted:
            wait = min(self.rate_limit_info.reset_in_seconds, self.max_delay)
            if wait > 0:
                logger.warning(f"Rate limit nearly exhausted, waiting {wait:.1f}s for reset")
                await asyncio.sleep(wait)

        delay = self._calculate_delay()
        elapsed = now - self._last_request
        if delay > 0 and elapsed < delay:
            await asyncio.sleep(delay - elapsed)

        self._last_request = time.time()

    async def update_rate_limit_info(self, headers: Mapping[str, str]) -> None:
        """Record the ``x-ratelimit-*`` headers of a response."""

        async with self._lock:
            info = self.rate_limit_info
            if "x-ratelimit-limit" in headers:
                info.limit = int(headers["x-ratelimit-limit"])
            if "x-ratelimit-remaining" in headers:
                info.remaining = int(headers["x-ratelimit-remaining"])
            if "x-ratelimit-used" in headers:
                info.used = int(headers["x-ratelimit-used"])
            if "x-ratelimit-reset" in headers:
                info.reset_time = datetime.fromtimestamp(int(headers["x-ratelimit-reset"]))

            if info.is_exhausted:
                self._consecutive_limits += 1
            else:
                self._consecutive_limits = 0


__all__ = [
    "RateLimitInfo",
    "RateLimiter",
]
