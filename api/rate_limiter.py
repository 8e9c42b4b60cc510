"""
Rate Limiter
------------
Token bucket throttling requests to the Challonge API.
"""

from dataclasses import dataclass
from typing import Optional
import asyncio
import time


@dataclass
class RateLimitConfig:
    """Rate limit configuration."""
    requests_per_minute: int = 60
    burst_size: int = 10  # Requests allowed back to back


class RateLimiter:
    """
    Token bucket rate limiter.

    Shared by every request of one client; tasks on the same event loop
    take tokens one at a time.
    """

    MIN_SLEEP = 0.01

    def __init__(self, config: Optional[RateLimitConfig] = None):
        self.config = config or RateLimitConfig()
        self._capacity = float(self.config.burst_size)
        self._rate = self.config.requests_per_minute / 60.0  # Tokens per second
        self._tokens = self._capacity
        self._stamp = time.monotonic()
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    def _get_lock(self) -> asyncio.Lock:
        # Rebuilt when the limiter is used from a new event loop
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def acquire(self, timeout: float = 30.0) -> bool:
        """
        Wait for a token.

        Returns True once a token is taken, False if none frees up
        within `timeout` seconds.
        """
        deadline = time.monotonic() + timeout

        async with self._get_lock():
            while not self.try_acquire():
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                await asyncio.sleep(max(self.MIN_SLEEP, min(self.wait_time(), remaining)))

        return True

    def try_acquire(self) -> bool:
        """Take a token if one is available, without waiting."""
        self._refill()
        if self._tokens < 1.0:
            return False
        self._tokens -= 1.0
        return True

    def wait_time(self) -> float:
        """Seconds until the next token is available."""
        self._refill()
        if self._tokens >= 1.0:
            return 0.0
        if self._rate <= 0:
            return float("inf")
        return (1.0 - self._tokens) / self._rate

    def _refill(self) -> None:
        now = time.monotonic()
        self._tokens = min(self._capacity, self._tokens + (now - self._stamp) * self._rate)
        self._stamp = now

    @property
    def available_tokens(self) -> float:
        self._refill()
        return self._tokens

    def reset(self) -> None:
        """Refill the bucket to burst_size."""
        self._tokens = self._capacity
        self._stamp = time.monotonic()
