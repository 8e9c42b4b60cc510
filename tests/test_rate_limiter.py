"""
Rate Limiter Tests
------------------
Token bucket behaviour.
"""

import asyncio
from pathlib import Path
import sys
import time

sys.path.insert(0, str(Path(__file__).parent.parent))

from api.rate_limiter import RateLimitConfig, RateLimiter


class TestRateLimiter:
    """Tests for RateLimiter."""

    def test_burst(self):
        """Up to burst_size requests pass immediately."""
        limiter = RateLimiter(RateLimitConfig(requests_per_minute=1, burst_size=3))

        assert [limiter.try_acquire() for _ in range(4)] == [True, True, True, False]

    def test_refill(self):
        limiter = RateLimiter(RateLimitConfig(requests_per_minute=6000, burst_size=1))
        limiter.try_acquire()

        time.sleep(0.05)

        assert limiter.try_acquire()

    def test_tokens_capped_at_burst(self):
        limiter = RateLimiter(RateLimitConfig(requests_per_minute=6000, burst_size=2))

        time.sleep(0.05)

        assert limiter.available_tokens <= 2.0

    def test_acquire_waits_for_token(self):
        limiter = RateLimiter(RateLimitConfig(requests_per_minute=1200, burst_size=1))
        limiter.try_acquire()

        assert asyncio.run(limiter.acquire(timeout=1.0))

    def test_acquire_timeout(self):
        limiter = RateLimiter(RateLimitConfig(requests_per_minute=1, burst_size=1))
        limiter.try_acquire()

        start = time.monotonic()
        acquired = asyncio.run(limiter.acquire(timeout=0.1))

        assert not acquired
        assert time.monotonic() - start < 1.0

    def test_wait_time(self):
        limiter = RateLimiter(RateLimitConfig(requests_per_minute=60, burst_size=1))

        assert limiter.wait_time() == 0.0

        limiter.try_acquire()

        assert 0.9 < limiter.wait_time() <= 1.0

    def test_reset(self):
        limiter = RateLimiter(RateLimitConfig(requests_per_minute=1, burst_size=2))
        limiter.try_acquire()
        limiter.try_acquire()

        limiter.reset()

        assert limiter.available_tokens >= 2.0 - 1e-6

    def test_shared_between_tasks(self):
        """Concurrent tasks never take more tokens than the bucket holds."""
        limiter = RateLimiter(RateLimitConfig(requests_per_minute=1, burst_size=3))

        async def take_all():
            return await asyncio.gather(*(limiter.acquire(timeout=0.05) for _ in range(5)))

        results = asyncio.run(take_all())

        assert results.count(True) == 3

    def test_reused_across_event_loops(self):
        """Contended bursts work in a second asyncio.run()."""
        limiter = RateLimiter(RateLimitConfig(requests_per_minute=1, burst_size=1))

        async def burst():
            return await asyncio.gather(*(limiter.acquire(timeout=0.05) for _ in range(3)))

        first = asyncio.run(burst())
        limiter.reset()
        second = asyncio.run(burst())

        assert first.count(True) == 1
        assert second.count(True) == 1
