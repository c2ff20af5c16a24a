"""Token bucket rate limiter implementation.

Each client key owns a bucket holding up to `burst` tokens, refilled at
`rate_per_second`. A request consumes one token; with no token available
the request is rejected along with how long until one is.

acquire() contains no await, so on a single event loop it runs atomically
and needs no lock. Buckets that have refilled to capacity carry no state
worth keeping and are dropped by retain_recent(), which the application
calls from a periodic sweep.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

logger = logging.getLogger(__name__)


@dataclass
class TokenBucket:
    tokens: float
    last_refill: float


class RateLimiter:
    """Token bucket rate limiter.

    Args:
        name: Route group this limiter protects (used in logs)
        rate_per_second: Tokens added per second
        burst: Bucket capacity
        clock: Monotonic time source, overridable in tests
    """

    def __init__(
        self,
        name: str,
        rate_per_second: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic
    ):
        if rate_per_second <= 0 or burst < 1:
            raise ValueError(f"Invalid rate limit for {name}: {rate_per_second}/s burst {burst}")
        self.name = name
        self.rate = rate_per_second
        self.burst = burst
        self._clock = clock
        self._buckets: Dict[str, TokenBucket] = {}

    def _refill(self, bucket: TokenBucket, now: float) -> None:
        elapsed = now - bucket.last_refill
        bucket.tokens = min(self.burst, bucket.tokens + elapsed * self.rate)
        bucket.last_refill = now

    def acquire(self, key: str) -> Tuple[bool, float]:
        """Try to take a token for `key`.

        Returns:
            (allowed, retry_after_seconds); retry_after is 0 when allowed
        """
        now = self._clock()
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = self._buckets[key] = TokenBucket(tokens=self.burst, last_refill=now)
        else:
            self._refill(bucket, now)

        if bucket.tokens >= 1:
            bucket.tokens -= 1
            return True, 0.0

        return False, (1 - bucket.tokens) / self.rate

    def retain_recent(self) -> int:
        """Evict buckets that are full again; returns how many were dropped"""
        now = self._clock()
        idle = []
        for key, bucket in self._buckets.items():
            self._refill(bucket, now)
            if bucket.tokens >= self.burst:
                idle.append(key)
        for key in idle:
            del self._buckets[key]
        return len(idle)

    def __len__(self) -> int:
        return len(self._buckets)


class RateLimitRegistry:
    """Named limiters, one per route group (e.g. "redirect", "shorten")."""

    def __init__(self):
        self._limiters: Dict[str, RateLimiter] = {}

    def add(self, limiter: RateLimiter) -> RateLimiter:
        self._limiters[limiter.name] = limiter
        logger.info(
            "Rate limit %s: %s requests/s, burst %d", limiter.name, limiter.rate, limiter.burst
        )
        return limiter

    def get(self, name: str) -> RateLimiter:
        return self._limiters[name]

    async def sweep(self) -> int:
        evicted = 0
        for limiter in self._limiters.values():
            evicted += limiter.retain_recent()
            logger.debug("Rate limit %s storage size: %d", limiter.name, len(limiter))
        return evicted
