"""
Cache strategies using Strategy Pattern.
Allows switching between different cache backends (Redis, In-Memory, Null).

Contract shared by every strategy: methods never raise. A backend failure
is logged and reported as a miss (get) or False (writes), so the cache can
only ever make a request faster, never make it fail.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class CacheStrategy(ABC):
    """
    Abstract base class for cache strategies.

    All methods are async because cache operations involve I/O (network for Redis).
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Get value from cache.

        Returns:
            Cached value, or None on miss or backend failure
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        """
        Set value in cache with TTL (Time To Live).

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (default: 1 hour)

        Returns:
            True if stored, False otherwise
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete key from cache.

        Returns:
            True if the backend accepted the delete (whether or not the key
            existed), False if the backend failed
        """
        pass

    @abstractmethod
    async def clear_prefix(self, prefix: str) -> bool:
        """
        Remove every key starting with `prefix`.

        Returns:
            True if successful
        """
        pass

    async def close(self) -> None:
        pass


class RedisCache(CacheStrategy):
    """
    Redis cache implementation over a `redis.asyncio` client.

    The client must be created with decode_responses=True so values come
    back as str.
    """

    SCAN_BATCH = 500

    def __init__(self, redis_client):
        """
        Args:
            redis_client: redis.asyncio.Redis instance (shares its connection pool)
        """
        self.redis = redis_client

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.redis.get(key)
        except RedisError as e:
            logger.debug("Redis get failed for %s, treating as miss: %s", key, e)
            return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        try:
            return bool(await self.redis.set(key, value, ex=ttl))
        except RedisError as e:
            logger.debug("Redis set failed for %s, skipping: %s", key, e)
            return False

    async def delete(self, key: str) -> bool:
        try:
            await self.redis.delete(key)
            return True
        except RedisError as e:
            logger.warning("Redis delete failed for %s: %s", key, e)
            return False

    async def clear_prefix(self, prefix: str) -> bool:
        try:
            batch = []
            async for key in self.redis.scan_iter(match=f"{prefix}*", count=self.SCAN_BATCH):
                batch.append(key)
                if len(batch) >= self.SCAN_BATCH:
                    await self.redis.unlink(*batch)
                    batch.clear()
            if batch:
                await self.redis.unlink(*batch)
            return True
        except RedisError as e:
            logger.warning("Redis flush of %s* failed: %s", prefix, e)
            return False

    async def close(self) -> None:
        try:
            await self.redis.aclose()
        except RedisError as e:
            logger.debug("Redis close failed: %s", e)


class InMemoryCache(CacheStrategy):
    """
    In-memory cache implementation using Python dict.

    Expiry is checked lazily on read against `clock` (time.monotonic by
    default; tests pass a fake clock to step over the TTL). Keys that are
    never read again are dropped by purge_expired(), which set() runs
    whenever the dict grows past `sweep_threshold` entries.

    Pros:
    - Very fast (no network overhead)
    - No external dependencies

    Cons:
    - Not distributed (each process has its own cache)
    - Lost on restart
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_threshold: int = 1000
    ):
        self._cache: Dict[str, Tuple[str, float]] = {}
        self._clock = clock
        self.sweep_threshold = sweep_threshold
        self._next_sweep_at = sweep_threshold

    async def get(self, key: str) -> Optional[str]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._cache[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        if len(self._cache) >= self._next_sweep_at:
            self.purge_expired()
            # Live entries only: wait for the dict to double before scanning again
            self._next_sweep_at = max(self.sweep_threshold, 2 * len(self._cache))
        self._cache[key] = (value, self._clock() + ttl)
        return True

    async def delete(self, key: str) -> bool:
        self._cache.pop(key, None)
        return True

    async def clear_prefix(self, prefix: str) -> bool:
        for key in [k for k in self._cache if k.startswith(prefix)]:
            del self._cache[key]
        return True

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed"""
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._cache.items() if now >= expires_at]
        for key in expired:
            del self._cache[key]
        if expired:
            logger.debug("Purged %d expired cache entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._cache)


class NullCache(CacheStrategy):
    """
    Null Object Pattern - cache that does nothing.

    Used to disable caching: every read is a miss, so every redirect goes
    to the store.
    """

    async def get(self, key: str) -> Optional[str]:
        return None

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        return True

    async def delete(self, key: str) -> bool:
        return True

    async def clear_prefix(self, prefix: str) -> bool:
        return True
