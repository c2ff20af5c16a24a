"""
Factory for creating cache instances.

The application builds one cache in its lifespan and keeps it on app.state;
the factory itself holds no instance.
"""

import logging
from enum import Enum

import redis.asyncio as redis
from redis.exceptions import RedisError

from shortlink_app.config import Settings
from .strategies import CacheStrategy, RedisCache, InMemoryCache, NullCache

logger = logging.getLogger(__name__)


class CacheBackend(Enum):
    """Available cache backends"""
    REDIS = "redis"
    MEMORY = "memory"
    NULL = "null"


class CacheFactory:
    """Creates the configured cache backend."""

    @classmethod
    async def create(cls, backend: CacheBackend, settings: Settings) -> CacheStrategy:
        """
        Create a cache instance.

        Redis is pinged once; if it is unreachable at startup the in-memory
        cache is used instead so the service still comes up.

        Args:
            backend: Type of cache backend (from enum)
            settings: Application settings (redis_url)
        """
        if backend == CacheBackend.REDIS:
            redis_client = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            try:
                await redis_client.ping()
            except RedisError as e:
                logger.warning("Redis connection failed (%s), falling back to in-memory cache", e)
                await redis_client.aclose()
                return InMemoryCache()

            logger.info("Redis cache initialized")
            return RedisCache(redis_client)

        elif backend == CacheBackend.MEMORY:
            logger.info("In-memory cache initialized")
            return InMemoryCache()

        elif backend == CacheBackend.NULL:
            logger.info("Null cache initialized")
            return NullCache()

        raise ValueError(f"Unknown cache backend: {backend}")
