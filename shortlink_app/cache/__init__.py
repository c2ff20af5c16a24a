"""
Cache module for the shortener.
Implements Strategy Pattern for flexible cache backends.
"""

from .strategies import CacheStrategy, RedisCache, InMemoryCache, NullCache
from .factory import CacheBackend, CacheFactory
from .keys import SHORT_URL_PREFIX, GLOBAL_STATS_KEY, short_url_key

__all__ = [
    "CacheStrategy",
    "RedisCache",
    "InMemoryCache",
    "NullCache",
    "CacheBackend",
    "CacheFactory",
    "SHORT_URL_PREFIX",
    "GLOBAL_STATS_KEY",
    "short_url_key",
]
