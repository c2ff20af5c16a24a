"""
Rate limiting module.

Token buckets keyed by client identity, one limiter per route group.
"""

from .token_bucket import RateLimiter, RateLimitRegistry, TokenBucket

__all__ = [
    "RateLimiter",
    "RateLimitRegistry",
    "TokenBucket",
]
