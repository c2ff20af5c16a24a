"""
Cache key schema.

    short:<code>    -> target url (TTL = settings.cache_ttl)
    stats:global    -> JSON {"total_urls", "total_clicks"} (TTL = settings.stats_cache_ttl)
"""

SHORT_URL_PREFIX = "short:"
GLOBAL_STATS_KEY = "stats:global"


def short_url_key(code: str) -> str:
    return f"{SHORT_URL_PREFIX}{code}"
