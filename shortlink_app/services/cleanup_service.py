import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from shortlink_app.cache.keys import short_url_key
from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.storage.strategies import UrlStore

logger = logging.getLogger(__name__)


class CleanupService:
    """
    Age-based expiry of mappings.

    Runs from a PeriodicTask. Each purged code gets the same best-effort
    cache invalidation as an admin delete.
    """

    def __init__(self, store: UrlStore, cache: CacheStrategy, max_age_days: int = 0):
        self.store = store
        self.cache = cache
        self.max_age_days = max_age_days

    @property
    def enabled(self) -> bool:
        return self.max_age_days > 0

    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        if not self.enabled:
            return 0

        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=self.max_age_days)
        codes = await self.store.delete_created_before(cutoff)

        stale = 0
        for code in codes:
            if not await self.cache.delete(short_url_key(code)):
                stale += 1

        if codes:
            logger.info("Purged %d mappings older than %s", len(codes), cutoff.isoformat())
        if stale:
            logger.warning("Cache invalidation failed for %d purged codes, stale until TTL expiry", stale)
        return len(codes)
