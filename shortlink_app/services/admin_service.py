import logging
from typing import Dict

from shortlink_app.cache.keys import GLOBAL_STATS_KEY, SHORT_URL_PREFIX, short_url_key
from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.exceptions import UrlNotFoundError
from shortlink_app.storage.strategies import UrlStore

logger = logging.getLogger(__name__)


class AdminService:
    """
    Bulk operations for administrators.

    Deletes go to the store first; cache invalidation afterwards is a
    best-effort compensating step. If it fails, the old entry keeps
    redirecting until its TTL expires.
    """

    def __init__(self, store: UrlStore, cache: CacheStrategy):
        self.store = store
        self.cache = cache

    async def list_all(self) -> Dict[str, str]:
        """Every mapping as {code: url}. Unpaginated."""
        urls = await self.store.list_all()
        logger.info("Retrieved %d URL mappings", len(urls))
        return urls

    async def delete(self, code: str) -> str:
        url = await self.store.delete(code)
        if url is None:
            logger.warning("Code %s not found for deletion", code)
            raise UrlNotFoundError(code)

        logger.info("Code %s deleted", code)
        if not await self.cache.delete(short_url_key(code)):
            logger.warning("Cache invalidation failed for %s, stale until TTL expiry", code)
        return url

    async def delete_all(self) -> int:
        count = await self.store.delete_all()
        logger.info("Deleted %d mappings", count)

        if not await self.cache.clear_prefix(SHORT_URL_PREFIX):
            logger.warning("Cache flush failed, entries stale until TTL expiry")
        await self.cache.delete(GLOBAL_STATS_KEY)
        return count
