import json
import logging

from shortlink_app.cache.keys import GLOBAL_STATS_KEY
from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.exceptions import UrlNotFoundError
from shortlink_app.schemas.url import CodeStats, DailyClicks, GlobalStats
from shortlink_app.storage.strategies import UrlStore

logger = logging.getLogger(__name__)


class StatsService:
    """Click statistics, read straight from the store's click log."""

    def __init__(self, store: UrlStore, cache: CacheStrategy, stats_cache_ttl: int = 300):
        self.store = store
        self.cache = cache
        self.stats_cache_ttl = stats_cache_ttl

    async def code_stats(self, code: str) -> CodeStats:
        if await self.store.find_url(code) is None:
            raise UrlNotFoundError(code)

        total = await self.store.total_clicks(code)
        daily = await self.store.daily_clicks(code)
        return CodeStats(
            code=code,
            total_clicks=total,
            daily_clicks=[DailyClicks(**row) for row in daily]
        )

    async def global_stats(self) -> GlobalStats:
        """Service-wide totals, cached briefly since they change on every click"""
        cached = await self.cache.get(GLOBAL_STATS_KEY)
        if cached is not None:
            try:
                return GlobalStats(**json.loads(cached))
            except (ValueError, TypeError) as e:
                logger.debug("Ignoring malformed cached stats: %s", e)

        total_urls, total_clicks = await self.store.totals()
        stats = GlobalStats(total_urls=total_urls, total_clicks=total_clicks)
        await self.cache.set(GLOBAL_STATS_KEY, stats.model_dump_json(), ttl=self.stats_cache_ttl)
        return stats
