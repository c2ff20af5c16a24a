import logging

from shortlink_app.background import BackgroundTasks
from shortlink_app.cache.keys import short_url_key
from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.exceptions import StoreError, UrlNotFoundError
from shortlink_app.hit_processor.click_recorder import ClickRecorder
from shortlink_app.storage.strategies import UrlStore

logger = logging.getLogger(__name__)


class RedirectService:
    """
    Resolves codes using the Cache-Aside pattern.

    Flow:
    1. Check cache first; a hit is trusted as-is
    2. On miss, query the store
    3. Populate the cache in the background (never awaited)
    4. Queue a click event (never awaited, never raises)

    Store failures surface as StoreError and unknown codes as
    UrlNotFoundError, so monitoring can tell outages from bad links.
    """

    def __init__(
        self,
        store: UrlStore,
        cache: CacheStrategy,
        tasks: BackgroundTasks,
        clicks: ClickRecorder,
        cache_ttl: int = 3600
    ):
        self.store = store
        self.cache = cache
        self.tasks = tasks
        self.clicks = clicks
        self.cache_ttl = cache_ttl

    async def resolve(self, code: str) -> str:
        key = short_url_key(code)

        cached_url = await self.cache.get(key)
        if cached_url is not None:
            logger.debug("Cache hit for %s", code)
            self.clicks.record(code)
            return cached_url

        try:
            url = await self.store.find_url(code)
        except StoreError as e:
            logger.error("Store lookup failed for redirect code %s: %s", code, e)
            raise

        if url is None:
            logger.info("Unknown code %s", code)
            raise UrlNotFoundError(code)

        logger.debug("Cache miss for %s, fetched from store", code)
        self.tasks.spawn(
            self.cache.set(key, url, ttl=self.cache_ttl),
            name=f"cache-set:{code}"
        )
        self.clicks.record(code)
        return url
