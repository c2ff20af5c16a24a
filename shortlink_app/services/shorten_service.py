import logging
from typing import NamedTuple, Optional

from shortlink_app.background import BackgroundTasks
from shortlink_app.cache.keys import short_url_key
from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.exceptions import CodeCollisionError, ExhaustedRetriesError
from shortlink_app.services.code_generator import RandomCodeGenerator
from shortlink_app.services.validation import validate_target_url
from shortlink_app.storage.strategies import UrlStore

logger = logging.getLogger(__name__)


class ShortenResult(NamedTuple):
    code: str
    created: bool


class ShortenService:
    """
    Creates (or finds) the short code for a URL.

    Flow:
    1. Validate the URL (InvalidInputError)
    2. Dedupe: exact-string lookup, return the existing code if any
    3. Generate + insert, retrying on code collisions up to max_retries
    4. Populate the cache in the background

    Collision safety comes from the store's unique key on `code` only;
    there is no locking here. Two concurrent calls for the same new URL
    can both miss step 2 and end up with two codes, which is accepted.
    """

    def __init__(
        self,
        store: UrlStore,
        cache: CacheStrategy,
        tasks: BackgroundTasks,
        generator: Optional[RandomCodeGenerator] = None,
        max_retries: int = 5,
        max_url_length: int = 2048,
        cache_ttl: int = 3600
    ):
        self.store = store
        self.cache = cache
        self.tasks = tasks
        self.generator = generator or RandomCodeGenerator()
        self.max_retries = max_retries
        self.max_url_length = max_url_length
        self.cache_ttl = cache_ttl

    async def shorten(self, url: str) -> ShortenResult:
        """
        Returns:
            ShortenResult(code, created) - created is False when the URL was
            already shortened

        Raises:
            InvalidInputError: bad syntax, scheme or length
            ExhaustedRetriesError: every candidate code collided
            StoreError: store failure other than a collision
        """
        validate_target_url(url, self.max_url_length)

        existing = await self.store.find_code(url)
        if existing is not None:
            logger.info("URL already shortened, returning existing code %s", existing)
            self._populate_cache(existing, url)
            return ShortenResult(existing, created=False)

        for attempt in range(1, self.max_retries + 1):
            code = self.generator.generate()
            try:
                await self.store.insert(code, url)
            except CodeCollisionError:
                logger.warning(
                    "Collision on code %s (attempt %d/%d), retrying", code, attempt, self.max_retries
                )
                continue

            logger.info("Short URL created with code %s", code)
            self._populate_cache(code, url)
            return ShortenResult(code, created=True)

        logger.error("No free code found after %d attempts", self.max_retries)
        raise ExhaustedRetriesError(self.max_retries)

    def _populate_cache(self, code: str, url: str) -> None:
        self.tasks.spawn(
            self.cache.set(short_url_key(code), url, ttl=self.cache_ttl),
            name=f"cache-set:{code}"
        )
