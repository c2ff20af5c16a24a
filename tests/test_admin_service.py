"""
Tests for AdminService and CleanupService: store-first deletes with
best-effort cache invalidation.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from shortlink_app.cache import GLOBAL_STATS_KEY, CacheStrategy, InMemoryCache, short_url_key
from shortlink_app.exceptions import UrlNotFoundError
from shortlink_app.hit_processor.click_recorder import ClickRecorder
from shortlink_app.services.admin_service import AdminService
from shortlink_app.services.cleanup_service import CleanupService
from shortlink_app.services.redirect_service import RedirectService


class TestAdminService:
    """Test admin listing and deletion"""

    @pytest.mark.asyncio
    async def test_list_all(self, store, cache):
        await store.insert("aaa111", "https://a.example.com/")
        await store.insert("bbb222", "https://b.example.com/")
        service = AdminService(store, cache)

        assert await service.list_all() == {
            "aaa111": "https://a.example.com/",
            "bbb222": "https://b.example.com/",
        }

    @pytest.mark.asyncio
    async def test_delete_removes_mapping_and_cache_entry(self, store, cache):
        await store.insert("aaa111", "https://a.example.com/")
        await cache.set(short_url_key("aaa111"), "https://a.example.com/")
        service = AdminService(store, cache)

        url = await service.delete("aaa111")

        assert url == "https://a.example.com/"
        assert await store.find_url("aaa111") is None
        assert await cache.get(short_url_key("aaa111")) is None

    @pytest.mark.asyncio
    async def test_delete_unknown_code(self, store, cache):
        service = AdminService(store, cache)

        with pytest.raises(UrlNotFoundError):
            await service.delete("nope00")

    @pytest.mark.asyncio
    async def test_failed_invalidation_still_deletes(self, store):
        """Store delete succeeds even if the cache is down; the entry is stale until TTL"""
        await store.insert("aaa111", "https://a.example.com/")
        cache = AsyncMock(spec=CacheStrategy)
        cache.delete.return_value = False
        service = AdminService(store, cache)

        assert await service.delete("aaa111") == "https://a.example.com/"
        assert await store.find_url("aaa111") is None
        cache.delete.assert_awaited_once_with(short_url_key("aaa111"))

    @pytest.mark.asyncio
    async def test_delete_all(self, store, cache):
        await store.insert("aaa111", "https://a.example.com/")
        await store.insert("bbb222", "https://b.example.com/")
        await cache.set(short_url_key("aaa111"), "https://a.example.com/")
        await cache.set(GLOBAL_STATS_KEY, '{"total_urls": 2, "total_clicks": 0}')
        service = AdminService(store, cache)

        assert await service.delete_all() == 2

        assert await store.list_all() == {}
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_delete_all_on_empty_store(self, store, cache):
        assert await AdminService(store, cache).delete_all() == 0


class TestCleanupService:
    """Test age-based expiry"""

    @pytest.mark.asyncio
    async def test_disabled_by_default(self, store, cache):
        await store.insert("aaa111", "https://a.example.com/")
        service = CleanupService(store, cache)

        assert service.enabled is False
        assert await service.purge_expired(now=datetime.now(timezone.utc) + timedelta(days=365)) == 0
        assert await store.find_url("aaa111") is not None

    @pytest.mark.asyncio
    async def test_purges_old_mappings(self, store, cache):
        await store.insert("aaa111", "https://a.example.com/")
        await cache.set(short_url_key("aaa111"), "https://a.example.com/")
        service = CleanupService(store, cache, max_age_days=30)

        assert await service.purge_expired() == 0

        later = datetime.now(timezone.utc) + timedelta(days=31)
        assert await service.purge_expired(now=later) == 1
        assert await store.find_url("aaa111") is None
        assert await cache.get(short_url_key("aaa111")) is None


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class UninvalidatableCache(InMemoryCache):
    """Reads and writes work, invalidation always fails"""

    async def delete(self, key: str) -> bool:
        return False


class TestStaleAfterFailedInvalidation:

    @pytest.mark.asyncio
    async def test_stale_url_served_only_until_ttl(self, store, tasks):
        await store.insert("aaa111", "https://a.example.com/")
        clock = FakeClock()
        cache = UninvalidatableCache(clock=clock)
        redirects = RedirectService(store, cache, tasks, ClickRecorder(store), cache_ttl=60)

        assert await redirects.resolve("aaa111") == "https://a.example.com/"
        await tasks.drain()
        await AdminService(store, cache).delete("aaa111")

        clock.now += 59
        assert await redirects.resolve("aaa111") == "https://a.example.com/"

        clock.now += 1
        with pytest.raises(UrlNotFoundError):
            await redirects.resolve("aaa111")
