"""
Tests for RedirectService: cache-aside reads and best-effort click tracking.
"""
from unittest.mock import AsyncMock

import pytest

from shortlink_app.cache import short_url_key
from shortlink_app.exceptions import StoreError, UrlNotFoundError
from shortlink_app.hit_processor.click_recorder import ClickRecorder
from shortlink_app.services.redirect_service import RedirectService
from shortlink_app.storage import UrlStore


@pytest.fixture
def mock_store():
    return AsyncMock(spec=UrlStore)


class TestRedirectService:
    """Test code resolution"""

    @pytest.mark.asyncio
    async def test_cache_hit_skips_store(self, mock_store, cache, tasks):
        await cache.set(short_url_key("abc123"), "https://cached.example.com/")
        clicks = ClickRecorder(mock_store)
        service = RedirectService(mock_store, cache, tasks, clicks)

        url = await service.resolve("abc123")

        assert url == "https://cached.example.com/"
        mock_store.find_url.assert_not_called()
        assert clicks.pending == 1

    @pytest.mark.asyncio
    async def test_cache_miss_reads_store_and_populates_cache(self, mock_store, cache, tasks):
        mock_store.find_url.return_value = "https://www.example.com/"
        clicks = ClickRecorder(mock_store)
        service = RedirectService(mock_store, cache, tasks, clicks, cache_ttl=60)

        url = await service.resolve("abc123")
        await tasks.drain()

        assert url == "https://www.example.com/"
        mock_store.find_url.assert_awaited_once_with("abc123")
        assert await cache.get(short_url_key("abc123")) == "https://www.example.com/"
        assert clicks.pending == 1

    @pytest.mark.asyncio
    async def test_unknown_code_is_not_cached(self, mock_store, cache, tasks):
        mock_store.find_url.return_value = None
        clicks = ClickRecorder(mock_store)
        service = RedirectService(mock_store, cache, tasks, clicks)

        with pytest.raises(UrlNotFoundError):
            await service.resolve("nope00")
        await tasks.drain()

        assert len(cache) == 0
        assert clicks.pending == 0

    @pytest.mark.asyncio
    async def test_store_error_is_not_not_found(self, mock_store, cache, tasks):
        """Outages surface as StoreError so they are not reported as 404"""
        mock_store.find_url.side_effect = StoreError("connection refused")
        service = RedirectService(mock_store, cache, tasks, ClickRecorder(mock_store))

        with pytest.raises(StoreError):
            await service.resolve("abc123")

    @pytest.mark.asyncio
    async def test_click_failure_does_not_fail_redirect(self, mock_store, cache, tasks):
        mock_store.find_url.return_value = "https://www.example.com/"
        mock_store.record_clicks.side_effect = StoreError("disk full")
        clicks = ClickRecorder(mock_store)
        clicks.start()
        service = RedirectService(mock_store, cache, tasks, clicks)

        url = await service.resolve("abc123")
        await clicks.join()
        await clicks.stop()

        assert url == "https://www.example.com/"
        assert clicks.dropped_count == 1
        assert clicks.processed_count == 0

    @pytest.mark.asyncio
    async def test_full_click_queue_drops_click_but_redirects(self, mock_store, cache, tasks):
        await cache.set(short_url_key("abc123"), "https://cached.example.com/")
        clicks = ClickRecorder(mock_store, max_queue_size=1)
        service = RedirectService(mock_store, cache, tasks, clicks)

        assert await service.resolve("abc123") == "https://cached.example.com/"
        assert await service.resolve("abc123") == "https://cached.example.com/"

        assert clicks.pending == 1
        assert clicks.dropped_count == 1
