"""
Tests for background task helpers and the click recorder.
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from shortlink_app.background import BackgroundTasks, PeriodicTask
from shortlink_app.hit_processor.click_recorder import ClickRecorder
from shortlink_app.storage import UrlStore


class TestBackgroundTasks:

    @pytest.mark.asyncio
    async def test_failures_are_logged_not_raised(self, caplog):
        tasks = BackgroundTasks()

        async def boom():
            raise RuntimeError("cache write failed")

        tasks.spawn(boom(), name="boom")
        await tasks.drain()

        assert len(tasks) == 0
        assert "cache write failed" in caplog.text

    @pytest.mark.asyncio
    async def test_drain_cancels_after_timeout(self):
        tasks = BackgroundTasks()
        task = tasks.spawn(asyncio.sleep(10), name="slow")

        await tasks.drain(timeout=0.01)

        assert task.cancelled()


class TestPeriodicTask:

    @pytest.mark.asyncio
    async def test_runs_until_stopped_and_survives_errors(self):
        calls = []

        async def tick():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("first run fails")

        periodic = PeriodicTask("tick", 0.01, tick)
        periodic.start()
        while len(calls) < 3:
            await asyncio.sleep(0.01)
        await periodic.stop()

        assert periodic.running is False
        count = len(calls)
        await asyncio.sleep(0.05)
        assert len(calls) == count


class TestClickRecorder:

    @pytest.mark.asyncio
    async def test_writes_clicks_in_batches(self):
        store = AsyncMock(spec=UrlStore)
        recorder = ClickRecorder(store, batch_size=10)
        for _ in range(25):
            recorder.record("abc123")

        recorder.start()
        await recorder.join()
        await recorder.stop()

        batch_sizes = [len(call.args[0]) for call in store.record_clicks.await_args_list]
        assert batch_sizes == [10, 10, 5]
        assert recorder.processed_count == 25

    @pytest.mark.asyncio
    async def test_stop_flushes_pending_clicks(self, store):
        await store.insert("abc123", "https://example.com/")
        recorder = ClickRecorder(store)
        recorder.start()
        recorder.record("abc123")
        recorder.record("abc123")

        await recorder.stop(timeout=5)

        assert await store.total_clicks("abc123") == 2
