"""
Click Recorder

Redirects must never wait on (or fail because of) click tracking, so the
redirect path only enqueues a ClickEvent. A single worker task drains the
queue in batches and writes each batch with one store call.

Architecture:
- Bounded asyncio.Queue: when full, new events are dropped and counted
- Batch processing: first event blocks, the rest are taken without waiting
- Drop-on-failure: a batch the store rejects is logged and discarded
"""

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, List, Optional

from .models import ClickEvent

if TYPE_CHECKING:
    from shortlink_app.storage.strategies import UrlStore

logger = logging.getLogger(__name__)


class ClickRecorder:
    """
    Best-effort click writer.

    Features:
    - record() never blocks and never raises
    - join() waits until everything queued so far has been handled
    - stop() drains the queue (bounded by a timeout) then cancels the worker
    """

    def __init__(
        self,
        store: "UrlStore",
        max_queue_size: int = 10000,
        batch_size: int = 100
    ):
        self.store = store
        self.batch_size = batch_size
        self._queue: "asyncio.Queue[ClickEvent]" = asyncio.Queue(maxsize=max_queue_size)
        self._task: Optional[asyncio.Task] = None
        self.processed_count = 0
        self.dropped_count = 0

    def record(self, code: str) -> bool:
        """Queue a click for `code`. Returns False if the event was dropped."""
        try:
            self._queue.put_nowait(ClickEvent(code=code))
            return True
        except asyncio.QueueFull:
            self.dropped_count += 1
            logger.warning("Click queue full, dropping click for %s", code)
            return False

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="click-recorder")
            logger.info("Click recorder started (batch size %d)", self.batch_size)

    async def _run(self) -> None:
        while True:
            batch = await self._next_batch()
            try:
                await self.store.record_clicks(batch)
                self.processed_count += len(batch)
                logger.debug("Recorded %d clicks. Total: %d", len(batch), self.processed_count)
            except Exception as e:
                self.dropped_count += len(batch)
                logger.error("Failed to record %d clicks, dropping batch: %s", len(batch), e)
            finally:
                for _ in batch:
                    self._queue.task_done()

    async def _next_batch(self) -> List[ClickEvent]:
        batch = [await self._queue.get()]
        while len(batch) < self.batch_size:
            try:
                batch.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                break
        return batch

    async def join(self) -> None:
        await self._queue.join()

    async def stop(self, timeout: Optional[float] = None) -> None:
        """Flush queued clicks (up to `timeout` seconds), then stop the worker"""
        if self._task is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Click recorder stopped with %d events unflushed", self._queue.qsize())
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Click recorder stopped")

    @property
    def pending(self) -> int:
        return self._queue.qsize()
