"""
Background task helpers.

BackgroundTasks keeps references to fire-and-forget tasks (cache
population) so they are not garbage-collected mid-flight and can be drained
on shutdown. PeriodicTask runs a coroutine on a fixed interval until it is
cancelled (rate-limit sweep, stale-data cleanup).
"""

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Coroutine, Optional, Set

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Registry of detached tasks whose failures are logged, never raised."""

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro: Coroutine, name: Optional[str] = None) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Background task %s failed: %s", task.get_name(), exc)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for pending tasks; cancel whatever is still running after `timeout`"""
        if not self._tasks:
            return
        done, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning("Cancelled %d background tasks at shutdown", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)

    def __len__(self) -> int:
        return len(self._tasks)


class PeriodicTask:
    """
    Calls `func` every `interval` seconds until stop() is called.

    A failing run is logged and the loop keeps going.
    """

    def __init__(self, name: str, interval: float, func: Callable[[], Awaitable[object]]):
        self.name = name
        self.interval = interval
        self.func = func
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=self.name)
            logger.info("Started %s (every %ss)", self.name, self.interval)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.func()
            except Exception as e:
                logger.error("%s run failed: %s", self.name, e)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Stopped %s", self.name)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
