"""Wall-clock scheduler on top of the running asyncio loop."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from gmailreader.application.ports.scheduler import Callback, Scheduler


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AsyncioScheduler(Scheduler):
    """Runs each callback as a task once its wall-clock time arrives.

    ``close()`` cancels anything still pending; a cycle that never got to run
    simply never runs.
    """

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._loop = loop
        self._clock = clock
        self._handles: set[asyncio.TimerHandle] = set()
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, at: datetime, callback: Callback) -> None:
        if self._closed:
            logger.debug("Scheduler closed, dropping callback")
            return
        delay = max(0.0, (at - self._clock()).total_seconds())
        handle: asyncio.TimerHandle

        def _fire() -> None:
            self._handles.discard(handle)
            task = self.loop.create_task(callback())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        handle = self.loop.call_later(delay, _fire)
        self._handles.add(handle)
        logger.debug(f"Scheduled callback in {delay:.3f}s")

    @property
    def pending(self) -> int:
        return len(self._handles) + len(self._tasks)

    def close(self) -> None:
        self._closed = True
        for handle in list(self._handles):
            handle.cancel()
        self._handles.clear()
        for task in list(self._tasks):
            task.cancel()
