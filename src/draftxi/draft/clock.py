"""Session clocks: wildcard countdown and classic elapsed counter."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional


logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[bool]]


class SessionClock:
    """Run ``on_tick`` every ``interval`` seconds until it returns False.

    Only one ticking task exists at a time; ``start`` replaces a previous one.
    """

    def __init__(self, interval: float = 1.0) -> None:
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, on_tick: TickCallback) -> None:
        self.stop()
        self._task = asyncio.get_running_loop().create_task(self._run(on_tick))

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        # The tick callback may stop the session, and with it this clock.
        if task is asyncio.current_task():
            return
        task.cancel()

    async def _run(self, on_tick: TickCallback) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if not await on_tick():
                logger.debug("Session clock finished")
                return
