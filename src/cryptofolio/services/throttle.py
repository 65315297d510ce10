"""Coalescing throttle for refresh requests."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class CoalescingThrottle:
    """
    Runs an async function at most once per interval.

    A trigger while an execution is scheduled or running joins that
    execution. A trigger less than one interval after the previous start
    schedules the next execution for the end of the window; triggers in the
    meantime join it. No more than one execution is ever queued.
    """

    def __init__(self, func: Callable[[], Awaitable[None]], interval_seconds: float = 1.0):
        self._func = func
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._started = False
        self._last_started: Optional[float] = None
        self.execution_count = 0

    def trigger(self) -> "asyncio.Task[None]":
        """Request an execution; returns the task that will carry it out."""
        if self._task is not None and not self._task.done():
            logger.debug("Refresh already scheduled; coalescing")
            return self._task

        loop = asyncio.get_running_loop()
        delay = 0.0
        if self._last_started is not None:
            delay = max(0.0, self._last_started + self._interval - loop.time())
        self._started = False
        self._task = loop.create_task(self._run(delay))
        return self._task

    def cancel_pending(self) -> None:
        """Cancel a scheduled execution that has not started yet."""
        if self._task is not None and not self._task.done() and not self._started:
            self._task.cancel()

    async def _run(self, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        self._started = True
        self._last_started = asyncio.get_running_loop().time()
        self.execution_count += 1
        await self._func()
