"""Quiet-period debouncing for coroutine callbacks."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """Runs ``callback`` only after ``wait_ms`` passes without another call.

    Each call cancels the previously scheduled run, so a burst of calls
    results in a single invocation with the last arguments.
    """

    def __init__(self, callback: Callable[..., Awaitable[Any]], wait_ms: int):
        self.callback = callback
        self.wait_ms = wait_ms
        self.task: Optional[asyncio.Task] = None

    async def _later(self, args: tuple, kwargs: dict) -> None:
        await asyncio.sleep(self.wait_ms / 1000)
        await self.callback(*args, **kwargs)

    def __call__(self, *args, **kwargs) -> asyncio.Task:
        self.cancel()
        self.task = asyncio.get_running_loop().create_task(self._later(args, kwargs))
        return self.task

    def cancel(self) -> None:
        if self.task is not None and not self.task.done():
            self.task.cancel()

    async def flush(self) -> None:
        """Wait for the scheduled run, if any, to finish."""
        if self.task is None:
            return
        await asyncio.wait({self.task})
        if self.task.cancelled():
            logger.debug("Debounced call was cancelled")
            return
        error = self.task.exception()
        if error is not None:
            raise error
