"""
Dual-lane serial request queue.

All upstream calls go through one of two lanes:

- ``critical``: above-the-fold work (hero banner, live search fallback)
- ``background``: row population, genre pages, schedules

Each lane is a FIFO drained by a single worker task, so within a lane calls
start in submission order and never overlap. Before every call the worker
sleeps the lane's delay, which keeps the aggregate request rate under the
upstream's limit no matter how many views ask for data at once. The two lanes
run independently of each other.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from frontend.config import BACKGROUND, CRITICAL, PRIORITIES

logger = logging.getLogger(__name__)

FetchFn = Callable[..., Awaitable[Any]]
Sleep = Callable[[float], Awaitable[None]]


@dataclass
class FetchTask:
    """One logical data need waiting for its turn in a lane."""
    url: str
    priority: str
    future: asyncio.Future
    retries: Optional[int] = None
    backoff_ms: Optional[int] = None


@dataclass
class Lane:
    """A FIFO of fetch tasks and the worker that drains it."""
    name: str
    delay_ms: int
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)
    worker: Optional[asyncio.Task] = None
    in_flight: Optional[FetchTask] = None
    completed: int = 0
    failed: int = 0


class RequestQueue:
    """Schedules fetches onto the critical and background lanes."""

    def __init__(
        self,
        fetch: FetchFn,
        critical_delay_ms: int = 200,
        background_delay_ms: int = 800,
        sleep: Optional[Sleep] = None,
    ):
        self._fetch = fetch
        self._sleep = sleep or asyncio.sleep
        self._lanes: dict[str, Lane] = {
            CRITICAL: Lane(CRITICAL, critical_delay_ms),
            BACKGROUND: Lane(BACKGROUND, background_delay_ms),
        }
        self._closed = False

    def _lane(self, priority: str) -> Lane:
        if priority not in PRIORITIES:
            raise ValueError(f"Unknown priority: {priority}. Must be one of {PRIORITIES}")
        return self._lanes[priority]

    def start(self) -> None:
        """Start lane workers on the running event loop."""
        if self._closed:
            raise RuntimeError("RequestQueue is closed")
        for lane in self._lanes.values():
            if lane.worker is None or lane.worker.done():
                lane.worker = asyncio.get_running_loop().create_task(
                    self._drain(lane), name=f"lane-{lane.name}"
                )

    async def _drain(self, lane: Lane) -> None:
        while True:
            task: FetchTask = await lane.queue.get()
            try:
                if task.future.done():
                    logger.debug(f"[{lane.name}] skipping abandoned request: {task.url}")
                    continue

                await self._sleep(lane.delay_ms / 1000)
                lane.in_flight = task
                try:
                    result = await self._fetch(task.url, retries=task.retries, backoff_ms=task.backoff_ms)
                except asyncio.CancelledError:
                    if not task.future.done():
                        task.future.cancel()
                    raise
                except Exception as e:
                    lane.failed += 1
                    if not task.future.done():
                        task.future.set_exception(e)
                else:
                    lane.completed += 1
                    if not task.future.done():
                        task.future.set_result(result)
            finally:
                lane.in_flight = None
                lane.queue.task_done()

    def submit(
        self,
        url: str,
        priority: str = BACKGROUND,
        retries: Optional[int] = None,
        backoff_ms: Optional[int] = None,
    ) -> asyncio.Future:
        """Append a fetch to a lane and return the future of its result.

        Enqueueing is synchronous, so submission order is the order of calls
        to this method.
        """
        if self._closed:
            raise RuntimeError("RequestQueue is closed")
        lane = self._lane(priority)
        self.start()

        future = asyncio.get_running_loop().create_future()
        lane.queue.put_nowait(FetchTask(url, priority, future, retries, backoff_ms))
        logger.debug(f"[{priority}] queued {url} (depth {lane.queue.qsize()})")
        return future

    async def queued_fetch(self, url: str, priority: str = BACKGROUND, **kwargs) -> Any:
        """Fetch ``url`` once its lane reaches it."""
        return await self.submit(url, priority, **kwargs)

    def pending(self, priority: str) -> int:
        """Number of tasks waiting in a lane, excluding the one in flight."""
        return self._lane(priority).queue.qsize()

    def stats(self) -> dict[str, dict[str, int]]:
        return {
            name: {
                "pending": lane.queue.qsize(),
                "in_flight": int(lane.in_flight is not None),
                "completed": lane.completed,
                "failed": lane.failed,
            }
            for name, lane in self._lanes.items()
        }

    async def close(self) -> None:
        """Stop the workers and cancel every request still waiting."""
        self._closed = True
        workers = [lane.worker for lane in self._lanes.values() if lane.worker is not None]
        for worker in workers:
            worker.cancel()
        await asyncio.gather(*workers, return_exceptions=True)

        for lane in self._lanes.values():
            lane.worker = None
            while not lane.queue.empty():
                task = lane.queue.get_nowait()
                if not task.future.done():
                    task.future.cancel()
        logger.info("Request queue closed")
