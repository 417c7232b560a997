"""Fixed-period background poller for silent report refreshes."""
from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Awaitable, Callable

from revenue_engine.obs import report_span

logger = logging.getLogger(__name__)


def next_tick(scheduled: float, now: float, interval: float) -> float:
    """Return the first slot of the fixed schedule at or after ``now``.

    Slots missed while a tick was still running are skipped, never queued.
    """

    if scheduled >= now:
        return scheduled
    return scheduled + math.ceil((now - scheduled) / interval) * interval


class RevenuePoller:
    """Runs ``tick`` on a fixed period; at most one tick is in flight."""

    def __init__(
        self,
        tick: Callable[[], object],
        *,
        interval: float,
        sleep_fn: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError("poll interval must be positive")
        self._tick = tick
        self._interval = interval
        self._sleep = sleep_fn
        self._clock = clock
        self._task: asyncio.Task[None] | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self, *, iterations: int | None = None) -> None:
        scheduled = self._clock() + self._interval
        executed = 0
        while iterations is None or executed < iterations:
            await self._sleep(max(scheduled - self._clock(), 0.0))
            with report_span("revenue.poll", tick=self.ticks + 1):
                try:
                    await asyncio.to_thread(self._tick)
                except Exception:
                    logger.exception("background refresh tick raised")
            self.ticks += 1
            executed += 1
            scheduled = next_tick(scheduled + self._interval, self._clock(), self._interval)

    def start(self) -> asyncio.Task[None]:
        """Schedule the loop on the running event loop; idempotent while running."""
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self.run())
        assert self._task is not None
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            logger.debug("background refresh stopped")


__all__ = ["RevenuePoller", "next_tick"]
