"""Periodic poll scheduler built on asyncio tasks."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from navtracker.core.exceptions import SchedulerError
from navtracker.monitoring.metrics import cycles_skipped_total

logger = logging.getLogger(__name__)

CycleFn = Callable[["PollHandle"], Awaitable[None]]


class PollHandle:
    """Running schedule; doubles as the cancellation token for its cycles."""

    def __init__(self, interval: float, cycle_fn: CycleFn) -> None:
        self.interval = interval
        self.cycle_fn = cycle_fn
        self.in_flight: Optional[asyncio.Task] = None
        self.ticks = 0
        self.skipped = 0
        self._stopped = False
        self._task: Optional[asyncio.Task] = None

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def busy(self) -> bool:
        return self.in_flight is not None and not self.in_flight.done()


class PollScheduler:
    """Runs a cycle immediately, then once per interval, until stopped.

    A tick that fires while the previous cycle is still running is skipped,
    so cycles never overlap and their results apply in order.
    """

    def start(self, interval: float, cycle_fn: CycleFn) -> PollHandle:
        """
        Start polling. Must be called from a running event loop.

        Args:
            interval: Seconds between ticks.
            cycle_fn: Coroutine function called with the handle on each tick.

        Returns:
            Handle used to trigger or stop the schedule.
        """
        if interval <= 0:
            raise SchedulerError("interval must be positive")
        handle = PollHandle(interval, cycle_fn)
        handle._task = asyncio.create_task(self._run(handle))
        logger.info(f"Polling started every {interval}s")
        return handle

    def stop(self, handle: PollHandle) -> None:
        """
        Stop all future ticks.

        A cycle already in flight is not cancelled; it sees ``handle.stopped``
        when it completes.
        """
        if handle.stopped:
            return
        handle._stopped = True
        if handle._task is not None:
            handle._task.cancel()
        logger.info("Polling stopped")

    def trigger(self, handle: PollHandle) -> asyncio.Task:
        """Run a cycle now, or return the one already running."""
        if handle.stopped:
            raise SchedulerError("Cannot trigger a stopped schedule")
        if handle.busy:
            return handle.in_flight
        return self._launch(handle)

    async def wait_idle(self, handle: PollHandle, timeout: Optional[float] = None) -> bool:
        """Wait for the in-flight cycle, if any. Returns False on timeout."""
        if not handle.busy:
            return True
        done, _ = await asyncio.wait({handle.in_flight}, timeout=timeout)
        return bool(done)

    async def _run(self, handle: PollHandle) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        try:
            while not handle.stopped:
                self._tick(handle)
                next_tick += handle.interval
                await asyncio.sleep(max(0.0, next_tick - loop.time()))
        except asyncio.CancelledError:
            pass

    def _tick(self, handle: PollHandle) -> None:
        handle.ticks += 1
        if handle.busy:
            handle.skipped += 1
            cycles_skipped_total.inc()
            logger.warning(
                f"Skipping tick {handle.ticks}: previous cycle still running")
            return
        self._launch(handle)

    def _launch(self, handle: PollHandle) -> asyncio.Task:
        handle.in_flight = asyncio.create_task(self._invoke(handle))
        return handle.in_flight

    async def _invoke(self, handle: PollHandle) -> None:
        try:
            await handle.cycle_fn(handle)
        except Exception:
            # Polling continues regardless of cycle failures.
            logger.exception("Sampling cycle raised")
