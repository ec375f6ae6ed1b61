"""Sampling engine tying the collector, scheduler and session together."""

import logging
import time
from functools import partial
from typing import Optional

from navtracker.core.config import settings
from navtracker.core.exceptions import CollectionError, NavTrackerError, SchedulerError
from navtracker.models.sample import SessionSnapshot
from navtracker.monitoring.metrics import cycle_duration_seconds, cycles_total
from navtracker.services.collector import SampleCollector, normalize_base_url
from navtracker.services.mock_data import generate_mock_samples
from navtracker.services.scheduler import PollHandle, PollScheduler
from navtracker.services.session import SessionState

logger = logging.getLogger(__name__)


class NavTracker:
    """Polls the upstream service and keeps the recent sample window."""

    def __init__(
        self,
        collector: SampleCollector,
        base_url: Optional[str] = None,
        interval: Optional[float] = None,
        capacity: Optional[int] = None,
        scheduler: Optional[PollScheduler] = None,
    ) -> None:
        """
        Initialize the tracker.

        Args:
            collector: Produces one sample per cycle.
            base_url: Upstream base URL.
            interval: Seconds between cycles.
            capacity: Window capacity.
            scheduler: Poll scheduler.
        """
        self.collector = collector
        self.base_url = normalize_base_url(base_url or settings.api_base_url)
        self.interval = interval or settings.poll_interval_seconds
        self.capacity = capacity or settings.window_capacity
        self.scheduler = scheduler or PollScheduler()
        self.session: Optional[SessionState] = None
        self._handle: Optional[PollHandle] = None

    @property
    def handle(self) -> Optional[PollHandle]:
        return self._handle

    @property
    def running(self) -> bool:
        return self._handle is not None and not self._handle.stopped

    def start(self) -> SessionState:
        """Create a fresh session and start polling."""
        if self.running:
            return self.session
        session = SessionState(self.capacity)
        session.begin_cycle()
        self.session = session
        logger.info(f"Using API base: {self.base_url}")
        self._handle = self.scheduler.start(
            self.interval, partial(self._run_cycle, session))
        return session

    async def stop(self, drain_timeout: float = 0.0) -> None:
        """
        Stop polling and tear the session down.

        Args:
            drain_timeout: Seconds to wait for an in-flight cycle to finish.
        """
        if self._handle is None:
            return
        handle = self._handle
        self.scheduler.stop(handle)
        if drain_timeout > 0:
            await self.scheduler.wait_idle(handle, timeout=drain_timeout)
        self._handle = None
        self.session = None

    async def retry(self) -> SessionSnapshot:
        """Force an immediate cycle and return the resulting snapshot."""
        if not self.running:
            raise SchedulerError("Tracker is not running")
        if self.session.using_mock_data:
            return self.snapshot()
        logger.info("Manual retry requested")
        await self.scheduler.trigger(self._handle)
        return self.snapshot()

    def enable_mock_data(self) -> SessionSnapshot:
        """Switch to synthetic data; live polling stops fetching for this run."""
        if not self.running:
            raise SchedulerError("Tracker is not running")
        if not self.session.using_mock_data:
            self.session.activate_mock(
                generate_mock_samples(
                    count=min(settings.mock_sample_count, self.capacity),
                    interval_seconds=self.interval,
                )
            )
        return self.snapshot()

    def snapshot(self) -> SessionSnapshot:
        if self.session is None:
            return SessionSnapshot()
        return self.session.snapshot()

    async def _run_cycle(self, session: SessionState, handle: PollHandle) -> None:
        # A cycle scheduled just before stop() may only start running after it.
        if handle.stopped:
            logger.debug("Schedule stopped before cycle started, skipping fetch")
            return
        if session.using_mock_data:
            logger.debug("Mock data active, skipping fetch")
            return

        session.begin_cycle()
        start_time = time.time()
        try:
            sample = await self.collector.collect(self.base_url)
        except CollectionError as e:
            cycles_total.labels(outcome="failure").inc()
            if handle.stopped:
                logger.info(f"Discarding failure from cycle finished after stop: {str(e)}")
                return
            logger.warning(f"Collection failed: {e.describe()}")
            session.record_failure(e)
            return
        except Exception as e:
            cycles_total.labels(outcome="failure").inc()
            logger.exception("Unexpected error during sampling cycle")
            if not handle.stopped:
                session.record_failure(NavTrackerError(f"Unexpected error: {str(e)}"))
            return
        finally:
            cycle_duration_seconds.observe(time.time() - start_time)

        cycles_total.labels(outcome="success").inc()
        if handle.stopped:
            logger.info("Discarding sample from cycle finished after stop")
            return
        try:
            session.record_success(sample)
        except ValueError as e:
            logger.error(f"Rejected sample: {str(e)}")
            session.record_failure(NavTrackerError(f"Rejected sample: {str(e)}"))
