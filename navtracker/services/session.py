"""Session state and the failure / fallback policy applied to it."""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from navtracker.core.config import settings
from navtracker.core.exceptions import NavTrackerError
from navtracker.models.sample import Sample, SessionSnapshot, SessionStatus
from navtracker.monitoring.metrics import latest_difference, window_size
from navtracker.services.window import SlidingWindow

logger = logging.getLogger(__name__)


class SessionState:
    """Window, status and last error for one run of the tracker.

    Transitions:
        idle/ready/error -> loading      begin_cycle()
        loading -> ready                 record_success()
        loading -> error                 record_failure() with an empty window
        loading -> ready                 record_failure() with stale samples
        any -> mock                      activate_mock(); permanent for the run
    """

    def __init__(self, capacity: Optional[int] = None) -> None:
        self.window = SlidingWindow(capacity or settings.window_capacity)
        self.status = SessionStatus.IDLE
        self.last_error: Optional[str] = None
        self.last_failure: Optional[NavTrackerError] = None
        self.using_mock_data = False
        self.updated_at: Optional[datetime] = None

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)
        window_size.set(len(self.window))

    def begin_cycle(self) -> bool:
        """Enter loading. Returns False when mock mode suppresses live cycles."""
        if self.using_mock_data:
            return False
        self.status = SessionStatus.LOADING
        return True

    def record_success(self, sample: Sample) -> bool:
        """Append a fresh sample and clear any previous error."""
        if self.using_mock_data:
            return False
        self.window.append(sample)
        self.status = SessionStatus.READY
        self.last_error = None
        self.last_failure = None
        latest_difference.set(sample.difference)
        self._touch()
        return True

    def record_failure(self, error: NavTrackerError) -> bool:
        """
        Apply a failed cycle.

        Only the first failure with nothing to show becomes visible; with
        samples already stored the stale data stays on screen.

        Returns:
            True if the failure was surfaced as an error.
        """
        if self.using_mock_data:
            return False
        if len(self.window) == 0:
            self.status = SessionStatus.ERROR
            self.last_error = error.user_message()
            self.last_failure = error
            self._touch()
            logger.error(f"Sampling failed with no data to show: {str(error)}")
            return True

        self.status = SessionStatus.READY
        logger.warning(f"Sampling failed, keeping stale data: {str(error)}")
        return False

    def activate_mock(self, samples: Iterable[Sample]) -> None:
        """Switch to synthetic data for the rest of the run."""
        self.using_mock_data = True
        self.window.replace(samples)
        self.status = SessionStatus.MOCK
        self.last_error = None
        self.last_failure = None
        self._touch()
        logger.info(f"Mock data enabled with {len(self.window)} samples")

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            samples=self.window.snapshot(),
            status=self.status,
            last_error=self.last_error,
            using_mock_data=self.using_mock_data,
            updated_at=self.updated_at,
        )
