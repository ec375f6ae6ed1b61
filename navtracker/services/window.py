"""Bounded store of recent samples for real-time visualization."""

import threading
from collections import deque
from typing import Deque, Iterable, Optional, Tuple

from navtracker.core.config import WINDOW_CAPACITY
from navtracker.models.sample import Sample


class SlidingWindow:
    """Append-only, fixed-capacity sequence of samples in insertion order."""

    def __init__(self, capacity: int = WINDOW_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._samples: Deque[Sample] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)

    def append(self, sample: Sample) -> None:
        """
        Add a sample at the tail, evicting the oldest beyond capacity.

        Args:
            sample: Sample to add; must not be older than the current tail.

        Raises:
            ValueError: If the sample's timestamp precedes the tail's.
        """
        with self._lock:
            if self._samples and sample.timestamp < self._samples[-1].timestamp:
                raise ValueError(
                    f"Sample at {sample.timestamp.isoformat()} is older than "
                    f"the latest stored sample at {self._samples[-1].timestamp.isoformat()}"
                )
            self._samples.append(sample)

    def replace(self, samples: Iterable[Sample]) -> None:
        """Swap the contents for a new sequence, keeping only the newest entries."""
        incoming = list(samples)
        for earlier, later in zip(incoming, incoming[1:]):
            if later.timestamp < earlier.timestamp:
                raise ValueError("Samples must be ordered by timestamp")
        with self._lock:
            self._samples = deque(incoming, maxlen=self.capacity)

    def snapshot(self) -> Tuple[Sample, ...]:
        """Return an immutable copy of the stored samples, oldest first."""
        with self._lock:
            return tuple(self._samples)

    def latest(self) -> Optional[Sample]:
        with self._lock:
            return self._samples[-1] if self._samples else None

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()
