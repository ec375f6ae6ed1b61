"""Synthetic sample sequence used when live data is unavailable."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from navtracker.core.config import settings
from navtracker.models.sample import Sample

MOCK_BASE_NAV = 500.00
MOCK_BASE_PRICE = 499.80

# Repeating offsets (nav, price) so the charts show movement.
_MOCK_OFFSETS = [
    (0.00, 0.00), (0.12, 0.05), (0.25, 0.31), (0.18, 0.22), (0.40, 0.28),
    (0.35, 0.47), (0.52, 0.41), (0.47, 0.55), (0.61, 0.50), (0.58, 0.66),
]


def generate_mock_samples(
    count: Optional[int] = None,
    end: Optional[datetime] = None,
    interval_seconds: Optional[float] = None,
) -> List[Sample]:
    """
    Build a fixed synthetic sequence of samples.

    Values are deterministic; only the timestamps depend on ``end``.

    Args:
        count: Number of samples to generate.
        end: Timestamp of the last sample.
        interval_seconds: Spacing between consecutive samples.

    Returns:
        Samples ordered oldest first.
    """
    count = settings.mock_sample_count if count is None else count
    end = end or datetime.now(timezone.utc)
    step = timedelta(
        seconds=settings.poll_interval_seconds if interval_seconds is None else interval_seconds)

    samples = []
    for i in range(count):
        nav_offset, price_offset = _MOCK_OFFSETS[i % len(_MOCK_OFFSETS)]
        drift = (i // len(_MOCK_OFFSETS)) * 0.10
        samples.append(
            Sample(
                timestamp=end - step * (count - 1 - i),
                nav=round(MOCK_BASE_NAV + nav_offset + drift, 2),
                price=round(MOCK_BASE_PRICE + price_offset + drift, 2),
            )
        )
    return samples
