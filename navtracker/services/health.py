"""Health check service for dependency verification."""

import time
from typing import Any, Dict

from navtracker.core.exceptions import FetchError
from navtracker.models.sample import SessionStatus
from navtracker.services.fetcher import EndpointFetcher
from navtracker.services.tracker import NavTracker


async def check_upstream(fetcher: EndpointFetcher, url: str) -> Dict[str, Any]:
    """
    Check that an upstream endpoint answers.

    Args:
        fetcher: EndpointFetcher instance.
        url: Endpoint URL to probe with a single attempt.

    Returns:
        Health status dictionary.
    """
    try:
        start_time = time.time()
        response = await fetcher.fetch(url, max_attempts=1)
        latency_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
            "status_code": response.status_code,
        }
    except FetchError as e:
        return {
            "status": "unhealthy",
            "error": e.user_message(),
            "kind": e.kind,
            "latency_ms": 0,
        }


def check_tracker(tracker: NavTracker) -> Dict[str, Any]:
    """
    Report the sampling engine's state.

    Args:
        tracker: NavTracker instance.

    Returns:
        Health status dictionary.
    """
    if not tracker.running:
        return {"status": "unhealthy", "error": "Not running"}

    snapshot = tracker.snapshot()
    if snapshot.status == SessionStatus.ERROR:
        status = "degraded"
    else:
        status = "healthy"
    return {
        "status": status,
        "session_status": snapshot.status.value,
        "samples": len(snapshot.samples),
        "using_mock_data": snapshot.using_mock_data,
        "last_error": snapshot.last_error,
    }
