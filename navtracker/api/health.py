"""Health check utilities."""

from typing import Dict

from navtracker.services.fetcher import EndpointFetcher
from navtracker.services.health import check_tracker, check_upstream
from navtracker.services.tracker import NavTracker


async def check_all_dependencies(
    tracker: NavTracker,
    fetcher: EndpointFetcher,
    include_upstream: bool = True,
) -> Dict:
    """
    Check the tracker and its upstream endpoints.

    Args:
        tracker: Sampling engine.
        fetcher: Fetcher used to probe the upstream endpoints.
        include_upstream: Whether to probe the upstream endpoints.

    Returns:
        Dictionary with overall status and individual statuses.
    """
    services = {}
    overall_status = "healthy"

    tracker_status = check_tracker(tracker)
    services["tracker"] = tracker_status
    if tracker_status.get("status") != "healthy":
        overall_status = "unhealthy"

    if include_upstream and not tracker_status.get("using_mock_data"):
        nav_url, price_url = tracker.collector.endpoint_urls(tracker.base_url)
        for name, url in (("nav_endpoint", nav_url), ("price_endpoint", price_url)):
            upstream_status = await check_upstream(fetcher, url)
            services[name] = upstream_status
            if upstream_status.get("status") != "healthy":
                overall_status = "unhealthy"

    return {"status": overall_status, "services": services}


async def check_readiness(tracker: NavTracker) -> Dict:
    """
    Check service readiness.

    Ready once the tracker has something to show.

    Args:
        tracker: Sampling engine.

    Returns:
        Readiness status dictionary.
    """
    snapshot = tracker.snapshot()
    has_data = len(snapshot.samples) > 0
    return {
        "ready": tracker.running and has_data,
        "running": tracker.running,
        "has_data": has_data,
        "status": snapshot.status.value,
    }
