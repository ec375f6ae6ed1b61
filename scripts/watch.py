"""Print live NAV / price samples to the terminal."""

import argparse
import asyncio
import logging

from navtracker.core.config import settings
from navtracker.services.collector import SampleCollector
from navtracker.services.fetcher import EndpointFetcher
from navtracker.services.tracker import NavTracker

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


def format_snapshot(snapshot) -> str:
    """Render the latest snapshot as one line."""
    latest = snapshot.latest
    if latest is None:
        if snapshot.last_error:
            return f"[{snapshot.status.value}] {snapshot.last_error}"
        return f"[{snapshot.status.value}] Loading..."
    sign = "+" if latest.difference >= 0 else ""
    return (
        f"[{snapshot.status.value}] {latest.timestamp.astimezone():%H:%M:%S} "
        f"NAV ${latest.nav}  SPY ${latest.price}  "
        f"diff {sign}${latest.difference}  ({len(snapshot.samples)} samples)"
    )


async def watch(base_url: str, interval: float, duration: float, mock: bool) -> None:
    """
    Run the tracker and print a line after every interval.

    Args:
        base_url: Upstream base URL.
        interval: Seconds between cycles.
        duration: Seconds to run; 0 runs until interrupted.
        mock: Start in mock mode.
    """
    fetcher = EndpointFetcher()
    await fetcher.connect()
    tracker = NavTracker(SampleCollector(fetcher), base_url=base_url, interval=interval)
    tracker.start()
    if mock:
        tracker.enable_mock_data()

    loop = asyncio.get_running_loop()
    deadline = loop.time() + duration if duration > 0 else None
    try:
        while deadline is None or loop.time() < deadline:
            await asyncio.sleep(interval)
            print(format_snapshot(tracker.snapshot()))
    finally:
        await tracker.stop(drain_timeout=interval)
        await fetcher.disconnect()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--base-url", default=settings.api_base_url)
    parser.add_argument("--interval", type=float, default=settings.poll_interval_seconds)
    parser.add_argument("--duration", type=float, default=0.0)
    parser.add_argument("--mock", action="store_true")
    args = parser.parse_args()

    try:
        asyncio.run(watch(args.base_url, args.interval, args.duration, args.mock))
    except KeyboardInterrupt:
        logger.info("Stopped")
