"""Dependency injection for services."""

from navtracker.services.collector import SampleCollector
from navtracker.services.fetcher import EndpointFetcher
from navtracker.services.scheduler import PollScheduler
from navtracker.services.tracker import NavTracker

SHUTDOWN_DRAIN_SECONDS = 2.0


class ServiceContainer:
    """Container for service instances."""

    def __init__(self) -> None:
        """Initialize service container."""
        self.fetcher = EndpointFetcher()
        self.collector = SampleCollector(self.fetcher)
        self.scheduler = PollScheduler()
        self.tracker = NavTracker(self.collector, scheduler=self.scheduler)

    async def initialize(self) -> None:
        """Initialize all services."""
        await self.fetcher.connect()
        self.tracker.start()

    async def shutdown(self) -> None:
        """Shutdown all services."""
        await self.tracker.stop(drain_timeout=SHUTDOWN_DRAIN_SECONDS)
        await self.fetcher.disconnect()


services = ServiceContainer()
