"""Shared fixtures: fake upstream service, clocks and sleep recorders."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List

import httpx
import pytest
import pytest_asyncio

from navtracker.services.collector import SampleCollector
from navtracker.services.fetcher import EndpointFetcher
from navtracker.services.tracker import NavTracker

BASE_URL = "https://api.example/"


class FakeUpstream:
    """Programmable stand-in for the NAV / price service."""

    def __init__(self, nav=500.25, price=499.75) -> None:
        self.payloads: Dict[str, object] = {
            "/api/spy-nav": {"nav": nav},
            "/api/spy-price": {"price": price},
        }
        self.status_codes: Dict[str, int] = {}
        self.errors: Dict[str, type] = {}
        self.requests: List[str] = []
        self.gate: asyncio.Event = None

    def fail_all(self, status_code: int = 500) -> None:
        for path in self.payloads:
            self.status_codes[path] = status_code

    def recover(self) -> None:
        self.status_codes.clear()
        self.errors.clear()

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        if self.gate is not None:
            await self.gate.wait()
        path = request.url.path
        if path in self.errors:
            raise self.errors[path]("upstream unavailable", request=request)
        status_code = self.status_codes.get(path, 200)
        if path not in self.payloads:
            return httpx.Response(404, json={"detail": "Not Found"})
        payload = self.payloads[path]
        if isinstance(payload, (bytes, str)):
            return httpx.Response(status_code, content=payload)
        return httpx.Response(status_code, json=payload)


class SleepRecorder:
    """Awaitable sleep that records delays without waiting."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def make_clock(start: datetime = None, step_seconds: float = 1.0) -> Callable[[], datetime]:
    """Clock returning strictly increasing aware timestamps."""
    current = [start or datetime(2024, 1, 2, 15, 30, tzinfo=timezone.utc)]

    def clock() -> datetime:
        value = current[0]
        current[0] = value + timedelta(seconds=step_seconds)
        return value

    return clock


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest_asyncio.fixture
async def fetcher(upstream, sleeper):
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    fetcher = EndpointFetcher(
        client=client, timeout=1.0, max_attempts=3, retry_delay=1.0,
        backoff_multiplier=1.0, sleep=sleeper,
    )
    yield fetcher
    await client.aclose()


@pytest.fixture
def collector(fetcher) -> SampleCollector:
    return SampleCollector(fetcher, concurrent=True, reject_falsy=False, clock=make_clock())


@pytest_asyncio.fixture
async def tracker(collector):
    tracker = NavTracker(collector, base_url=BASE_URL, interval=60.0, capacity=20)
    yield tracker
    await tracker.stop(drain_timeout=1.0)


@pytest.fixture
def settle():
    """Let the scheduler fire its first tick and wait for that cycle."""

    async def _settle(tracker: NavTracker) -> None:
        await asyncio.sleep(0)
        await tracker.scheduler.wait_idle(tracker.handle, timeout=5.0)

    return _settle
