import asyncio

import pytest

from navtracker.core.exceptions import SchedulerError
from navtracker.services.scheduler import PollScheduler


@pytest.mark.asyncio
async def test_runs_immediately_then_periodically():
    scheduler = PollScheduler()
    calls = []

    async def cycle(handle):
        calls.append(handle.ticks)

    handle = scheduler.start(0.02, cycle)
    await asyncio.sleep(0)
    await scheduler.wait_idle(handle)
    assert len(calls) == 1

    await asyncio.sleep(0.07)
    scheduler.stop(handle)
    assert len(calls) >= 3


@pytest.mark.asyncio
async def test_stop_halts_future_ticks():
    scheduler = PollScheduler()
    calls = []

    async def cycle(handle):
        calls.append(1)

    handle = scheduler.start(0.01, cycle)
    await asyncio.sleep(0.035)
    scheduler.stop(handle)
    count = len(calls)

    await asyncio.sleep(0.05)

    assert handle.stopped
    assert len(calls) == count


@pytest.mark.asyncio
async def test_busy_ticks_are_skipped():
    scheduler = PollScheduler()
    release = asyncio.Event()
    calls = []

    async def cycle(handle):
        calls.append(1)
        await release.wait()

    handle = scheduler.start(0.01, cycle)
    await asyncio.sleep(0.06)

    assert len(calls) == 1
    assert handle.skipped >= 1

    scheduler.stop(handle)
    release.set()
    assert await scheduler.wait_idle(handle, timeout=1.0)


@pytest.mark.asyncio
async def test_cycle_errors_do_not_stop_polling():
    scheduler = PollScheduler()
    calls = []

    async def cycle(handle):
        calls.append(1)
        raise RuntimeError("cycle blew up")

    handle = scheduler.start(0.01, cycle)
    await asyncio.sleep(0.05)
    scheduler.stop(handle)

    assert len(calls) >= 2


@pytest.mark.asyncio
async def test_trigger_joins_in_flight_cycle():
    scheduler = PollScheduler()
    release = asyncio.Event()
    calls = []

    async def cycle(handle):
        calls.append(1)
        await release.wait()

    handle = scheduler.start(60, cycle)
    await asyncio.sleep(0)

    task = scheduler.trigger(handle)
    assert task is handle.in_flight
    release.set()
    await task
    assert len(calls) == 1

    await scheduler.trigger(handle)
    assert len(calls) == 2
    scheduler.stop(handle)


@pytest.mark.asyncio
async def test_trigger_after_stop_is_rejected():
    scheduler = PollScheduler()

    async def cycle(handle):
        return None

    handle = scheduler.start(60, cycle)
    scheduler.stop(handle)

    with pytest.raises(SchedulerError):
        scheduler.trigger(handle)


@pytest.mark.asyncio
async def test_interval_must_be_positive():
    with pytest.raises(SchedulerError):
        PollScheduler().start(0, None)
