import asyncio
from datetime import timedelta

from gmailreader.infrastructure.scheduling.asyncio_scheduler import AsyncioScheduler
from tests.helpers import FakeClock, utc


def test_callback_runs_once_its_time_arrives():
    clock = FakeClock(utc(2024, 3, 8, 12))
    fired = []

    async def scenario():
        scheduler = AsyncioScheduler(clock=clock)

        async def callback():
            fired.append(clock())

        scheduler.schedule(clock.now + timedelta(milliseconds=10), callback)
        assert scheduler.pending == 1
        await asyncio.sleep(0.1)
        return scheduler.pending

    assert asyncio.run(scenario()) == 0
    assert fired == [utc(2024, 3, 8, 12)]


def test_past_time_runs_immediately():
    clock = FakeClock(utc(2024, 3, 8, 12))
    fired = []

    async def scenario():
        scheduler = AsyncioScheduler(clock=clock)

        async def callback():
            fired.append(True)

        scheduler.schedule(clock.now - timedelta(hours=1), callback)
        await asyncio.sleep(0.01)

    asyncio.run(scenario())
    assert fired == [True]


def test_close_cancels_pending_and_drops_new_callbacks():
    clock = FakeClock(utc(2024, 3, 8, 12))
    fired = []

    async def scenario():
        scheduler = AsyncioScheduler(clock=clock)

        async def callback():
            fired.append(True)

        scheduler.schedule(clock.now + timedelta(milliseconds=20), callback)
        scheduler.close()
        scheduler.schedule(clock.now, callback)
        await asyncio.sleep(0.05)
        return scheduler.pending

    assert asyncio.run(scenario()) == 0
    assert fired == []
