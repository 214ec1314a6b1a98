"""
Tests for the live join tab watcher.

A fake clock drives the visibility cutoff; `max_interval` keeps the real
sleeps short so the watcher notices when the fake clock moves.
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from eventhub.services.join_tab import JoinTabCriteria
from eventhub.services.join_tab_watcher import JoinTabWatcher

START = datetime(2026, 10, 18, 20, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def sample_event(starts_in: timedelta, **overrides):
    start = START + starts_in
    values = dict(
        id=uuid.uuid4(),
        title="Gallery Opening",
        description="",
        organizer_name="Dana Organizer",
        organizer_specification=None,
        category="social",
        status="upcoming",
        is_visible_in_join_tab=True,
        event_date=start.date(),
        event_time=start.time(),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


async def next_publish(queue: asyncio.Queue) -> list:
    return await asyncio.wait_for(queue.get(), timeout=2)


@pytest.fixture
def published() -> asyncio.Queue:
    return asyncio.Queue()


@pytest.mark.asyncio
async def test_publishes_on_start(published):
    event = sample_event(timedelta(hours=3))
    watcher = JoinTabWatcher([event], JoinTabCriteria(), published.put, clock=FakeClock(START), max_interval=0.01)

    watcher.start()
    try:
        assert await next_publish(published) == [event]
    finally:
        await watcher.stop()


@pytest.mark.asyncio
async def test_event_drops_out_after_cutoff(published):
    clock = FakeClock(START)
    expiring = sample_event(-timedelta(minutes=50))
    staying = sample_event(timedelta(days=1))
    watcher = JoinTabWatcher([expiring, staying], JoinTabCriteria(), published.put, clock=clock, max_interval=0.01)

    watcher.start()
    try:
        assert await next_publish(published) == [expiring, staying]

        clock.now = START + timedelta(minutes=11)
        assert await next_publish(published) == [staying]
    finally:
        await watcher.stop()


@pytest.mark.asyncio
async def test_no_publish_while_nothing_changes(published):
    clock = FakeClock(START)
    event = sample_event(timedelta(days=1))
    watcher = JoinTabWatcher([event], JoinTabCriteria(), published.put, clock=clock, max_interval=0.01)

    watcher.start()
    try:
        await next_publish(published)
        clock.now = START + timedelta(minutes=5)
        await asyncio.sleep(0.05)
        assert published.empty()
    finally:
        await watcher.stop()


@pytest.mark.asyncio
async def test_new_criteria_publish_immediately(published):
    social = sample_event(timedelta(hours=2), category="social")
    workshop = sample_event(timedelta(hours=2), category="workshop")
    # No cutoff cap: only the criteria change can wake the watcher in time
    watcher = JoinTabWatcher(
        [social, workshop], JoinTabCriteria(), published.put, clock=FakeClock(START), max_interval=None
    )

    watcher.start()
    try:
        assert await next_publish(published) == [social, workshop]

        watcher.set_criteria(JoinTabCriteria(category="workshop"))
        assert await next_publish(published) == [workshop]
        assert watcher.criteria.category == "workshop"
    finally:
        await watcher.stop()


@pytest.mark.asyncio
async def test_replace_events_always_publishes(published):
    event = sample_event(timedelta(hours=2))
    watcher = JoinTabWatcher([event], JoinTabCriteria(), published.put, clock=FakeClock(START), max_interval=None)

    watcher.start()
    try:
        await next_publish(published)

        # Same list after a reload still goes out so the view can refresh fields
        watcher.replace_events([event])
        assert await next_publish(published) == [event]
    finally:
        await watcher.stop()


@pytest.mark.asyncio
async def test_stop_cancels_task(published):
    watcher = JoinTabWatcher([], JoinTabCriteria(), published.put, clock=FakeClock(START), max_interval=None)

    watcher.start()
    assert watcher.running
    await next_publish(published)

    await watcher.stop()
    assert not watcher.running
    # Stopping twice is harmless
    await watcher.stop()
