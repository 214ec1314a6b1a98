"""
Tests for join tab filtering, unit level and through the endpoint.
"""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.api.routes.events import load_live_snapshot
from eventhub.services.join_tab import (
    JoinTabCriteria,
    cutoff_at,
    filter_events,
    filter_join_tab_events,
    matches_search,
    next_cutoff,
)

NOW = datetime(2026, 10, 18, 20, 0, tzinfo=timezone.utc)


def sample_event(starts_in: timedelta = timedelta(days=1), **overrides):
    start = NOW + starts_in
    values = dict(
        id=uuid.uuid4(),
        title="Founders Breakfast",
        description="Coffee with local founders",
        organizer_name="Dana Organizer",
        organizer_specification=None,
        category="business",
        status="upcoming",
        is_visible_in_join_tab=True,
        event_date=start.date(),
        event_time=start.time(),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_event_two_hours_past_is_excluded():
    event = sample_event(starts_in=-timedelta(hours=2))
    assert filter_join_tab_events([event], NOW) == []


def test_event_thirty_minutes_past_is_included():
    event = sample_event(starts_in=-timedelta(minutes=30))
    assert filter_join_tab_events([event], NOW) == [event]


def test_cutoff_is_one_hour_after_start():
    event = sample_event(starts_in=-timedelta(hours=1))
    assert cutoff_at(event) == NOW
    assert filter_join_tab_events([event], NOW) == [event]
    assert filter_join_tab_events([event], NOW + timedelta(seconds=1)) == []


def test_hidden_from_join_tab_is_excluded():
    event = sample_event(is_visible_in_join_tab=False)
    assert filter_join_tab_events([event], NOW) == []


def test_naive_now_is_read_as_utc():
    event = sample_event(starts_in=-timedelta(minutes=30))
    assert filter_join_tab_events([event], NOW.replace(tzinfo=None)) == [event]


def test_category_all_keeps_everything():
    events = [
        sample_event(category="social"),
        sample_event(category="workshop"),
        sample_event(category="conference"),
    ]
    assert filter_events(events, JoinTabCriteria(category="all"), NOW) == events


def test_category_exact_match():
    social = sample_event(category="social")
    workshop = sample_event(category="workshop")
    assert filter_events([social, workshop], JoinTabCriteria(category="workshop"), NOW) == [workshop]


@pytest.mark.parametrize(
    "search, expected",
    [
        ("FOUNDERS", True),
        ("coffee", True),
        ("dana", True),
        ("brunch", False),
        ("", True),
    ],
)
def test_search_fields(search, expected):
    assert matches_search(sample_event(), search) is expected


def test_search_prefers_organizer_specification():
    event = sample_event(organizer_specification="Startup Guild")
    assert matches_search(event, "guild")
    assert not matches_search(event, "dana")


def test_only_upcoming_status_is_shown():
    upcoming = sample_event()
    cancelled = sample_event(status="cancelled")
    ongoing = sample_event(status="ongoing")
    assert filter_events([upcoming, cancelled, ongoing], JoinTabCriteria(), NOW) == [upcoming]


def test_filters_are_combined():
    match = sample_event(category="social", title="Board Game Night")
    wrong_category = sample_event(category="business", title="Board Game Night")
    wrong_text = sample_event(category="social", title="Salsa Class")
    expired = sample_event(category="social", title="Board Game Night", starts_in=-timedelta(hours=3))

    criteria = JoinTabCriteria(category="social", search="board game")
    assert filter_events([match, wrong_category, wrong_text, expired], criteria, NOW) == [match]


def test_next_cutoff_picks_earliest_future():
    soon = sample_event(starts_in=timedelta(minutes=10))
    later = sample_event(starts_in=timedelta(days=2))
    gone = sample_event(starts_in=-timedelta(hours=5))
    assert next_cutoff([later, gone, soon], NOW) == NOW + timedelta(minutes=70)
    assert next_cutoff([gone], NOW) is None


@pytest.mark.asyncio
async def test_join_tab_endpoint(client: AsyncClient, make_event):
    open_event = await make_event(title="Open Mic", starts_in=-timedelta(minutes=30), category="social")
    await make_event(title="Yesterday", starts_in=-timedelta(hours=2), category="social")
    await make_event(title="Draft", is_published=False, category="social")
    await make_event(title="Wrapped", status="completed", category="social")
    await make_event(title="Other Category", category="workshop")

    response = await client.get("/api/v1/events/join-tab", params={"category": "social"})
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert [e["id"] for e in body["events"]] == [str(open_event.id)]
    assert body["category"] == "social"


@pytest.mark.asyncio
async def test_join_tab_endpoint_search(client: AsyncClient, make_event):
    await make_event(title="Salsa Social")
    guild = await make_event(title="Quarterly Mixer", organizer_specification="Startup Guild")

    response = await client.get("/api/v1/events/join-tab", params={"search": "GUILD"})
    assert [e["id"] for e in response.json()["events"]] == [str(guild.id)]


@pytest.mark.asyncio
async def test_join_tab_endpoint_rejects_unknown_category(client: AsyncClient):
    response = await client.get("/api/v1/events/join-tab", params={"category": "concerts"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_live_snapshot_releases_connection(db_session: AsyncSession, make_event):
    """A live view reads once and must not keep a transaction open afterwards."""
    event = await make_event(title="Late Night Jazz")

    snapshot = await load_live_snapshot(db_session)
    assert [e.id for e in snapshot] == [event.id]
    assert not db_session.in_transaction()

    # Refreshing reuses the same session
    assert len(await load_live_snapshot(db_session)) == 1
    assert not db_session.in_transaction()
