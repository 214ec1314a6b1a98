"""
Join tab filtering.

Pure functions over a snapshot of published events and the current time:

  1. visibility window  visible in the join tab and not more than the grace
                        period (1 hour) past its scheduled start
  2. category           "all" or an exact match
  3. search             case-insensitive substring of title, description or
                        organizer (specification, else name)
  4. status             only "upcoming"

All four are ANDed; order does not matter.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Protocol
from zoneinfo import ZoneInfo

from eventhub.core.config import get_settings
from eventhub.schemas.event import CATEGORY_FILTER_ALL


class JoinTabEvent(Protocol):
    title: str
    description: Optional[str]
    organizer_name: str
    organizer_specification: Optional[str]
    category: str
    status: str
    is_visible_in_join_tab: bool
    event_date: object
    event_time: object


def default_grace() -> timedelta:
    return timedelta(minutes=get_settings().JOIN_TAB_GRACE_MINUTES)


def event_timezone() -> ZoneInfo:
    return ZoneInfo(get_settings().EVENT_TIMEZONE)


def scheduled_at(event: JoinTabEvent, tz: Optional[ZoneInfo] = None) -> datetime:
    """Event start as an aware datetime, read in the events' timezone."""
    return datetime.combine(event.event_date, event.event_time, tzinfo=tz or event_timezone())


def cutoff_at(event: JoinTabEvent, grace: Optional[timedelta] = None, tz: Optional[ZoneInfo] = None) -> datetime:
    """The instant the event drops out of the join tab."""
    return scheduled_at(event, tz) + (grace if grace is not None else default_grace())


def _as_aware(now: datetime) -> datetime:
    return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)


def filter_join_tab_events(
    events: Iterable[JoinTabEvent],
    now: datetime,
    grace: Optional[timedelta] = None,
) -> list:
    grace = grace if grace is not None else default_grace()
    tz = event_timezone()
    now = _as_aware(now)
    return [
        event
        for event in events
        if event.is_visible_in_join_tab and cutoff_at(event, grace, tz) >= now
    ]


def matches_category(event: JoinTabEvent, category: str) -> bool:
    return category == CATEGORY_FILTER_ALL or event.category == category


def matches_search(event: JoinTabEvent, search: str) -> bool:
    needle = search.lower()
    organizer = event.organizer_specification or event.organizer_name or ""
    return (
        needle in (event.title or "").lower()
        or needle in (event.description or "").lower()
        or needle in organizer.lower()
    )


@dataclass(frozen=True)
class JoinTabCriteria:
    category: str = CATEGORY_FILTER_ALL
    search: str = ""


def filter_events(
    events: Iterable[JoinTabEvent],
    criteria: JoinTabCriteria,
    now: datetime,
    grace: Optional[timedelta] = None,
) -> list:
    """Everything the join tab shows for these criteria at `now`, in input order."""
    return [
        event
        for event in filter_join_tab_events(events, now, grace)
        if matches_category(event, criteria.category)
        and matches_search(event, criteria.search)
        and event.status == "upcoming"
    ]


def next_cutoff(
    events: Iterable[JoinTabEvent],
    now: datetime,
    grace: Optional[timedelta] = None,
) -> Optional[datetime]:
    """Earliest future cutoff among `events`, or None if nothing will expire."""
    grace = grace if grace is not None else default_grace()
    tz = event_timezone()
    now = _as_aware(now)
    upcoming = [cutoff_at(event, grace, tz) for event in events]
    upcoming = [moment for moment in upcoming if moment > now]
    return min(upcoming) if upcoming else None
