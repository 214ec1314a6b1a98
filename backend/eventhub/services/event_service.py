"""
Event service: creation, listings, edits and visibility toggles.

Every mutation is a single UPDATE whose WHERE clause carries both the event
id and the acting organizer id. A request for someone else's event matches
no rows and still reports success; ownership is enforced by the query, not
by a separate lookup.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.models.event import Event
from eventhub.schemas.event import CreateEventForm, EventResponse, UpdateEventForm
from eventhub.schemas.results import ActionResult, EventResult
from eventhub.services.error_policy import ErrorTier, handle_errors
from eventhub.services.event_fields import build_update_values, split_attractions
from eventhub.core.logging import get_logger

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@handle_errors(ErrorTier.SURFACED, EventResult.fail)
async def create_event(
    db: AsyncSession,
    owner_id: uuid.UUID,
    owner_name: str,
    form: CreateEventForm,
) -> EventResult:
    """
    Create an unpublished event. Price, category and status always start
    from fixed values; publishing is a separate step.
    """
    event = Event(
        title=form.event_name,
        description=form.description,
        event_date=form.event_date,
        event_time=form.event_time,
        location=form.location,
        organizer_id=owner_id,
        organizer_name=owner_name,
        organizer_specification=form.organizer_specification,
        capacity=form.estimated_guests,
        price=0,
        attractions=split_attractions(form.attractions),
        features=form.features or [],
        is_livestream=form.is_livestream,
        livestream_url=form.livestream_link or None,
        category="business",
        status="upcoming",
        is_published=False,
    )
    db.add(event)
    await db.commit()
    await db.refresh(event)

    logger.info("event_created", event_id=str(event.id), organizer_id=str(owner_id), title=event.title)
    return EventResult(event=EventResponse.model_validate(event))


@handle_errors(ErrorTier.SILENCED_TO_EMPTY)
async def get_user_events(db: AsyncSession, owner_id: uuid.UUID) -> list[Event]:
    """My Events: the organizer's events not hidden from that view, newest first."""
    result = await db.execute(
        select(Event)
        .where(
            Event.organizer_id == owner_id,
            Event.is_visible_in_my_events.is_(True),
        )
        .order_by(Event.created_at.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


@handle_errors(ErrorTier.SILENCED_TO_EMPTY)
async def get_published_events(db: AsyncSession) -> list[Event]:
    """Join tab source list, soonest first. Readable without signing in."""
    result = await db.execute(
        select(Event)
        .where(
            Event.is_visible_in_join_tab.is_(True),
            Event.is_published.is_(True),
        )
        .order_by(Event.event_date.asc(), Event.event_time.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_event(db: AsyncSession, event_id: uuid.UUID) -> Optional[Event]:
    result = await db.execute(
        select(Event).where(Event.id == event_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _update_owned(
    db: AsyncSession,
    event_id: uuid.UUID,
    owner_id: uuid.UUID,
    values: dict[str, Any],
    action: str,
) -> ActionResult:
    result = await db.execute(
        update(Event)
        .where(Event.id == event_id, Event.organizer_id == owner_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    if result.rowcount == 0:
        logger.info("event_update_matched_nothing", action=action, event_id=str(event_id), organizer_id=str(owner_id))
    else:
        logger.info(action, event_id=str(event_id), organizer_id=str(owner_id))
    return ActionResult.ok()


@handle_errors(ErrorTier.SURFACED, ActionResult.fail)
async def publish_event(db: AsyncSession, event_id: uuid.UUID, owner_id: uuid.UUID) -> ActionResult:
    """Make the event public and bring it back into My Events."""
    return await _update_owned(
        db,
        event_id,
        owner_id,
        {
            "is_published": True,
            "is_visible_in_join_tab": True,
            "is_visible_in_my_events": True,
            "published_at": _now(),
        },
        "event_published",
    )


@handle_errors(ErrorTier.SURFACED, ActionResult.fail)
async def update_event(
    db: AsyncSession,
    event_id: uuid.UUID,
    owner_id: uuid.UUID,
    form: UpdateEventForm,
) -> ActionResult:
    values = build_update_values(form)
    values["updated_at"] = _now()
    return await _update_owned(db, event_id, owner_id, values, "event_updated")


@handle_errors(ErrorTier.SURFACED, ActionResult.fail)
async def hide_event_from_my_events(db: AsyncSession, event_id: uuid.UUID, owner_id: uuid.UUID) -> ActionResult:
    """Soft delete from My Events. The join tab is not affected."""
    return await _update_owned(
        db,
        event_id,
        owner_id,
        {"is_visible_in_my_events": False, "deleted_from_my_events_at": _now()},
        "event_hidden_from_my_events",
    )


@handle_errors(ErrorTier.SURFACED, ActionResult.fail)
async def hide_event_from_join_tab(db: AsyncSession, event_id: uuid.UUID, owner_id: uuid.UUID) -> ActionResult:
    """Unpublish. The event stays in My Events."""
    return await _update_owned(
        db,
        event_id,
        owner_id,
        {
            "is_visible_in_join_tab": False,
            "is_published": False,
            "deleted_from_join_tab_at": _now(),
        },
        "event_hidden_from_join_tab",
    )


@handle_errors(ErrorTier.SURFACED, ActionResult.fail)
async def restore_event_to_my_events(db: AsyncSession, event_id: uuid.UUID, owner_id: uuid.UUID) -> ActionResult:
    return await _update_owned(
        db,
        event_id,
        owner_id,
        {"is_visible_in_my_events": True, "deleted_from_my_events_at": None},
        "event_restored_to_my_events",
    )


@handle_errors(ErrorTier.SURFACED, ActionResult.fail)
async def update_event_image(
    db: AsyncSession,
    event_id: uuid.UUID,
    owner_id: uuid.UUID,
    image_url: str,
    is_thumbnail: bool = False,
) -> ActionResult:
    column = "thumbnail_url" if is_thumbnail else "image_url"
    return await _update_owned(db, event_id, owner_id, {column: image_url}, "event_image_updated")
