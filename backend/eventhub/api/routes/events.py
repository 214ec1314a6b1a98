"""
Event endpoints: organizer management, publishing and the join tab.

The published listing is cached in Redis; any write that can change it
invalidates the cache after it succeeds. Operations that surface errors
answer 400 with the result body when they fail.
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, WebSocket, WebSocketDisconnect, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.config import get_settings
from eventhub.core.logging import get_logger
from eventhub.core.security import CurrentUser, get_current_user, get_current_user_id
from eventhub.db.session import get_db
from eventhub.schemas.event import (
    CATEGORY_FILTERS,
    CreateEventForm,
    EventResponse,
    ImageUrlUpdate,
    JoinTabResponse,
    UpdateEventForm,
)
from eventhub.schemas.results import ActionResult, EventResult, UploadResult
from eventhub.services import event_service
from eventhub.services.cache_service import (
    get_cached_published_events,
    invalidate_published_events,
    set_cached_published_events,
)
from eventhub.services.join_tab import JoinTabCriteria, filter_events
from eventhub.services.join_tab_watcher import JoinTabWatcher
from eventhub.services.storage_service import ImageFile, StorageFunctionClient, get_storage_client, upload_event_image

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])

CategoryFilter = Literal["all", "social", "networking", "business", "workshop", "conference"]


def result_response(result: BaseModel, success: bool, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    code = success_status if success else status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=code, content=result.model_dump(mode="json"))


async def load_published_events(db: AsyncSession) -> list[EventResponse]:
    """Published events, from Redis when possible."""
    cached = await get_cached_published_events()
    if cached is not None:
        return [EventResponse.model_validate(item) for item in cached]

    events = [EventResponse.model_validate(e) for e in await event_service.get_published_events(db)]
    await set_cached_published_events([e.model_dump(mode="json") for e in events])
    return events


async def load_live_snapshot(db: AsyncSession) -> list[EventResponse]:
    """
    Published events for a live view. The session is closed after the read so
    an open socket does not keep a pooled connection checked out.
    """
    try:
        return await load_published_events(db)
    finally:
        await db.close()


@router.post("/", response_model=EventResult, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    form: CreateEventForm,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create an unpublished event owned by the caller."""
    result = await event_service.create_event(db, user.id, user.name, form)
    return result_response(result, result.error is None, status.HTTP_201_CREATED)


@router.get("/mine", response_model=list[EventResponse])
async def my_events_endpoint(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """My Events. An empty list can also mean the lookup failed."""
    return await event_service.get_user_events(db, user_id)


@router.get("/published", response_model=list[EventResponse])
async def published_events_endpoint(db: AsyncSession = Depends(get_db)):
    """All published events, without the join tab time cutoff."""
    return await load_published_events(db)


@router.get("/categories", response_model=list[str])
async def categories_endpoint():
    return list(CATEGORY_FILTERS)


@router.get("/join-tab", response_model=JoinTabResponse)
async def join_tab_endpoint(
    category: CategoryFilter = Query("all"),
    search: str = Query("", max_length=200),
    db: AsyncSession = Depends(get_db),
):
    """Join tab: published events still open, narrowed by category and search text."""
    now = datetime.now(timezone.utc)
    events = filter_events(await load_published_events(db), JoinTabCriteria(category, search), now)
    return JoinTabResponse(
        events=events,
        total=len(events),
        category=category,
        search=search,
        generated_at=now,
    )


@router.websocket("/join-tab/live")
async def join_tab_live(
    websocket: WebSocket,
    category: str = "all",
    search: str = "",
    db: AsyncSession = Depends(get_db),
):
    """
    Live join tab. Pushes the filtered list on connect and whenever it
    changes: events passing their cutoff, new criteria, or a reload.

    Client messages:
        {"action": "filter", "category": "...", "search": "..."}
        {"action": "refresh"}
    """
    await websocket.accept()
    if category not in CATEGORY_FILTERS:
        category = "all"

    async def publish(events: list[EventResponse]) -> None:
        await websocket.send_json({
            "type": "events",
            "events": [e.model_dump(mode="json") for e in events],
            "total": len(events),
            "generated_at": datetime.now(timezone.utc).isoformat(),
        })

    watcher = JoinTabWatcher(
        await load_live_snapshot(db),
        JoinTabCriteria(category, search),
        publish,
        max_interval=get_settings().JOIN_TAB_RECHECK_MAX_SECONDS,
    )
    watcher.start()
    try:
        while True:
            try:
                message = json.loads(await websocket.receive_text())
            except ValueError:
                await websocket.send_json({"type": "error", "error": "Invalid JSON"})
                continue
            action = message.get("action") if isinstance(message, dict) else None
            if action == "filter":
                new_category = message.get("category", watcher.criteria.category)
                if new_category not in CATEGORY_FILTERS:
                    await websocket.send_json({"type": "error", "error": f"Unknown category: {new_category}"})
                    continue
                watcher.set_criteria(JoinTabCriteria(new_category, str(message.get("search", ""))))
            elif action == "refresh":
                watcher.replace_events(await load_live_snapshot(db))
            else:
                await websocket.send_json({"type": "error", "error": "Unknown action"})
    except WebSocketDisconnect:
        logger.info("join_tab_live_closed")
    finally:
        await watcher.stop()


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    event = await event_service.get_event(db, event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Event {event_id} not found")
    return event


@router.patch("/{event_id}", response_model=ActionResult)
async def update_event_endpoint(
    event_id: uuid.UUID,
    form: UpdateEventForm,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Partial edit. Only the keys present in the body are considered."""
    result = await event_service.update_event(db, event_id, user_id, form)
    if result.success:
        await invalidate_published_events()
    return result_response(result, result.success)


@router.post("/{event_id}/publish", response_model=ActionResult)
async def publish_event_endpoint(
    event_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await event_service.publish_event(db, event_id, user_id)
    if result.success:
        await invalidate_published_events()
    return result_response(result, result.success)


@router.post("/{event_id}/hide-from-my-events", response_model=ActionResult)
async def hide_from_my_events_endpoint(
    event_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await event_service.hide_event_from_my_events(db, event_id, user_id)
    if result.success:
        await invalidate_published_events()
    return result_response(result, result.success)


@router.post("/{event_id}/hide-from-join-tab", response_model=ActionResult)
async def hide_from_join_tab_endpoint(
    event_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await event_service.hide_event_from_join_tab(db, event_id, user_id)
    if result.success:
        await invalidate_published_events()
    return result_response(result, result.success)


@router.post("/{event_id}/restore", response_model=ActionResult)
async def restore_to_my_events_endpoint(
    event_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await event_service.restore_event_to_my_events(db, event_id, user_id)
    if result.success:
        await invalidate_published_events()
    return result_response(result, result.success)


@router.post("/{event_id}/images", response_model=UploadResult)
async def upload_image_endpoint(
    event_id: uuid.UUID,
    file: UploadFile = File(...),
    user_id: uuid.UUID = Depends(get_current_user_id),
    storage: StorageFunctionClient = Depends(get_storage_client),
):
    """Upload an image to storage. Attach it with PUT /events/{id}/image."""
    image = ImageFile(
        filename=file.filename or "image",
        content=await file.read(),
        content_type=file.content_type,
    )
    result = await upload_event_image(storage, image, event_id)
    return result_response(result, result.error is None)


@router.put("/{event_id}/image", response_model=ActionResult)
async def update_image_endpoint(
    event_id: uuid.UUID,
    body: ImageUrlUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await event_service.update_event_image(db, event_id, user_id, body.url, body.is_thumbnail)
    if result.success:
        await invalidate_published_events()
    return result_response(result, result.success)
