"""
Pydantic schemas for event requests and responses.

Request bodies use the camelCase keys the web client sends (`eventName`,
`estimatedGuests`, ...). Responses mirror the stored row.
"""

import uuid
from datetime import date, datetime, time
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EventCategory = Literal["social", "networking", "business", "workshop", "conference"]
EventStatus = Literal["upcoming", "ongoing", "completed", "cancelled"]

CATEGORY_FILTER_ALL = "all"
CATEGORY_FILTERS = (CATEGORY_FILTER_ALL, "social", "networking", "business", "workshop", "conference")


class _FormModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateEventForm(_FormModel):
    event_name: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=5000)
    event_date: date
    event_time: time
    location: Optional[str] = Field(None, max_length=255)
    organizer_specification: Optional[str] = Field(None, max_length=255)
    estimated_guests: Optional[int] = Field(None, ge=0)
    budget: Optional[float] = Field(None, ge=0)  # accepted but not stored at creation
    attractions: Optional[str] = None  # comma-separated
    features: Optional[list[str]] = None
    is_livestream: bool = False
    livestream_link: Optional[str] = Field(None, max_length=1024)


class UpdateEventForm(_FormModel):
    """
    Partial edit. Which keys the client actually sent matters: see
    `eventhub.services.event_fields` for how each one is applied.
    """

    event_name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    event_date: Optional[date] = None
    event_time: Optional[time] = None
    location: Optional[str] = Field(None, max_length=255)
    estimated_guests: Optional[int] = Field(None, ge=0)
    budget: Optional[float] = Field(None, ge=0)
    organizer_specification: Optional[str] = Field(None, max_length=255)
    attractions: Optional[str] = None
    features: Optional[list[str]] = None
    is_livestream: Optional[bool] = None
    livestream_link: Optional[str] = Field(None, max_length=1024)

    @field_validator("event_date", "event_time", "estimated_guests", mode="before")
    @classmethod
    def blank_means_unchanged(cls, value: Any) -> Any:
        # Cleared inputs arrive as "", which leaves the column alone
        if value == "":
            return None
        return value


class EventResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    event_date: date
    event_time: time
    location: Optional[str]
    organizer_id: uuid.UUID
    organizer_name: str
    organizer_specification: Optional[str]
    capacity: Optional[int]
    price: float
    attractions: list[str]
    features: list[str]
    is_livestream: bool
    livestream_url: Optional[str]
    category: EventCategory
    status: EventStatus
    is_published: bool
    is_visible_in_join_tab: bool
    is_visible_in_my_events: bool
    deleted_from_my_events_at: Optional[datetime]
    deleted_from_join_tab_at: Optional[datetime]
    image_url: Optional[str]
    thumbnail_url: Optional[str]
    created_at: datetime
    updated_at: datetime
    published_at: Optional[datetime]

    model_config = {"from_attributes": True}


class ImageUrlUpdate(_FormModel):
    url: str = Field(..., min_length=1, max_length=1024)
    is_thumbnail: bool = False


class JoinTabResponse(BaseModel):
    events: list[EventResponse]
    total: int
    category: str
    search: str
    generated_at: datetime
