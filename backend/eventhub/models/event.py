"""
Event model with independent visibility flags.

Key design decisions:
- Three booleans govern where an event shows up: `is_published` and
  `is_visible_in_join_tab` together make it public, `is_visible_in_my_events`
  keeps it in the organizer's management list
- Hiding is a soft delete: the flag flips and a companion timestamp records when
- `event_date` and `event_time` are stored separately, the way organizers enter them
"""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    Time,
    Uuid,
)
from sqlalchemy.orm import relationship

from eventhub.db.base import Base, TimestampMixin

EVENT_CATEGORIES = ("social", "networking", "business", "workshop", "conference")
EVENT_STATUSES = ("upcoming", "ongoing", "completed", "cancelled")


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(Date, nullable=False)
    event_time = Column(Time, nullable=False)
    location = Column(String(255), nullable=True)

    organizer_id = Column(Uuid, nullable=False, index=True)
    organizer_name = Column(String(255), nullable=False)
    organizer_specification = Column(String(255), nullable=True)

    capacity = Column(Integer, nullable=True)
    price = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    attractions = Column(JSON, nullable=False, default=list)
    features = Column(JSON, nullable=False, default=list)
    is_livestream = Column(Boolean, nullable=False, default=False)
    livestream_url = Column(String(1024), nullable=True)

    category = Column(String(20), nullable=False, default="business")
    status = Column(String(20), nullable=False, default="upcoming")

    # Visibility
    is_published = Column(Boolean, nullable=False, default=False)
    is_visible_in_join_tab = Column(Boolean, nullable=False, default=True)
    is_visible_in_my_events = Column(Boolean, nullable=False, default=True)
    deleted_from_my_events_at = Column(DateTime(timezone=True), nullable=True)
    deleted_from_join_tab_at = Column(DateTime(timezone=True), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)

    image_url = Column(String(1024), nullable=True)
    thumbnail_url = Column(String(1024), nullable=True)

    service_bookings = relationship("EventServiceBooking", back_populates="event", lazy="raise")

    __table_args__ = (
        CheckConstraint(
            "category IN ('social', 'networking', 'business', 'workshop', 'conference')",
            name="check_event_category",
        ),
        CheckConstraint(
            "status IN ('upcoming', 'ongoing', 'completed', 'cancelled')",
            name="check_event_status",
        ),
        # My Events: WHERE organizer_id = ? AND is_visible_in_my_events ORDER BY created_at DESC
        Index("ix_events_organizer_visible", "organizer_id", "is_visible_in_my_events", "created_at"),
        # Join tab: WHERE is_visible_in_join_tab AND is_published ORDER BY event_date
        Index("ix_events_public_date", "is_visible_in_join_tab", "is_published", "event_date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, published={self.is_published})>"
