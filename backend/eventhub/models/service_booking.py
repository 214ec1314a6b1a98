"""
Service provider bookings made against an event.

Key design decisions:
- One row per provider, inserted in bulk
- `total_price` is fixed at booking time (base_price * quantity)
- Status field replaces deletion: rows are never removed
"""

import uuid

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from eventhub.db.base import Base, CreatedAtMixin

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")


class EventServiceBooking(Base, CreatedAtMixin):
    __tablename__ = "event_service_bookings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, ForeignKey("events.id"), nullable=False)
    user_id = Column(Uuid, nullable=False, index=True)
    provider_id = Column(String(255), nullable=False)
    provider_name = Column(String(255), nullable=False)
    provider_category = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    base_price = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    total_price = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    booking_status = Column(String(20), nullable=False, default="pending")

    event = relationship("Event", back_populates="service_bookings")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_service_booking_quantity_positive"),
        CheckConstraint(
            "booking_status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="check_service_booking_status",
        ),
        Index("ix_service_bookings_event_status", "event_id", "booking_status", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<EventServiceBooking(id={self.id}, event={self.event_id}, "
            f"provider={self.provider_id}, status={self.booking_status})>"
        )
