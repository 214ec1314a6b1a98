"""
Service provider bookings for an event.

Bookings are written in one bulk INSERT, one row per provider, all pending.
The price is frozen at booking time; later changes to a provider's rate do
not touch existing rows. Cancelling is a status change, never a DELETE.
"""

import uuid
from typing import Sequence

from sqlalchemy import bindparam, func, insert, select, update, Uuid
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.models.service_booking import EventServiceBooking
from eventhub.schemas.booking import BookingStatus, ServiceBookingItem
from eventhub.schemas.results import ActionResult
from eventhub.services.error_policy import ErrorTier, handle_errors
from eventhub.core.logging import get_logger

logger = get_logger(__name__)

BOOKING_TOTAL_PROCEDURE = "calculate_event_booking_total_cost"


@handle_errors(ErrorTier.SURFACED, ActionResult.fail)
async def book_event_services(
    db: AsyncSession,
    event_id: uuid.UUID,
    user_id: uuid.UUID,
    bookings: Sequence[ServiceBookingItem],
) -> ActionResult:
    rows = [
        {
            "id": uuid.uuid4(),
            "event_id": event_id,
            "user_id": user_id,
            "provider_id": item.provider_id,
            "provider_name": item.provider_name,
            "provider_category": item.provider_category,
            "quantity": item.quantity,
            "base_price": item.base_price,
            "total_price": item.base_price * item.quantity,
            "booking_status": "pending",
        }
        for item in bookings
    ]
    await db.execute(insert(EventServiceBooking), rows)
    await db.commit()

    logger.info(
        "event_services_booked",
        event_id=str(event_id),
        user_id=str(user_id),
        providers=len(rows),
        total=sum(row["total_price"] for row in rows),
    )
    return ActionResult.ok()


@handle_errors(ErrorTier.SILENCED_TO_EMPTY)
async def get_event_service_bookings(db: AsyncSession, event_id: uuid.UUID) -> list[EventServiceBooking]:
    """Pending bookings for an event, newest first."""
    result = await db.execute(
        select(EventServiceBooking)
        .where(
            EventServiceBooking.event_id == event_id,
            EventServiceBooking.booking_status == "pending",
        )
        .order_by(EventServiceBooking.created_at.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


@handle_errors(ErrorTier.SURFACED, ActionResult.fail)
async def update_service_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    user_id: uuid.UUID,
    status: BookingStatus,
) -> ActionResult:
    result = await db.execute(
        update(EventServiceBooking)
        .where(
            EventServiceBooking.id == booking_id,
            EventServiceBooking.user_id == user_id,
        )
        .values(booking_status=status)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    logger.info(
        "service_booking_updated",
        booking_id=str(booking_id),
        user_id=str(user_id),
        status=status,
        rows=result.rowcount,
    )
    return ActionResult.ok()


async def cancel_service_booking(db: AsyncSession, booking_id: uuid.UUID, user_id: uuid.UUID) -> ActionResult:
    return await update_service_booking(db, booking_id, user_id, "cancelled")


@handle_errors(ErrorTier.SILENCED_TO_DEFAULT)
async def get_event_booking_total(db: AsyncSession, event_id: uuid.UUID) -> float:
    """
    Total cost of an event's bookings, computed by the database function
    calculate_event_booking_total_cost(p_event_id). Returns 0 on any failure.
    """
    procedure = getattr(func, BOOKING_TOTAL_PROCEDURE)
    total = await db.scalar(
        select(procedure(bindparam("p_event_id", event_id, type_=Uuid)))
    )
    return float(total or 0)
