"""
Service provider booking endpoints.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.api.routes.events import result_response
from eventhub.core.security import get_current_user_id
from eventhub.db.session import get_db
from eventhub.schemas.booking import (
    BookingStatusUpdate,
    BookingTotalResponse,
    ServiceBookingRequest,
    ServiceBookingResponse,
)
from eventhub.schemas.results import ActionResult
from eventhub.services import service_booking_service

router = APIRouter(tags=["Service Bookings"])


@router.post("/events/{event_id}/service-bookings", response_model=ActionResult)
async def book_services_endpoint(
    event_id: uuid.UUID,
    body: ServiceBookingRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Book one or more providers for an event. Every row starts pending."""
    result = await service_booking_service.book_event_services(db, event_id, user_id, body.bookings)
    return result_response(result, result.success)


@router.get("/events/{event_id}/service-bookings", response_model=list[ServiceBookingResponse])
async def pending_bookings_endpoint(event_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Pending bookings for an event, newest first."""
    return await service_booking_service.get_event_service_bookings(db, event_id)


@router.get("/events/{event_id}/service-bookings/total", response_model=BookingTotalResponse)
async def booking_total_endpoint(event_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    total = await service_booking_service.get_event_booking_total(db, event_id)
    return BookingTotalResponse(event_id=event_id, total=total)


@router.patch("/service-bookings/{booking_id}", response_model=ActionResult)
async def update_booking_endpoint(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    result = await service_booking_service.update_service_booking(db, booking_id, user_id, body.status)
    return result_response(result, result.success)


@router.delete("/service-bookings/{booking_id}", response_model=ActionResult)
async def cancel_booking_endpoint(
    booking_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a booking. The row is kept with status "cancelled"."""
    result = await service_booking_service.cancel_service_booking(db, booking_id, user_id)
    return result_response(result, result.success)
