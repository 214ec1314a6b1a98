"""
Pydantic schemas for service provider bookings.
"""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

BookingStatus = Literal["pending", "confirmed", "cancelled", "completed"]


class ServiceBookingItem(BaseModel):
    provider_id: str = Field(..., min_length=1)
    provider_name: str = Field(..., min_length=1)
    provider_category: str = Field(..., min_length=1)
    quantity: int = Field(default=1, gt=0)
    base_price: float = Field(..., ge=0)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ServiceBookingRequest(BaseModel):
    bookings: list[ServiceBookingItem] = Field(..., min_length=1)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class ServiceBookingResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    user_id: uuid.UUID
    provider_id: str
    provider_name: str
    provider_category: str
    quantity: int
    base_price: float
    total_price: float
    booking_status: BookingStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingTotalResponse(BaseModel):
    event_id: uuid.UUID
    total: float
