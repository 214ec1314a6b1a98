from eventhub.schemas.event import (
    CreateEventForm, UpdateEventForm, EventResponse, ImageUrlUpdate, JoinTabResponse,
)
from eventhub.schemas.booking import (
    ServiceBookingItem, ServiceBookingRequest, BookingStatusUpdate,
    ServiceBookingResponse, BookingTotalResponse,
)
from eventhub.schemas.results import ActionResult, EventResult, UploadResult

__all__ = [
    "CreateEventForm", "UpdateEventForm", "EventResponse", "ImageUrlUpdate", "JoinTabResponse",
    "ServiceBookingItem", "ServiceBookingRequest", "BookingStatusUpdate",
    "ServiceBookingResponse", "BookingTotalResponse",
    "ActionResult", "EventResult", "UploadResult",
]
