from eventhub.models.event import Event
from eventhub.models.service_booking import EventServiceBooking

__all__ = ["Event", "EventServiceBooking"]
