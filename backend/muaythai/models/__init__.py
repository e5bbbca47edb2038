from muaythai.models.event import Region, Venue, Event, EventTicket
from muaythai.models.event_template import EventTemplate, EventTemplateTicket
from muaythai.models.customer import Customer
from muaythai.models.booking import Booking, PaymentStatus

__all__ = [
    "Region", "Venue", "Event", "EventTicket",
    "EventTemplate", "EventTemplateTicket",
    "Customer",
    "Booking", "PaymentStatus",
]
