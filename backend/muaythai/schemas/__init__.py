from muaythai.schemas.booking import (
    BookingCreate, BookingCreateResponse, BookingResponse,
    ContactInfo, TicketSelection,
    ExternalBookingCreate, ExternalBookingResponse, PaymentData,
)
from muaythai.schemas.event import EventResponse, EventDetailResponse, EventListResponse, EventTicketResponse
from muaythai.schemas.payment import ModernPayCallback, PaymentCallbackResponse, WebhookAck

__all__ = [
    "BookingCreate", "BookingCreateResponse", "BookingResponse",
    "ContactInfo", "TicketSelection",
    "ExternalBookingCreate", "ExternalBookingResponse", "PaymentData",
    "EventResponse", "EventDetailResponse", "EventListResponse", "EventTicketResponse",
    "ModernPayCallback", "PaymentCallbackResponse", "WebhookAck",
]
