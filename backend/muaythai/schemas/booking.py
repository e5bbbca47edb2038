"""
Pydantic schemas for booking-related request/response validation.
Wire format is camelCase to match the checkout frontend.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContactInfo(CamelModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)


class TicketSelection(CamelModel):
    id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)


class BookingCreate(CamelModel):
    event_id: str = Field(..., min_length=1)
    contact_info: ContactInfo
    tickets: list[TicketSelection]
    total_cost: float = Field(..., ge=0)


class BookingCreateResponse(CamelModel):
    success: bool = True
    booking_id: str
    customer_id: str
    message: str = "Booking created successfully"


class BookingResponse(CamelModel):
    id: str
    customer_id: str
    event_id: str
    total_amount: float
    payment_status: str
    payment_order_no: Optional[str] = None
    payment_transaction_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_bank_code: Optional[str] = None
    payment_bank_ref_code: Optional[str] = None
    payment_date: Optional[str] = None
    customer_name_snapshot: Optional[str] = None
    customer_email_snapshot: Optional[str] = None
    customer_phone_snapshot: Optional[str] = None
    event_title_snapshot: Optional[str] = None
    event_date_snapshot: Optional[datetime] = None
    venue_name_snapshot: Optional[str] = None
    region_name_snapshot: Optional[str] = None
    booking_items_json: Optional[list[dict[str, Any]]] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ExternalBookingCreate(CamelModel):
    """Reservation pushed by a partner site; its snapshot values are stored verbatim."""

    external_reservation_id: Optional[str] = None
    pre_reservation_id: Optional[str] = None
    event_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    mobile: Optional[str] = None
    phone: Optional[str] = None
    event_name: Optional[str] = None
    event_date: Optional[datetime] = None
    venue_name: Optional[str] = None
    region_name: Optional[str] = None
    tickets: Optional[list[dict[str, Any]]] = None
    total_amount: float = Field(..., ge=0)
    payment_method: Optional[str] = None
    return_url: Optional[str] = None


class PaymentData(CamelModel):
    booking_id: str
    amount: float
    customer_name: str
    customer_email: str
    customer_phone: str = ""
    description: str
    callback_url: str


class ExternalBookingResponse(CamelModel):
    success: bool = True
    message: str = "Booking created successfully"
    booking_id: str
    external_id: str
    payment_method: str
    payment_url: Optional[str] = None
    payment_data: PaymentData
