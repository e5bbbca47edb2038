"""
Reservation intake for partner sites.
"""

from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from muaythai.api.deps import public_base_url
from muaythai.core.config import Settings, get_settings
from muaythai.db.session import get_db
from muaythai.schemas.booking import ExternalBookingCreate, ExternalBookingResponse, PaymentData
from muaythai.services.booking_service import create_external_booking

router = APIRouter(prefix="/external-bookings", tags=["External Bookings"])


@router.post("/", response_model=ExternalBookingResponse)
async def receive_external_booking(
    data: ExternalBookingCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Store a partner reservation as a PENDING booking and return what the
    partner needs to start the payment: ModernPay gets our callback URL,
    everything else goes through the ChillPay redirect endpoint.
    """
    booking = await create_external_booking(db, data)
    base_url = public_base_url(request, settings)
    payment_method = (data.payment_method or "chillpay").lower()
    phone = data.mobile or data.phone or ""

    if payment_method == "modernpay":
        query = urlencode({"source": "modernpay", "bookingId": booking.id})
        callback_url = f"{base_url}/api/v1/payments/callback?{query}"
        payment_url = None
    else:
        payment_method = "chillpay"
        callback_url = f"{base_url}/api/v1/payments/chillpay/callback?{urlencode({'bookingId': booking.id})}"
        payment_url = f"{base_url}/checkout/credit-card?" + urlencode({
            "bookingId": booking.id,
            "amount": data.total_amount,
            "customerName": data.name,
            "email": data.email,
            "phone": phone,
            "eventTitle": data.event_name or "",
        })

    return ExternalBookingResponse(
        booking_id=booking.id,
        external_id=booking.payment_order_no,
        payment_method=payment_method,
        payment_url=payment_url,
        payment_data=PaymentData(
            booking_id=booking.id,
            amount=data.total_amount,
            customer_name=data.name,
            customer_email=data.email,
            customer_phone=phone,
            description=f"Tickets for {data.event_name or 'Event'}",
            callback_url=callback_url,
        ),
    )
