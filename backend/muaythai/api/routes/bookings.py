"""
Booking endpoints: checkout submission and confirmation-page lookup.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from muaythai.core.config import Settings, get_settings
from muaythai.db.session import get_db
from muaythai.schemas.booking import BookingCreate, BookingCreateResponse, BookingResponse
from muaythai.services.booking_service import create_booking, get_booking

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Create a PENDING booking with event, venue and ticket data snapshotted
    onto it. Ticket ids that do not resolve are skipped or rejected
    depending on TICKET_RESOLUTION_POLICY.
    """
    booking = await create_booking(db, booking_data, settings.TICKET_RESOLUTION_POLICY)
    return BookingCreateResponse(booking_id=booking.id, customer_id=booking.customer_id)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking_endpoint(
    booking_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Booking as stored, snapshot fields included."""
    return await get_booking(db, booking_id)
