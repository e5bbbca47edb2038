"""
Booking writer: turns a checkout request into a PENDING booking.

WORKFLOW
========

  1. Resolve the customer by email (insert-on-conflict, see customer_service)
  2. Build the snapshot from the live catalogue (see snapshot_service)
  3. Insert one Booking row in PENDING with the snapshot copied onto it

All three steps run in the request's session and form one unit of work:
any failure rolls the session back, so a failed booking never leaves an
orphaned customer upsert behind. Nothing is committed here; the session
dependency commits once the handler returns.

Sold counts on ticket types are deliberately not touched when a booking is
written (see DESIGN.md, open question on sold-count timing).
"""

import time
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from muaythai.core.config import TicketResolutionPolicy
from muaythai.core.errors import BookingServiceError, NotFoundError, PersistenceError, ValidationError
from muaythai.core.logging import bind_booking_context, get_logger
from muaythai.core.metrics import booking_latency, record_booking_attempt
from muaythai.models.booking import Booking, PaymentStatus
from muaythai.models.event import Event
from muaythai.schemas.booking import BookingCreate, ExternalBookingCreate
from muaythai.services.customer_service import resolve_customer
from muaythai.services.snapshot_service import build_snapshot

logger = get_logger(__name__)


def _metric_status(exc: BookingServiceError) -> str:
    if isinstance(exc, NotFoundError):
        return "not_found"
    if isinstance(exc, ValidationError):
        return "invalid"
    return "error"


async def create_booking(
    db: AsyncSession,
    booking_data: BookingCreate,
    policy: TicketResolutionPolicy = TicketResolutionPolicy.SKIP_UNRESOLVED,
) -> Booking:
    """
    Create a PENDING booking with snapshot data.
    Raises NotFoundError for a missing event, UnresolvedTicketError under
    FAIL_ON_UNRESOLVED and PersistenceError for database failures.
    """
    started = time.perf_counter()
    contact = booking_data.contact_info
    bind_booking_context(event_id=booking_data.event_id, customer_email=contact.email)

    try:
        customer_id = await resolve_customer(db, contact.email, contact.full_name, contact.phone)
        snapshot = await build_snapshot(db, booking_data.event_id, booking_data.tickets, policy)

        booking = Booking(
            id=str(uuid.uuid4()),
            customer_id=customer_id,
            event_id=booking_data.event_id,
            total_amount=booking_data.total_cost,
            payment_status=PaymentStatus.PENDING.value,
            customer_name_snapshot=contact.full_name,
            customer_email_snapshot=contact.email,
            customer_phone_snapshot=contact.phone or None,
            event_title_snapshot=snapshot.event_title,
            event_date_snapshot=snapshot.event_date,
            venue_name_snapshot=snapshot.venue_name,
            region_name_snapshot=snapshot.region_name,
            booking_items_json=snapshot.items_json(),
        )
        db.add(booking)
        await db.flush()
        await db.refresh(booking)

    except BookingServiceError as exc:
        await db.rollback()
        record_booking_attempt(_metric_status(exc))
        logger.warning("booking_rejected", reason=exc.message)
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        record_booking_attempt("error")
        logger.error("booking_failed", error=str(exc), total_cost=booking_data.total_cost)
        raise PersistenceError("Failed to create booking") from exc

    record_booking_attempt("success")
    booking_latency.observe(time.perf_counter() - started)
    logger.info(
        "booking_created",
        booking_id=booking.id,
        customer_id=customer_id,
        items=len(snapshot.booking_items),
        skipped_tickets=len(snapshot.unresolved_ticket_ids),
    )
    return booking


async def create_external_booking(db: AsyncSession, data: ExternalBookingCreate) -> Booking:
    """
    Record a reservation made on a partner site.

    The partner already showed the customer its own event/venue data, so
    its values are the snapshot. The partner reservation id becomes the
    booking's payment_order_no for gateway correlation.
    """
    reservation_id = data.external_reservation_id or data.pre_reservation_id or uuid.uuid4().hex
    phone = data.mobile or data.phone
    bind_booking_context(event_id=data.event_id, payment_order_no=reservation_id)

    try:
        event_exists = await db.execute(
            select(Event.id).where(Event.id == data.event_id, Event.is_deleted.is_(False))
        )
        if event_exists.scalar_one_or_none() is None:
            raise NotFoundError("Event not found")

        customer_id = await resolve_customer(db, data.email, data.name, phone)
        booking = Booking(
            id=str(uuid.uuid4()),
            customer_id=customer_id,
            event_id=data.event_id,
            total_amount=data.total_amount,
            payment_status=PaymentStatus.PENDING.value,
            payment_order_no=reservation_id,
            customer_name_snapshot=data.name,
            customer_email_snapshot=data.email,
            customer_phone_snapshot=phone,
            event_title_snapshot=data.event_name,
            event_date_snapshot=data.event_date,
            venue_name_snapshot=data.venue_name,
            region_name_snapshot=data.region_name,
            booking_items_json=data.tickets or None,
        )
        db.add(booking)
        await db.flush()
        await db.refresh(booking)

    except BookingServiceError as exc:
        await db.rollback()
        record_booking_attempt(_metric_status(exc))
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        record_booking_attempt("error")
        logger.error("external_booking_failed", error=str(exc))
        raise PersistenceError("Failed to process booking") from exc

    record_booking_attempt("success")
    logger.info("external_booking_created", booking_id=booking.id, customer_id=customer_id)
    return booking


async def get_booking(db: AsyncSession, booking_id: str) -> Booking:
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


async def find_booking_by_order_no(db: AsyncSession, order_no: str) -> Optional[Booking]:
    """Locate a booking by gateway order number, falling back to the booking id."""
    result = await db.execute(
        select(Booking).where(Booking.payment_order_no == order_no).order_by(Booking.created_at.desc())
    )
    booking = result.scalars().first()
    if booking is None:
        booking = await db.get(Booking, order_no)
    return booking
