"""
Snapshot builder: freezes what the customer saw and paid for.

A booking stores its own copy of the event title/date, venue and region
names and the per-ticket price, so later edits to the catalogue never
rewrite booking history.

Resolution rules:
  - missing or soft-deleted event            -> NotFoundError
  - venue/region reference null or dangling  -> "N/A"
  - ticket id unknown or of another event    -> depends on policy:
        SKIP_UNRESOLVED     log and leave the item out
        FAIL_ON_UNRESOLVED  raise UnresolvedTicketError
  - pricePaid = discounted_price if set, else price
  - costAtBooking = cost, or an explicit None
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from muaythai.core.config import TicketResolutionPolicy
from muaythai.core.errors import NotFoundError, UnresolvedTicketError
from muaythai.core.logging import get_logger
from muaythai.models.event import Event, EventTicket, Region, Venue
from muaythai.schemas.booking import TicketSelection

logger = get_logger(__name__)

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class BookingSnapshot:
    event_title: str
    event_date: Optional[datetime]
    venue_name: str
    region_name: str
    booking_items: list = field(default_factory=list)
    unresolved_ticket_ids: tuple = ()

    def items_json(self) -> Optional[list]:
        """Items as stored on the booking row; an empty selection is stored as null."""
        return list(self.booking_items) or None


async def _lookup_name(db: AsyncSession, model, row_id: Optional[str]) -> str:
    if not row_id:
        return NOT_AVAILABLE
    result = await db.execute(select(model.name).where(model.id == row_id))
    return result.scalar_one_or_none() or NOT_AVAILABLE


async def build_snapshot(
    db: AsyncSession,
    event_id: str,
    selections: Sequence[TicketSelection],
    policy: TicketResolutionPolicy = TicketResolutionPolicy.SKIP_UNRESOLVED,
) -> BookingSnapshot:
    result = await db.execute(
        select(Event.title, Event.date, Event.venue_id, Event.region_id).where(
            Event.id == event_id,
            Event.is_deleted.is_(False),
        )
    )
    event = result.one_or_none()
    if event is None:
        raise NotFoundError("Event not found")

    venue_name = await _lookup_name(db, Venue, event.venue_id)
    region_name = await _lookup_name(db, Region, event.region_id)

    # One query for every requested ticket type
    requested_ids = {selection.id for selection in selections}
    tickets_by_id = {}
    if requested_ids:
        ticket_rows = await db.execute(
            select(EventTicket).where(EventTicket.id.in_(requested_ids), EventTicket.event_id == event_id)
        )
        tickets_by_id = {ticket.id: ticket for ticket in ticket_rows.scalars()}

    items = []
    unresolved = []
    for selection in selections:
        ticket = tickets_by_id.get(selection.id)
        if ticket is None:
            unresolved.append(selection.id)
            logger.warning("ticket_unresolved", event_id=event_id, ticket_id=selection.id)
            continue

        price_paid = ticket.discounted_price if ticket.discounted_price is not None else ticket.price
        items.append({
            "seatType": ticket.seat_type,
            "quantity": selection.quantity,
            "pricePaid": price_paid,
            "costAtBooking": ticket.cost,
        })

    if unresolved and policy is TicketResolutionPolicy.FAIL_ON_UNRESOLVED:
        raise UnresolvedTicketError(details={"unresolvedTicketIds": unresolved})

    return BookingSnapshot(
        event_title=event.title or NOT_AVAILABLE,
        event_date=event.date,
        venue_name=venue_name,
        region_name=region_name,
        booking_items=items,
        unresolved_ticket_ids=tuple(unresolved),
    )
