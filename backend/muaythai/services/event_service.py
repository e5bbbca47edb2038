"""
Event read service for the public catalogue.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from muaythai.core.errors import NotFoundError
from muaythai.models.event import Event, Region, Venue


async def get_event_detail(db: AsyncSession, event_id: str) -> dict:
    """Event with venue/region names and ticket types. Soft-deleted events are not found."""
    result = await db.execute(
        select(Event, Venue.name, Region.name)
        .outerjoin(Venue, Venue.id == Event.venue_id)
        .outerjoin(Region, Region.id == Event.region_id)
        .where(Event.id == event_id, Event.is_deleted.is_(False))
        .execution_options(populate_existing=True)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError(f"Event {event_id} not found")

    event, venue_name, region_name = row
    return {
        "event": event,
        "venue_name": venue_name,
        "region_name": region_name,
        "tickets": list(event.tickets),
    }


async def list_events(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    upcoming_only: bool = True,
    now: Optional[datetime] = None,
) -> tuple[list[Event], int]:
    """List non-deleted events ordered by date, with pagination."""
    query = select(Event).where(Event.is_deleted.is_(False))

    if upcoming_only:
        query = query.where(Event.date >= (now or datetime.now(timezone.utc)))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(Event.date.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total
