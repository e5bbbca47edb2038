"""
Recurring event expansion.

Active templates are expanded into concrete Event rows (plus one
EventTicket per template ticket) for a look-ahead window. Running the
expansion twice is safe: an occurrence is skipped when an event already
exists for the same (template, date, venue).

Recurrence types:
  - weekly:  every date whose weekday is in recurring_days_of_week
             (0 = Sunday ... 6 = Saturday)
  - monthly: the listed days of each month, clamped to the month's length
  - none:    nothing is generated
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from muaythai.core.logging import get_logger
from muaythai.core.metrics import record_events_generated
from muaythai.db.base import generate_id
from muaythai.models.event import Event, EventTicket
from muaythai.models.event_template import EventTemplate
from muaythai.services.cache_service import invalidate_event_cache

logger = get_logger(__name__)


@dataclass(frozen=True)
class Occurrence:
    date: datetime
    start_time: Optional[datetime]
    end_time: Optional[datetime]


def _parse_time(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    parts = value.split(":")
    if len(parts) < 2:
        return None
    try:
        return time(int(parts[0]), int(parts[1]))
    except ValueError:
        return None


def _at(day: date, at: Optional[time]) -> Optional[datetime]:
    if at is None:
        return None
    return datetime.combine(day, at, tzinfo=timezone.utc)


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time(0, 0), tzinfo=timezone.utc)


def _days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def calculate_occurrences(template: EventTemplate, range_start: date, range_end: date) -> list[Occurrence]:
    """Occurrence dates for `template` between two dates, inclusive."""
    if template.start_date and template.start_date.date() > range_start:
        range_start = template.start_date.date()
    if template.end_date and template.end_date.date() < range_end:
        range_end = template.end_date.date()
    if range_start > range_end:
        return []

    start_at = _parse_time(template.default_start_time)
    end_at = _parse_time(template.default_end_time)

    if template.recurrence_type == "weekly":
        weekdays = set(template.recurring_days_of_week or [])
        # date.weekday() is Monday=0; templates count from Sunday=0
        days = [d for d in _days(range_start, range_end) if (d.weekday() + 1) % 7 in weekdays]
    elif template.recurrence_type == "monthly" and template.day_of_month:
        days = []
        year, month = range_start.year, range_start.month
        while date(year, month, 1) <= range_end:
            last_day = calendar.monthrange(year, month)[1]
            for wanted in sorted(set(template.day_of_month)):
                candidate = date(year, month, min(wanted, last_day))
                if range_start <= candidate <= range_end and candidate not in days:
                    days.append(candidate)
            year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    else:
        days = []

    return [Occurrence(_midnight(d), _at(d, start_at), _at(d, end_at)) for d in days]


def format_event_title(title_format: str, venue: str, when: datetime, start_time: datetime) -> str:
    hour = start_time.hour % 12 or 12
    meridiem = "AM" if start_time.hour < 12 else "PM"
    return (
        title_format
        .replace("{venue}", venue)
        .replace("{date}", f"{when:%B} {when.day}, {when.year}")
        .replace("{time}", f"{hour}:{start_time.minute:02d} {meridiem}")
    )


async def _event_exists(db: AsyncSession, template: EventTemplate, when: datetime) -> bool:
    venue_clause = (
        Event.venue_id == template.venue_id if template.venue_id else Event.venue_id.is_(None)
    )
    result = await db.execute(
        select(Event.id).where(Event.template_id == template.id, Event.date == when, venue_clause).limit(1)
    )
    return result.first() is not None


async def generate_upcoming_events(
    db: AsyncSession,
    look_ahead_days: int = 30,
    today: Optional[date] = None,
) -> dict:
    """
    Expand every active template for the next `look_ahead_days` days.
    Returns {"generatedCount": int, "templates": int}.
    """
    range_start = today or datetime.now(timezone.utc).date()
    range_end = range_start + timedelta(days=look_ahead_days)

    result = await db.execute(
        select(EventTemplate)
        .where(EventTemplate.is_active.is_(True))
        .execution_options(populate_existing=True)
    )
    templates = list(result.scalars().all())
    logger.info("event_generation_started", templates=len(templates), look_ahead_days=look_ahead_days)

    generated = 0
    for template in templates:
        venue_name = template.venue.name if template.venue else "Venue"
        for occurrence in calculate_occurrences(template, range_start, range_end):
            if occurrence.start_time is None:
                logger.info("event_generation_skipped", template_id=template.id, reason="missing_start_time")
                continue
            if await _event_exists(db, template, occurrence.date):
                continue

            title = format_event_title(
                template.default_title_format or template.template_name,
                venue_name,
                occurrence.date,
                occurrence.start_time,
            )
            event = Event(
                id=generate_id(),
                title=title,
                description=template.default_description,
                date=occurrence.date,
                start_time=occurrence.start_time,
                end_time=occurrence.end_time,
                venue_id=template.venue_id,
                region_id=template.region_id,
                template_id=template.id,
                status="SCHEDULED",
            )
            event.tickets = [
                EventTicket(
                    id=generate_id(),
                    seat_type=ticket.seat_type,
                    price=ticket.default_price,
                    capacity=ticket.default_capacity,
                    description=ticket.default_description,
                    sold_count=0,
                )
                for ticket in template.template_tickets
            ]
            try:
                db.add(event)
                await db.flush()
            except SQLAlchemyError as exc:
                await db.rollback()
                logger.error("event_generation_failed", template_id=template.id, error=str(exc))
                raise
            generated += 1

    if generated:
        await invalidate_event_cache()
    record_events_generated(generated)
    logger.info("events_generated", generated=generated, templates=len(templates))
    return {"generatedCount": generated, "templates": len(templates)}
