"""
Event catalogue endpoints with Redis caching on list operations.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from muaythai.core.config import Settings, get_settings
from muaythai.core.logging import get_logger
from muaythai.db.session import get_db
from muaythai.schemas.event import EventDetailResponse, EventListResponse, EventResponse, EventTicketResponse
from muaythai.services.cache_service import get_cached_events, set_cached_events
from muaythai.services.event_service import get_event_detail, list_events

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    upcoming_only: bool = Query(True),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    List events with pagination.
    Results are cached in Redis for EVENT_CACHE_TTL seconds and dropped
    whenever the template expander adds events.
    """
    cached = await get_cached_events(page, page_size, upcoming_only, settings.EVENT_CACHE_TTL)
    if cached:
        logger.info("events_list_cache_hit", page=page)
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total = await list_events(db, page, page_size, upcoming_only)

    response_data = {
        "events": [EventResponse.model_validate(e).model_dump() for e in events],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }

    await set_cached_events(page, page_size, upcoming_only, response_data, settings.EVENT_CACHE_TTL)

    return EventListResponse(**response_data)


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event_endpoint(
    event_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Single event with venue/region names and ticket types. Not cached."""
    detail = await get_event_detail(db, event_id)
    return EventDetailResponse(
        **EventResponse.model_validate(detail["event"]).model_dump(),
        venue_name=detail["venue_name"],
        region_name=detail["region_name"],
        tickets=[EventTicketResponse.model_validate(t) for t in detail["tickets"]],
    )
