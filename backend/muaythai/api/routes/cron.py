"""
Scheduled job triggers. The scheduler itself lives outside this service;
it calls these endpoints with `Authorization: Bearer <CRON_SECRET>`.
"""

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from muaythai.core.config import Settings, get_settings
from muaythai.core.errors import ConfigurationError, UnauthorizedError
from muaythai.core.logging import get_logger
from muaythai.db.session import get_db
from muaythai.services.event_template_service import generate_upcoming_events

logger = get_logger(__name__)
router = APIRouter(prefix="/cron", tags=["Cron"])


def verify_cron_secret(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    if not settings.CRON_SECRET:
        logger.error("cron_secret_missing")
        raise ConfigurationError("Cron secret not configured")
    expected = f"Bearer {settings.CRON_SECRET}"
    if not hmac.compare_digest(expected, authorization or ""):
        logger.warning("cron_unauthorized")
        raise UnauthorizedError()


@router.get("/generate-events", dependencies=[Depends(verify_cron_secret)])
async def generate_events_endpoint(
    days: Optional[int] = Query(None, ge=1, le=366),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Expand active event templates into concrete events."""
    look_ahead = days or settings.EVENT_GENERATION_LOOKAHEAD_DAYS
    result = await generate_upcoming_events(db, look_ahead)
    return {
        "success": True,
        "message": f"Generated {result['generatedCount']} events from {result['templates']} templates",
        **result,
    }
