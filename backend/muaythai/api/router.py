"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from muaythai.api.routes import bookings, cron, events, external_bookings, payments

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(events.router)
api_router.include_router(bookings.router)
api_router.include_router(external_bookings.router)
api_router.include_router(payments.router)
api_router.include_router(cron.router)
