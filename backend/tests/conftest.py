"""
Pytest fixtures for test database, client, and catalogue data.

Each test gets its own engine with freshly created tables, dropped again
afterwards. By default that is an in-memory SQLite database (aiosqlite);
set TEST_DATABASE_URL to a postgresql+asyncpg URL to run the suite against
the production dialect.
"""

import os

# Redis stays off for the whole suite; must be set before settings are loaded
os.environ.setdefault("REDIS_ENABLED", "false")

from datetime import datetime, timezone, timedelta
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from muaythai.main import app
from muaythai.core.config import Settings, get_settings
from muaythai.db.base import Base
from muaythai.db.session import get_db
from muaythai.models.event import Region, Venue, Event, EventTicket
from muaythai.models.event_template import EventTemplate, EventTemplateTicket
from muaythai.schemas.booking import BookingCreate
from muaythai.services.booking_service import create_booking

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

CHILLPAY_SECRET = "chillpay-test-secret"
CRON_SECRET = "cron-test-secret"
PUBLIC_BASE_URL = "https://muaythai.test"
PAYPAL_CLIENT_ID = "paypal-client"
PAYPAL_SECRET = "paypal-secret"
PAYPAL_API_URL = "https://api-m.sandbox.paypal.test"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        REDIS_ENABLED=False,
        EVENT_CACHE_TTL=0,
        PUBLIC_BASE_URL=PUBLIC_BASE_URL,
        CHILLPAY_MD5_SECRET=CHILLPAY_SECRET,
        CRON_SECRET=CRON_SECRET,
        PAYPAL_CLIENT_ID=PAYPAL_CLIENT_ID,
        PAYPAL_SECRET=PAYPAL_SECRET,
        PAYPAL_API_URL=PAYPAL_API_URL,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that shares the test session and settings with the app."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def fight_night(db_session: AsyncSession) -> SimpleNamespace:
    """
    Bangkok / Lumpinee / "Fight Night" two weeks out, with two ticket types:
    Ringside 1000 discounted to 800 (no cost basis) and VIP 2500 at cost 1200.
    Returns plain ids so tests stay valid after a session rollback.
    """
    region = Region(name="Bangkok", slug="bangkok")
    venue = Venue(name="Lumpinee", address="6 Ram Intra Rd, Bangkok", capacity=9500, region=region)
    event_date = datetime.now(timezone.utc) + timedelta(days=14)
    event = Event(
        title="Fight Night",
        description="Ten bouts, title fight main event",
        date=event_date,
        start_time=event_date.replace(hour=18, minute=30),
        venue=venue,
        region=region,
    )
    ringside = EventTicket(seat_type="Ringside", price=1000, discounted_price=800, capacity=100, event=event)
    vip = EventTicket(seat_type="VIP", price=2500, cost=1200, capacity=20, event=event)
    db_session.add_all([region, venue, event, ringside, vip])
    await db_session.commit()

    return SimpleNamespace(
        event_id=event.id,
        venue_id=venue.id,
        region_id=region.id,
        ringside_id=ringside.id,
        vip_id=vip.id,
    )


@pytest_asyncio.fixture
async def orphan_event(db_session: AsyncSession) -> str:
    """Event with no venue or region attached."""
    event_date = datetime.now(timezone.utc) + timedelta(days=3)
    event = Event(title="Sparring Open Day", date=event_date, start_time=event_date)
    db_session.add(event)
    await db_session.commit()
    return event.id


def booking_payload(event_id: str, tickets: list, email: str = "jane@example.com", **overrides) -> dict:
    payload = {
        "eventId": event_id,
        "contactInfo": {"fullName": "Jane Doe", "email": email},
        "tickets": tickets,
        "totalCost": 1600,
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture
async def pending_booking(db_session: AsyncSession, fight_night: SimpleNamespace) -> str:
    """A committed PENDING booking for two Ringside seats; returns its id."""
    data = BookingCreate.model_validate(
        booking_payload(fight_night.event_id, [{"id": fight_night.ringside_id, "quantity": 2}])
    )
    booking = await create_booking(db_session, data)
    await db_session.commit()
    return booking.id


@pytest_asyncio.fixture
async def weekly_template(db_session: AsyncSession, fight_night: SimpleNamespace) -> str:
    """Active template: Lumpinee every Tuesday and Saturday at 18:30."""
    template = EventTemplate(
        template_name="Lumpinee Weekly",
        venue_id=fight_night.venue_id,
        region_id=fight_night.region_id,
        default_title_format="Muay Thai at {venue} - {date} {time}",
        default_description="Weekly stadium card",
        recurrence_type="weekly",
        recurring_days_of_week=[2, 6],
        default_start_time="18:30",
        default_end_time="22:00",
        is_active=True,
    )
    template.template_tickets = [
        EventTemplateTicket(seat_type="Ringside", default_price=2000, default_capacity=50),
        EventTemplateTicket(seat_type="General", default_price=1000, default_capacity=300),
    ]
    db_session.add(template)
    await db_session.commit()
    return template.id
