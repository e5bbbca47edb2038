"""
Tests for the snapshot builder.
"""

from datetime import datetime, timedelta, timezone

import pytest

from muaythai.core.config import TicketResolutionPolicy
from muaythai.core.errors import NotFoundError, UnresolvedTicketError
from muaythai.models.event import Event, EventTicket
from muaythai.schemas.booking import TicketSelection
from muaythai.services.snapshot_service import NOT_AVAILABLE, build_snapshot


@pytest.mark.asyncio
async def test_snapshot_copies_catalogue_data(db_session, fight_night):
    snapshot = await build_snapshot(
        db_session,
        fight_night.event_id,
        [TicketSelection(id=fight_night.ringside_id, quantity=2)],
    )

    assert snapshot.event_title == "Fight Night"
    assert snapshot.venue_name == "Lumpinee"
    assert snapshot.region_name == "Bangkok"
    assert snapshot.event_date is not None
    assert snapshot.booking_items == [
        {"seatType": "Ringside", "quantity": 2, "pricePaid": 800, "costAtBooking": None},
    ]


@pytest.mark.asyncio
async def test_price_paid_falls_back_to_list_price(db_session, fight_night):
    """No discount: pricePaid is the list price and cost is carried over."""
    snapshot = await build_snapshot(
        db_session,
        fight_night.event_id,
        [TicketSelection(id=fight_night.vip_id, quantity=1)],
    )
    assert snapshot.booking_items == [
        {"seatType": "VIP", "quantity": 1, "pricePaid": 2500, "costAtBooking": 1200},
    ]


@pytest.mark.asyncio
async def test_missing_venue_and_region_default_to_na(db_session, orphan_event):
    snapshot = await build_snapshot(db_session, orphan_event, [])
    assert snapshot.venue_name == NOT_AVAILABLE
    assert snapshot.region_name == NOT_AVAILABLE
    assert snapshot.items_json() is None


@pytest.mark.asyncio
async def test_unknown_event_raises_not_found(db_session):
    with pytest.raises(NotFoundError):
        await build_snapshot(db_session, "no-such-event", [])


@pytest.mark.asyncio
async def test_soft_deleted_event_is_not_found(db_session, fight_night):
    event = await db_session.get(Event, fight_night.event_id)
    event.is_deleted = True
    await db_session.commit()

    with pytest.raises(NotFoundError):
        await build_snapshot(db_session, fight_night.event_id, [])


@pytest.mark.asyncio
async def test_unresolved_ticket_skipped_by_default(db_session, fight_night):
    snapshot = await build_snapshot(
        db_session,
        fight_night.event_id,
        [
            TicketSelection(id="missing-ticket", quantity=1),
            TicketSelection(id=fight_night.vip_id, quantity=1),
        ],
    )
    assert [item["seatType"] for item in snapshot.booking_items] == ["VIP"]
    assert snapshot.unresolved_ticket_ids == ("missing-ticket",)


@pytest.mark.asyncio
async def test_all_tickets_unresolved_yields_null_items(db_session, fight_night):
    snapshot = await build_snapshot(
        db_session, fight_night.event_id, [TicketSelection(id="missing-ticket", quantity=1)]
    )
    assert snapshot.booking_items == []
    assert snapshot.items_json() is None


@pytest.mark.asyncio
async def test_fail_on_unresolved_policy_raises(db_session, fight_night):
    with pytest.raises(UnresolvedTicketError) as exc_info:
        await build_snapshot(
            db_session,
            fight_night.event_id,
            [
                TicketSelection(id=fight_night.ringside_id, quantity=1),
                TicketSelection(id="missing-ticket", quantity=1),
            ],
            TicketResolutionPolicy.FAIL_ON_UNRESOLVED,
        )
    assert exc_info.value.status_code == 400
    assert exc_info.value.details == {"unresolvedTicketIds": ["missing-ticket"]}


@pytest.mark.asyncio
async def test_ticket_of_another_event_is_unresolved(db_session, fight_night):
    other_date = datetime.now(timezone.utc) + timedelta(days=30)
    other_card = Event(title="Other Card", date=other_date, start_time=other_date)
    foreign = EventTicket(seat_type="Other Card Ringside", price=5000, capacity=10, event=other_card)
    db_session.add_all([other_card, foreign])
    await db_session.commit()
    foreign_id = foreign.id

    snapshot = await build_snapshot(
        db_session, fight_night.event_id, [TicketSelection(id=foreign_id, quantity=1)]
    )
    assert snapshot.booking_items == []
    assert snapshot.unresolved_ticket_ids == (foreign_id,)

    with pytest.raises(UnresolvedTicketError) as exc_info:
        await build_snapshot(
            db_session,
            fight_night.event_id,
            [TicketSelection(id=foreign_id, quantity=1)],
            TicketResolutionPolicy.FAIL_ON_UNRESOLVED,
        )
    assert exc_info.value.details == {"unresolvedTicketIds": [foreign_id]}
