"""
Tests for customer resolution (find-or-create by email).
"""

import pytest
from sqlalchemy import func, select

from muaythai.models.customer import Customer
from muaythai.services.customer_service import resolve_customer


@pytest.mark.asyncio
async def test_new_email_creates_customer(db_session):
    customer_id = await resolve_customer(db_session, "jane@example.com", "Jane Doe", "0812345678")
    await db_session.commit()

    customer = await db_session.get(Customer, customer_id)
    assert customer.email == "jane@example.com"
    assert customer.name == "Jane Doe"
    assert customer.phone == "0812345678"


@pytest.mark.asyncio
async def test_same_email_reuses_row_and_refreshes_name(db_session):
    """Repeated resolution keeps one row; the latest name wins."""
    first_id = await resolve_customer(db_session, "jane@example.com", "Jane Doe", "0812345678")
    second_id = await resolve_customer(db_session, "jane@example.com", "Jane D. Smith")
    await db_session.commit()

    assert first_id == second_id
    count = await db_session.scalar(select(func.count()).select_from(Customer))
    assert count == 1

    row = (await db_session.execute(
        select(Customer.name, Customer.phone).where(Customer.id == first_id)
    )).one()
    assert row.name == "Jane D. Smith"
    # Empty phone on the second call keeps the stored one
    assert row.phone == "0812345678"


@pytest.mark.asyncio
async def test_blank_phone_preserves_existing(db_session):
    customer_id = await resolve_customer(db_session, "sam@example.com", "Sam", "0899999999")
    await resolve_customer(db_session, "sam@example.com", "Sam", "   ")
    await db_session.commit()

    phone = await db_session.scalar(select(Customer.phone).where(Customer.id == customer_id))
    assert phone == "0899999999"


@pytest.mark.asyncio
async def test_new_phone_replaces_existing(db_session):
    customer_id = await resolve_customer(db_session, "sam@example.com", "Sam", "0899999999")
    await resolve_customer(db_session, "sam@example.com", "Sam", "0800000000")
    await db_session.commit()

    phone = await db_session.scalar(select(Customer.phone).where(Customer.id == customer_id))
    assert phone == "0800000000"


@pytest.mark.asyncio
async def test_different_emails_get_different_customers(db_session):
    jane = await resolve_customer(db_session, "jane@example.com", "Jane")
    sam = await resolve_customer(db_session, "sam@example.com", "Sam")
    await db_session.commit()

    assert jane != sam
