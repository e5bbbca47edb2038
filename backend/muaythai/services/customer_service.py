"""
Customer resolution for the booking workflow.

De-duplication strategy
=======================

The email address is the customer's natural key. Instead of the
read-then-insert sequence (which lets two simultaneous first bookings for
the same email both insert), resolution is a single statement:

    INSERT INTO customers (...) VALUES (...)
    ON CONFLICT (email) DO UPDATE
        SET name = excluded.name,
            phone = COALESCE(excluded.phone, customers.phone)
    RETURNING id

The unique index on customers.email makes the database arbitrate the race.
The latest name always wins; an empty incoming phone keeps the stored one.
"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from muaythai.db.base import generate_id, utcnow
from muaythai.models.customer import Customer
from muaythai.core.logging import get_logger

logger = get_logger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _normalize_phone(phone: Optional[str]) -> Optional[str]:
    if phone is None:
        return None
    phone = phone.strip()
    return phone or None


async def resolve_customer(
    db: AsyncSession,
    email: str,
    name: str,
    phone: Optional[str] = None,
) -> str:
    """
    Find-or-create the customer for `email` and return its id.
    At most one insert or one update per call.
    """
    dialect = db.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise NotImplementedError(f"Customer upsert is not supported on {dialect}")

    now = utcnow()
    stmt = insert(Customer).values(
        id=generate_id(),
        name=name,
        email=email,
        phone=_normalize_phone(phone),
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Customer.email],
        set_={
            "name": stmt.excluded.name,
            "phone": func.coalesce(stmt.excluded.phone, Customer.phone),
            "updated_at": now,
        },
    ).returning(Customer.id)

    result = await db.execute(stmt)
    customer_id = result.scalar_one()

    logger.info("customer_resolved", customer_id=customer_id, email=email)
    return customer_id
