"""
Customer model. Created lazily on first booking.

Key design decisions:
- Unique index on email: the booking workflow de-duplicates customers by
  email with insert-on-conflict, so concurrent first bookings cannot create
  two rows
- user_id optionally links an authenticated account; guests leave it null
"""

from sqlalchemy import Column, String

from muaythai.db.base import Base, TimestampMixin, generate_id


class Customer(Base, TimestampMixin):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, email={self.email})>"
