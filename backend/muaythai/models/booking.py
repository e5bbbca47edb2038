"""
Booking model: a customer's ticket purchase tracked through payment.

Key design decisions:
- event_id is NOT a foreign key so bookings survive event deletion
- *_snapshot columns and booking_items_json are copied at creation time
  and never re-derived from live catalogue rows
- payment_status moves PENDING -> COMPLETED | FAILED exactly once; the
  reconciler only updates rows still in PENDING
- payment_order_no correlates partner reservations and ChillPay OrderNo
"""

from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, String
from sqlalchemy.orm import relationship

from muaythai.db.base import Base, JSONType, TimestampMixin, generate_id


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=generate_id)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    event_id = Column(String(36), nullable=False, index=True)
    total_amount = Column(Float, nullable=False)

    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_order_no = Column(String(100), nullable=True, index=True)
    payment_transaction_id = Column(String(100), nullable=True)
    payment_method = Column(String(50), nullable=True)
    payment_bank_code = Column(String(100), nullable=True)
    payment_bank_ref_code = Column(String(100), nullable=True)
    payment_date = Column(String(50), nullable=True)  # as reported by the gateway

    # Snapshot fields
    customer_name_snapshot = Column(String(255), nullable=True)
    customer_email_snapshot = Column(String(255), nullable=True)
    customer_phone_snapshot = Column(String(50), nullable=True)
    event_title_snapshot = Column(String(255), nullable=True)
    event_date_snapshot = Column(DateTime(timezone=True), nullable=True)
    venue_name_snapshot = Column(String(255), nullable=True)
    region_name_snapshot = Column(String(255), nullable=True)
    booking_items_json = Column(JSONType, nullable=True)

    customer = relationship("Customer")

    __table_args__ = (
        CheckConstraint(
            "payment_status IN ('PENDING', 'COMPLETED', 'FAILED')",
            name="check_booking_payment_status",
        ),
        CheckConstraint("total_amount >= 0", name="check_booking_total_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, event={self.event_id}, status={self.payment_status})>"
