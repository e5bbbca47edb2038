"""Initial schema: catalogue, templates, customers, bookings.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "regions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "venues",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("region_id", sa.String(36), sa.ForeignKey("regions.id", ondelete="RESTRICT"), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "event_templates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("template_name", sa.String(255), nullable=False),
        sa.Column("venue_id", sa.String(36), sa.ForeignKey("venues.id", ondelete="RESTRICT"), nullable=True),
        sa.Column("region_id", sa.String(36), sa.ForeignKey("regions.id", ondelete="RESTRICT"), nullable=True),
        sa.Column("default_title_format", sa.String(255), nullable=True),
        sa.Column("default_description", sa.Text(), nullable=True),
        sa.Column("recurrence_type", sa.String(10), nullable=False, server_default=sa.text("'none'")),
        sa.Column("recurring_days_of_week", sa.JSON(), nullable=True),
        sa.Column("day_of_month", sa.JSON(), nullable=True),
        sa.Column("default_start_time", sa.String(5), nullable=True),
        sa.Column("default_end_time", sa.String(5), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "event_template_tickets",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "event_template_id",
            sa.String(36),
            sa.ForeignKey("event_templates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("seat_type", sa.String(100), nullable=False),
        sa.Column("default_price", sa.Float(), nullable=False),
        sa.Column("default_capacity", sa.Integer(), nullable=False),
        sa.Column("default_description", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_event_template_tickets_event_template_id", "event_template_tickets", ["event_template_id"])

    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("venue_id", sa.String(36), sa.ForeignKey("venues.id", ondelete="SET NULL"), nullable=True),
        sa.Column("region_id", sa.String(36), sa.ForeignKey("regions.id", ondelete="SET NULL"), nullable=True),
        sa.Column(
            "template_id",
            sa.String(36),
            sa.ForeignKey("event_templates.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'SCHEDULED'")),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
    )
    # Upcoming listings filter and sort on date
    op.create_index("ix_events_date", "events", ["date"])
    # Template expansion looks up (template, date, venue) before every insert
    op.create_index("ix_events_template_date_venue", "events", ["template_id", "date", "venue_id"])

    op.create_table(
        "event_tickets",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("seat_type", sa.String(100), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("discounted_price", sa.Float(), nullable=True),
        sa.Column("cost", sa.Float(), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sold_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint("capacity >= 0", name="check_ticket_capacity_non_negative"),
        sa.CheckConstraint("sold_count >= 0", name="check_ticket_sold_non_negative"),
    )
    op.create_index("ix_event_tickets_event_id", "event_tickets", ["event_id"])

    op.create_table(
        "customers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        *_timestamps(),
    )
    # UNIQUE EMAIL: the booking path upserts customers with
    # INSERT ... ON CONFLICT (email) DO UPDATE, which needs this index
    op.create_index("ix_customers_email", "customers", ["email"], unique=True)
    op.create_index("ix_customers_user_id", "customers", ["user_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "customer_id",
            sa.String(36),
            sa.ForeignKey("customers.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        # No FK: bookings outlive the events they were made for
        sa.Column("event_id", sa.String(36), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("payment_order_no", sa.String(100), nullable=True),
        sa.Column("payment_transaction_id", sa.String(100), nullable=True),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("payment_bank_code", sa.String(100), nullable=True),
        sa.Column("payment_bank_ref_code", sa.String(100), nullable=True),
        sa.Column("payment_date", sa.String(50), nullable=True),
        sa.Column("customer_name_snapshot", sa.String(255), nullable=True),
        sa.Column("customer_email_snapshot", sa.String(255), nullable=True),
        sa.Column("customer_phone_snapshot", sa.String(50), nullable=True),
        sa.Column("event_title_snapshot", sa.String(255), nullable=True),
        sa.Column("event_date_snapshot", sa.DateTime(timezone=True), nullable=True),
        sa.Column("venue_name_snapshot", sa.String(255), nullable=True),
        sa.Column("region_name_snapshot", sa.String(255), nullable=True),
        sa.Column("booking_items_json", postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "payment_status IN ('PENDING', 'COMPLETED', 'FAILED')",
            name="check_booking_payment_status",
        ),
        sa.CheckConstraint("total_amount >= 0", name="check_booking_total_non_negative"),
    )
    op.create_index("ix_bookings_customer_id", "bookings", ["customer_id"])
    op.create_index("ix_bookings_event_id", "bookings", ["event_id"])
    # Partner reservations and ChillPay notifications are matched on OrderNo
    op.create_index("ix_bookings_payment_order_no", "bookings", ["payment_order_no"])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("customers")
    op.drop_table("event_tickets")
    op.drop_table("events")
    op.drop_table("event_template_tickets")
    op.drop_table("event_templates")
    op.drop_table("venues")
    op.drop_table("regions")
