"""
Event catalogue: regions, venues, events and their ticket types.

Key design decisions:
- Events keep nullable venue/region references (SET NULL on delete) so a
  removed venue never takes its events with it
- `is_deleted` soft-deletes an event; the booking core treats a deleted
  event as missing
- Ticket prices are floats, mirroring the catalogue the admin screens edit
- `sold_count` is carried for the admin screens; the booking core does
  not maintain it
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from muaythai.db.base import Base, TimestampMixin, generate_id


class Region(Base, TimestampMixin):
    __tablename__ = "regions"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Region(id={self.id}, name={self.name})>"


class Venue(Base, TimestampMixin):
    __tablename__ = "venues"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=False)
    capacity = Column(Integer, nullable=True)
    region_id = Column(String(36), ForeignKey("regions.id", ondelete="RESTRICT"), nullable=False)

    region = relationship("Region")

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name={self.name})>"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)
    venue_id = Column(String(36), ForeignKey("venues.id", ondelete="SET NULL"), nullable=True)
    region_id = Column(String(36), ForeignKey("regions.id", ondelete="SET NULL"), nullable=True)
    template_id = Column(
        String(36), ForeignKey("event_templates.id", ondelete="SET NULL"), nullable=True
    )
    status = Column(String(20), nullable=False, default="SCHEDULED")
    is_deleted = Column(Boolean, nullable=False, default=False)

    venue = relationship("Venue")
    region = relationship("Region")
    tickets = relationship(
        "EventTicket",
        back_populates="event",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="EventTicket.price",
    )

    __table_args__ = (
        Index("ix_events_date", "date"),
        # Template expansion checks (template, date, venue) before inserting
        Index("ix_events_template_date_venue", "template_id", "date", "venue_id"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, date={self.date})>"


class EventTicket(Base, TimestampMixin):
    __tablename__ = "event_tickets"

    id = Column(String(36), primary_key=True, default=generate_id)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    seat_type = Column(String(100), nullable=False)  # e.g. VIP, Ringside, General
    price = Column(Float, nullable=False)
    discounted_price = Column(Float, nullable=True)
    cost = Column(Float, nullable=True)
    capacity = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    sold_count = Column(Integer, nullable=False, default=0)

    event = relationship("Event", back_populates="tickets")

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="check_ticket_capacity_non_negative"),
        CheckConstraint("sold_count >= 0", name="check_ticket_sold_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<EventTicket(id={self.id}, seat_type={self.seat_type}, price={self.price})>"
