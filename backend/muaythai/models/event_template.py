"""
Recurring event templates, expanded into Event rows by the cron trigger.
"""

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from muaythai.db.base import Base, TimestampMixin, generate_id


class EventTemplate(Base, TimestampMixin):
    __tablename__ = "event_templates"

    id = Column(String(36), primary_key=True, default=generate_id)
    template_name = Column(String(255), nullable=False)
    venue_id = Column(String(36), ForeignKey("venues.id", ondelete="RESTRICT"), nullable=True)
    region_id = Column(String(36), ForeignKey("regions.id", ondelete="RESTRICT"), nullable=True)
    default_title_format = Column(String(255), nullable=True)
    default_description = Column(Text, nullable=True)

    recurrence_type = Column(String(10), nullable=False, default="none")  # none, weekly, monthly
    recurring_days_of_week = Column(JSON, nullable=True)  # 0 = Sunday
    day_of_month = Column(JSON, nullable=True)

    default_start_time = Column(String(5), nullable=True)  # HH:MM
    default_end_time = Column(String(5), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)

    venue = relationship("Venue", lazy="selectin")
    region = relationship("Region", lazy="selectin")
    template_tickets = relationship(
        "EventTemplateTicket",
        back_populates="template",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<EventTemplate(id={self.id}, name={self.template_name}, recurrence={self.recurrence_type})>"


class EventTemplateTicket(Base, TimestampMixin):
    __tablename__ = "event_template_tickets"

    id = Column(String(36), primary_key=True, default=generate_id)
    event_template_id = Column(
        String(36), ForeignKey("event_templates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    seat_type = Column(String(100), nullable=False)
    default_price = Column(Float, nullable=False)
    default_capacity = Column(Integer, nullable=False)
    default_description = Column(Text, nullable=True)

    template = relationship("EventTemplate", back_populates="template_tickets")
