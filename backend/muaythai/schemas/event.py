"""
Pydantic schemas for event read endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class EventTicketResponse(BaseModel):
    id: str
    seat_type: str
    price: float
    discounted_price: Optional[float] = None
    capacity: int
    sold_count: int
    description: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class EventResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    date: datetime
    start_time: datetime
    end_time: Optional[datetime] = None
    venue_id: Optional[str] = None
    region_id: Optional[str] = None
    status: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class EventDetailResponse(EventResponse):
    venue_name: Optional[str] = None
    region_name: Optional[str] = None
    tickets: list[EventTicketResponse] = []


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False
