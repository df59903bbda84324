"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, model_validator

from app.schemas.common import CamelModel


class TicketTypeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=0, le=1_000_000)
    description: Optional[str] = Field(None, max_length=1000)
    benefits: list[str] = Field(default_factory=list)


class EventCreate(CamelModel):
    host_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=5000)
    category: str = Field(..., min_length=1, max_length=50)
    venue: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    start_date: datetime
    end_date: datetime
    image: Optional[str] = Field(None, max_length=500)
    status: Literal["draft", "published"] = "draft"
    network: Optional[str] = Field(None, max_length=50)
    contract_address: Optional[str] = Field(None, max_length=100)
    ticket_types: list[TicketTypeCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_dates_and_names(self) -> "EventCreate":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        names = [t.name for t in self.ticket_types]
        if len(names) != len(set(names)):
            raise ValueError("Ticket type names must be unique within an event")
        return self


class TicketTypeResponse(CamelModel):
    id: int
    name: str
    price: float
    quantity: int
    sold: int
    available: int
    description: Optional[str]
    benefits: list[str]


class EventResponse(CamelModel):
    id: int
    host_id: int
    title: str
    description: str
    category: str
    venue: str
    address: str
    city: str
    country: str
    latitude: Optional[float]
    longitude: Optional[float]
    start_date: datetime
    end_date: datetime
    image: Optional[str]
    status: str
    network: str
    contract_address: Optional[str]
    total_tickets: int
    sold_tickets: int
    views: int
    favorites: int
    ticket_types: list[TicketTypeResponse]
    created_at: datetime


class EventListResponse(CamelModel):
    events: list[EventResponse]
    total: int
    page: int
    limit: int
    pages: int
    cached: bool = False
