"""
Pydantic schemas for host dashboard analytics.
"""

from datetime import date

from app.schemas.common import CamelModel


class TicketTypeBreakdown(CamelModel):
    ticket_type_id: int
    name: str
    price: float
    quantity: int
    sold: int
    revenue: float


class DailySales(CamelModel):
    day: date
    count: int  # completed purchase transactions
    revenue: float


class EventAnalytics(CamelModel):
    event_id: int
    title: str
    views: int
    favorites: int
    total_tickets: int
    sold_tickets: int
    available_tickets: int
    sell_through: float  # percentage, 0-100
    revenue: float
    average_ticket_price: float
    checked_in: int
    active_tickets: int
    ticket_types: list[TicketTypeBreakdown]
    sales_over_time: list[DailySales]


class EventsByStatus(CamelModel):
    upcoming: int
    ongoing: int
    completed: int
    draft: int


class TopEvent(CamelModel):
    id: int
    title: str
    sold_tickets: int
    total_tickets: int
    revenue: float


class HostAnalytics(CamelModel):
    host_id: int
    total_events: int
    published_events: int
    total_tickets: int
    sold_tickets: int
    total_views: int
    revenue: float
    average_ticket_price: float
    events_by_status: EventsByStatus
    top_events: list[TopEvent]
    revenue_over_time: list[DailySales]


class DashboardAnalytics(CamelModel):
    total_events: int
    total_tickets: int
    total_transactions: int
    total_revenue: float
