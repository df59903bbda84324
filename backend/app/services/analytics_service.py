"""
Host dashboard analytics, computed from the live tables.

Revenue counts completed purchase transactions only; refunded and failed
ones are excluded. Average ticket price is revenue per paid seat.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Event, EventStatus, Ticket, TicketStatus, Transaction, TransactionStatus, TransactionType
from app.schemas.analytics import (
    DailySales, DashboardAnalytics, EventAnalytics, EventsByStatus, HostAnalytics, TicketTypeBreakdown,
    TopEvent,
)
from app.services.event_service import get_event
from app.services.user_service import get_user

SALES_WINDOW_DAYS = 30
REVENUE_WINDOW_DAYS = 90
TOP_EVENTS_LIMIT = 5

_COMPLETED_PURCHASE = (
    Transaction.type == TransactionType.PURCHASE.value,
    Transaction.status == TransactionStatus.COMPLETED.value,
)


def _sell_through(sold: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(sold / total * 100, 2)


def _average_price(revenue: float, seats: int) -> float:
    if seats <= 0:
        return 0.0
    return round(revenue / seats, 8)


async def _purchase_totals(db: AsyncSession, event_ids: list[int]) -> dict[int, tuple[int, float]]:
    """(paid seats, revenue) per event."""
    if not event_ids:
        return {}
    result = await db.execute(
        select(
            Transaction.event_id,
            func.coalesce(func.sum(Ticket.quantity), 0),
            func.coalesce(func.sum(Transaction.amount), 0.0),
        )
        .outerjoin(Ticket, Ticket.id == Transaction.ticket_id)
        .where(Transaction.event_id.in_(event_ids), *_COMPLETED_PURCHASE)
        .group_by(Transaction.event_id)
    )
    return {event_id: (int(seats), float(revenue)) for event_id, seats, revenue in result.all()}


async def _daily_sales(db: AsyncSession, event_ids: list[int], days: int) -> list[DailySales]:
    if not event_ids:
        return []
    since = datetime.now(timezone.utc) - timedelta(days=days)
    day = func.date(Transaction.created_at)
    result = await db.execute(
        select(day, func.count(Transaction.id), func.coalesce(func.sum(Transaction.amount), 0.0))
        .where(
            Transaction.event_id.in_(event_ids),
            Transaction.created_at >= since,
            *_COMPLETED_PURCHASE,
        )
        .group_by(day)
        .order_by(day)
    )
    return [DailySales(day=d, count=count, revenue=float(revenue)) for d, count, revenue in result.all()]


async def get_event_analytics(db: AsyncSession, event_id: int) -> EventAnalytics:
    event = await get_event(db, event_id)

    seats, revenue = (await _purchase_totals(db, [event.id])).get(event.id, (0, 0.0))

    status_counts = dict(
        (await db.execute(
            select(Ticket.status, func.count())
            .where(Ticket.event_id == event.id)
            .group_by(Ticket.status)
        )).all()
    )

    breakdown_rows = await db.execute(
        select(Ticket.ticket_type_id, func.coalesce(func.sum(Ticket.price * Ticket.quantity), 0.0))
        .join(Transaction, Transaction.ticket_id == Ticket.id)
        .where(Ticket.event_id == event.id, *_COMPLETED_PURCHASE)
        .group_by(Ticket.ticket_type_id)
    )
    revenue_by_type = {type_id: float(total) for type_id, total in breakdown_rows.all()}

    return EventAnalytics(
        event_id=event.id,
        title=event.title,
        views=event.views,
        favorites=event.favorites,
        total_tickets=event.total_tickets,
        sold_tickets=event.sold_tickets,
        available_tickets=event.total_tickets - event.sold_tickets,
        sell_through=_sell_through(event.sold_tickets, event.total_tickets),
        revenue=revenue,
        average_ticket_price=_average_price(revenue, seats),
        checked_in=status_counts.get(TicketStatus.USED.value, 0),
        active_tickets=status_counts.get(TicketStatus.ACTIVE.value, 0),
        ticket_types=[
            TicketTypeBreakdown(
                ticket_type_id=t.id,
                name=t.name,
                price=t.price,
                quantity=t.quantity,
                sold=t.sold,
                revenue=revenue_by_type.get(t.id, 0.0),
            )
            for t in event.ticket_types
        ],
        sales_over_time=await _daily_sales(db, [event.id], SALES_WINDOW_DAYS),
    )


async def _events_by_status(db: AsyncSession, host_id: int, events: list[Event]) -> EventsByStatus:
    upcoming = await db.scalar(
        select(func.count())
        .select_from(Event)
        .where(
            Event.host_id == host_id,
            Event.status == EventStatus.PUBLISHED.value,
            Event.start_date > datetime.now(timezone.utc),
        )
    )
    return EventsByStatus(
        upcoming=upcoming or 0,
        ongoing=sum(1 for e in events if e.status == EventStatus.ONGOING.value),
        completed=sum(1 for e in events if e.status == EventStatus.COMPLETED.value),
        draft=sum(1 for e in events if e.status == EventStatus.DRAFT.value),
    )


async def get_host_analytics(db: AsyncSession, host_id: int) -> HostAnalytics:
    result = await db.execute(select(Event).where(Event.host_id == host_id))
    events = list(result.scalars().all())
    if not events:
        # Unknown hosts are a 404; hosts without events get zeroes
        await get_user(db, host_id)

    event_ids = [e.id for e in events]
    totals = await _purchase_totals(db, event_ids)
    seats = sum(s for s, _ in totals.values())
    revenue = round(sum(r for _, r in totals.values()), 8)

    ranked = sorted(
        events,
        key=lambda e: (-totals.get(e.id, (0, 0.0))[1], -e.sold_tickets, e.id),
    )

    return HostAnalytics(
        host_id=host_id,
        total_events=len(events),
        published_events=sum(1 for e in events if e.status == EventStatus.PUBLISHED.value),
        total_tickets=sum(e.total_tickets for e in events),
        sold_tickets=sum(e.sold_tickets for e in events),
        total_views=sum(e.views for e in events),
        revenue=revenue,
        average_ticket_price=_average_price(revenue, seats),
        events_by_status=await _events_by_status(db, host_id, events),
        top_events=[
            TopEvent(
                id=e.id,
                title=e.title,
                sold_tickets=e.sold_tickets,
                total_tickets=e.total_tickets,
                revenue=totals.get(e.id, (0, 0.0))[1],
            )
            for e in ranked[:TOP_EVENTS_LIMIT]
        ],
        revenue_over_time=await _daily_sales(db, event_ids, REVENUE_WINDOW_DAYS),
    )


async def get_dashboard_analytics(db: AsyncSession) -> DashboardAnalytics:
    """Platform-wide totals."""
    total_events = await db.scalar(select(func.count()).select_from(Event))
    total_tickets = await db.scalar(select(func.count()).select_from(Ticket))
    total_transactions = await db.scalar(
        select(func.count())
        .select_from(Transaction)
        .where(Transaction.status == TransactionStatus.COMPLETED.value)
    )
    total_revenue: Optional[float] = await db.scalar(
        select(func.coalesce(func.sum(Transaction.amount), 0.0)).where(*_COMPLETED_PURCHASE)
    )
    return DashboardAnalytics(
        total_events=total_events or 0,
        total_tickets=total_tickets or 0,
        total_transactions=total_transactions or 0,
        total_revenue=float(total_revenue or 0.0),
    )
