"""
Event service: creation with nested ticket types, filtered listing,
single-event reads (with the view-count side effect) and the aggregate
refresh used by every path that changes a ticket type's `sold` counter.
"""

import math
from typing import Optional

from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.errors import NotFound, ValidationError
from app.core.logging import get_logger
from app.models import Event, TicketType, User, UserRole
from app.schemas.event import EventCreate

logger = get_logger(__name__)
settings = get_settings()


async def create_event(db: AsyncSession, event_data: EventCreate) -> Event:
    """Create an event and its ticket types; aggregates start at the catalog totals."""
    host = await db.get(User, event_data.host_id)
    if host is None:
        raise NotFound(f"Host {event_data.host_id} not found")
    if host.role != UserRole.HOST.value:
        raise ValidationError("Only hosts can create events")

    ticket_types = [
        TicketType(
            name=t.name,
            price=t.price,
            quantity=t.quantity,
            sold=0,
            description=t.description,
            benefits=list(t.benefits),
        )
        for t in event_data.ticket_types
    ]
    event = Event(
        host_id=host.id,
        title=event_data.title,
        description=event_data.description,
        category=event_data.category,
        venue=event_data.venue,
        address=event_data.address,
        city=event_data.city,
        country=event_data.country,
        latitude=event_data.latitude,
        longitude=event_data.longitude,
        start_date=event_data.start_date,
        end_date=event_data.end_date,
        image=event_data.image,
        status=event_data.status,
        network=event_data.network or settings.DEFAULT_NETWORK,
        contract_address=event_data.contract_address,
        total_tickets=sum(t.quantity for t in ticket_types),
        sold_tickets=0,
        views=0,
        favorites=0,
        ticket_types=ticket_types,
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info(
        "event_created",
        event_id=event.id,
        host_id=host.id,
        title=event.title,
        ticket_types=len(ticket_types),
        total_tickets=event.total_tickets,
    )
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID, ticket types included."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()

    if not event:
        raise NotFound(f"Event {event_id} not found")
    return event


async def view_event(db: AsyncSession, event_id: int) -> Event:
    """
    Read an event for display and count the view.

    The counter is bumped with `views = views + 1` in SQL so concurrent
    readers never lose increments; no ordering relative to other reads.
    """
    result = await db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(views=Event.views + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFound(f"Event {event_id} not found")

    event = await get_event(db, event_id)
    await db.refresh(event)
    return event


async def refresh_event_totals(db: AsyncSession, event_id: int) -> None:
    """Recompute `total_tickets` / `sold_tickets` from the event's ticket types."""
    quantity_sum = (
        select(func.coalesce(func.sum(TicketType.quantity), 0))
        .where(TicketType.event_id == event_id)
        .scalar_subquery()
    )
    sold_sum = (
        select(func.coalesce(func.sum(TicketType.sold), 0))
        .where(TicketType.event_id == event_id)
        .scalar_subquery()
    )
    await db.execute(
        update(Event)
        .where(Event.id == event_id)
        .values(total_tickets=quantity_sum, sold_tickets=sold_sum)
        .execution_options(synchronize_session=False)
    )


async def list_events(
    db: AsyncSession,
    page: int = 1,
    limit: int = 20,
    category: Optional[str] = None,
    city: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> tuple[list[Event], int, int]:
    """
    List events with filters and pagination, soonest first.
    Returns (events, total, pages).
    """
    query = select(Event)

    if category:
        query = query.where(Event.category == category)
    if city:
        query = query.where(Event.city == city)
    if status:
        query = query.where(Event.status == status)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Event.title.ilike(pattern), Event.description.ilike(pattern)))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    events_query = (
        query
        .order_by(Event.start_date.asc(), Event.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total, math.ceil(total / limit) if total else 0


async def list_host_events(db: AsyncSession, host_id: int) -> list[Event]:
    result = await db.execute(
        select(Event)
        .where(Event.host_id == host_id)
        .order_by(Event.created_at.desc(), Event.id.desc())
    )
    return list(result.scalars().all())
