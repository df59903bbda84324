"""
Event endpoints with Redis caching on list operations.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.common import ApiResponse
from app.schemas.event import EventCreate, EventResponse, EventListResponse
from app.services.event_service import create_event, view_event, list_events, list_host_events
from app.services.cache_service import (
    get_cached_events, set_cached_events, invalidate_event_cache, make_event_list_key,
)
from app.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.post("", response_model=ApiResponse[EventResponse], status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create an event with its ticket types."""
    event = await create_event(db, event_data)
    await db.commit()
    await invalidate_event_cache()
    return ApiResponse(data=EventResponse.model_validate(event), message="Event created")


@router.get("", response_model=ApiResponse[EventListResponse])
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """
    List events with filters and pagination.
    Results are cached in Redis; any sale or new event invalidates the cache.
    """
    key = make_event_list_key(
        page=page, limit=limit, category=category, city=city, status=status, search=search,
    )
    cached = await get_cached_events(key)
    if cached:
        logger.info("events_list_cache_hit", page=page)
        cached["cached"] = True
        return ApiResponse(data=EventListResponse.model_validate(cached))

    events, total, pages = await list_events(
        db, page, limit, category=category, city=city, status=status, search=search,
    )
    response = EventListResponse(
        events=[EventResponse.model_validate(e) for e in events],
        total=total,
        page=page,
        limit=limit,
        pages=pages,
        cached=False,
    )
    await set_cached_events(key, response.model_dump(mode="json", by_alias=True))
    return ApiResponse(data=response)


@router.get("/host/{host_id}", response_model=ApiResponse[list[EventResponse]])
async def list_host_events_endpoint(host_id: int, db: AsyncSession = Depends(get_db)):
    events = await list_host_events(db, host_id)
    return ApiResponse(data=[EventResponse.model_validate(e) for e in events])


@router.get("/{event_id}", response_model=ApiResponse[EventResponse])
async def get_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single event with live ticket counts. Counts a view; never cached."""
    event = await view_event(db, event_id)
    return ApiResponse(data=EventResponse.model_validate(event))
