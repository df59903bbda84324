"""
Analytics endpoints for the host dashboard.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.analytics import DashboardAnalytics, EventAnalytics, HostAnalytics
from app.schemas.common import ApiResponse
from app.services.analytics_service import get_dashboard_analytics, get_event_analytics, get_host_analytics

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/event/{event_id}", response_model=ApiResponse[EventAnalytics])
async def event_analytics_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    return ApiResponse(data=await get_event_analytics(db, event_id))


@router.get("/host/{host_id}", response_model=ApiResponse[HostAnalytics])
async def host_analytics_endpoint(host_id: int, db: AsyncSession = Depends(get_db)):
    return ApiResponse(data=await get_host_analytics(db, host_id))


@router.get("/dashboard", response_model=ApiResponse[DashboardAnalytics])
async def dashboard_analytics_endpoint(db: AsyncSession = Depends(get_db)):
    """Platform totals across every host."""
    return ApiResponse(data=await get_dashboard_analytics(db))
