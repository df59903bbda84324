from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.common import ApiResponse
from app.schemas.notification import NotificationResponse, ReadAllResult
from app.services.notification_service import list_user_notifications, mark_all_as_read, mark_as_read

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/user/{user_id}", response_model=ApiResponse[list[NotificationResponse]])
async def list_user_notifications_endpoint(
    user_id: int,
    read: Optional[bool] = Query(None),
    type: Optional[Literal["event", "ticket", "transaction", "system"]] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    notifications = await list_user_notifications(db, user_id, read=read, type=type)
    return ApiResponse(data=[NotificationResponse.model_validate(n) for n in notifications])


@router.put("/user/{user_id}/read-all", response_model=ApiResponse[ReadAllResult])
async def mark_all_read_endpoint(user_id: int, db: AsyncSession = Depends(get_db)):
    modified = await mark_all_as_read(db, user_id)
    return ApiResponse(data=ReadAllResult(modified=modified))


@router.put("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
async def mark_read_endpoint(notification_id: int, db: AsyncSession = Depends(get_db)):
    notification = await mark_as_read(db, notification_id)
    return ApiResponse(data=NotificationResponse.model_validate(notification))
