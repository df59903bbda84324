"""
Notification reads and the one-way read flag.
"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.core.logging import get_logger
from app.models import Notification

logger = get_logger(__name__)


async def list_user_notifications(
    db: AsyncSession,
    user_id: int,
    read: Optional[bool] = None,
    type: Optional[str] = None,
) -> list[Notification]:
    query = select(Notification).where(Notification.user_id == user_id)
    if read is not None:
        query = query.where(Notification.read == read)
    if type:
        query = query.where(Notification.type == type)
    result = await db.execute(query.order_by(Notification.created_at.desc(), Notification.id.desc()))
    return list(result.scalars().all())


async def mark_as_read(db: AsyncSession, notification_id: int) -> Notification:
    """Set `read`; already-read notifications are returned unchanged."""
    notification = await db.get(Notification, notification_id)
    if notification is None:
        raise NotFound(f"Notification {notification_id} not found")

    if not notification.read:
        notification.read = True
        await db.flush()
        await db.refresh(notification)
    return notification


async def mark_all_as_read(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True)
        .execution_options(synchronize_session=False)
    )
    logger.info("notifications_marked_read", user_id=user_id, modified=result.rowcount)
    return result.rowcount
