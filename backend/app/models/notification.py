"""
Notification model. Fire-and-forget; `read` only ever flips false -> true.
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Index, CheckConstraint, JSON

from app.db.base import Base, TimestampMixin


class NotificationType(str, enum.Enum):
    EVENT = "event"
    TICKET = "ticket"
    TRANSACTION = "transaction"
    SYSTEM = "system"


class Notification(Base, TimestampMixin):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(String(20), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(String(1000), nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    data = Column(JSON, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "type IN ('event', 'ticket', 'transaction', 'system')",
            name="check_notification_type",
        ),
        Index("ix_notifications_user_read_created", "user_id", "read", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user={self.user_id}, read={self.read})>"
