"""
User model. A user is either a host (creates events) or an attendee
(buys tickets); both can own tickets, transactions and notifications.
"""

import enum

from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint

from app.db.base import Base, TimestampMixin


class UserRole(str, enum.Enum):
    HOST = "host"
    ATTENDEE = "attendee"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.ATTENDEE.value)
    wallet_address = Column(String(100), unique=True, nullable=True)
    bio = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('host', 'attendee')", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
