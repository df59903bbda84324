"""
Event and TicketType models.

Key design decisions:
- `total_tickets` / `sold_tickets` on Event are denormalized aggregates of
  its ticket types. They are recomputed in SQL in the same transaction as
  every change to a ticket type's `sold` counter, never incremented blindly.
- `sold <= quantity` is enforced by a CHECK constraint as the last line of
  defence; the purchase path itself uses a conditional UPDATE.
- Ticket type names are unique per event so purchase-by-name is unambiguous.
- `views` is advisory analytics data, bumped with an atomic UPDATE on read.
"""

import enum

from sqlalchemy import (
    Column, Integer, String, Float, DateTime, ForeignKey, Index, CheckConstraint,
    UniqueConstraint, JSON,
)
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin


class EventStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    host_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(String(5000), nullable=False)
    category = Column(String(50), nullable=False)
    venue = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    country = Column(String(100), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    image = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=EventStatus.DRAFT.value)

    # On-chain deployment info, recorded as reported by the client
    network = Column(String(50), nullable=False, default="sepolia")
    contract_address = Column(String(100), nullable=True)

    total_tickets = Column(Integer, nullable=False, default=0)
    sold_tickets = Column(Integer, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)
    favorites = Column(Integer, nullable=False, default=0)

    ticket_types = relationship(
        "TicketType",
        back_populates="event",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="TicketType.id",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'published', 'ongoing', 'completed', 'cancelled')",
            name="check_event_status",
        ),
        CheckConstraint("sold_tickets <= total_tickets", name="check_event_sold_lte_total"),
        Index("ix_events_start_date", "start_date"),
        Index("ix_events_city_category", "city", "category"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, sold={self.sold_tickets}/{self.total_tickets})>"


class TicketType(Base):
    __tablename__ = "ticket_types"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False)
    sold = Column(Integer, nullable=False, default=0)
    description = Column(String(1000), nullable=True)
    benefits = Column(JSON, nullable=False, default=list)

    event = relationship("Event", back_populates="ticket_types")

    __table_args__ = (
        UniqueConstraint("event_id", "name", name="uq_ticket_type_event_name"),
        CheckConstraint("price >= 0", name="check_ticket_type_price_non_negative"),
        CheckConstraint("quantity >= 0", name="check_ticket_type_quantity_non_negative"),
        CheckConstraint("sold >= 0", name="check_ticket_type_sold_non_negative"),
        CheckConstraint("sold <= quantity", name="check_ticket_type_sold_lte_quantity"),
    )

    @property
    def available(self) -> int:
        return self.quantity - self.sold

    def __repr__(self) -> str:
        return f"<TicketType(id={self.id}, name={self.name}, sold={self.sold}/{self.quantity})>"
