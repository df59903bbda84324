"""
Ticket model: one issued ticket instance.

The ticket references its TicketType by id and keeps a snapshot of the
type's name and price as they were at purchase time, so later edits to
the catalog never rewrite history.

Lifecycle: active -> used (check-in), active -> transferred, active -> cancelled.
All three are terminal.
"""

import enum

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Index, CheckConstraint, func
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin


class TicketStatus(str, enum.Enum):
    ACTIVE = "active"
    USED = "used"
    TRANSFERRED = "transferred"
    CANCELLED = "cancelled"


class Ticket(Base, TimestampMixin):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    ticket_type_id = Column(Integer, ForeignKey("ticket_types.id"), nullable=False)
    ticket_type_name = Column(String(100), nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    qr_code = Column(String(128), unique=True, nullable=False)
    token_id = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default=TicketStatus.ACTIVE.value)
    purchase_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    used_date = Column(DateTime(timezone=True), nullable=True)

    transaction_hash = Column(String(128), nullable=False)
    contract_address = Column(String(100), nullable=True)
    network = Column(String(50), nullable=False, default="sepolia")

    # Set for tickets issued by a transfer
    transferred_from_id = Column(Integer, ForeignKey("tickets.id"), nullable=True)

    event = relationship("Event", lazy="selectin")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_ticket_quantity_positive"),
        CheckConstraint(
            "status IN ('active', 'used', 'transferred', 'cancelled')",
            name="check_ticket_status",
        ),
        Index("ix_tickets_owner_status", "owner_id", "status"),
        Index("ix_tickets_event_status", "event_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, event={self.event_id}, owner={self.owner_id}, status={self.status})>"
