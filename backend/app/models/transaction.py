"""
Transaction model: audit record of a payment, refund or transfer.

`transaction_hash` is unique; the purchase path relies on that constraint
for idempotency. Status funnel: pending -> completed | failed,
completed -> refunded.
"""

import enum

from sqlalchemy import Column, Integer, String, Float, ForeignKey, Index, CheckConstraint

from app.db.base import Base, TimestampMixin


class TransactionType(str, enum.Enum):
    PURCHASE = "purchase"
    REFUND = "refund"
    TRANSFER = "transfer"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    CRYPTO = "crypto"
    CARD = "card"
    OTHER = "other"


# Allowed status moves; anything absent is rejected
STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    TransactionStatus.PENDING.value: frozenset(
        {TransactionStatus.COMPLETED.value, TransactionStatus.FAILED.value}
    ),
    TransactionStatus.COMPLETED.value: frozenset({TransactionStatus.REFUNDED.value}),
    TransactionStatus.FAILED.value: frozenset(),
    TransactionStatus.REFUNDED.value: frozenset(),
}


class Transaction(Base, TimestampMixin):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id"), nullable=True)
    type = Column(String(20), nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String(10), nullable=False, default="ETH")
    status = Column(String(20), nullable=False, default=TransactionStatus.PENDING.value)
    payment_method = Column(String(20), nullable=False, default=PaymentMethod.CRYPTO.value)

    transaction_hash = Column(String(128), unique=True, nullable=False)
    block_number = Column(Integer, nullable=True)
    network = Column(String(50), nullable=False, default="sepolia")
    wallet_address = Column(String(100), nullable=True)
    error_message = Column(String(1000), nullable=True)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="check_transaction_amount_non_negative"),
        CheckConstraint("type IN ('purchase', 'refund', 'transfer')", name="check_transaction_type"),
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed', 'refunded')",
            name="check_transaction_status",
        ),
        CheckConstraint(
            "payment_method IN ('crypto', 'card', 'other')",
            name="check_transaction_payment_method",
        ),
        Index("ix_transactions_user_status", "user_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, type={self.type}, status={self.status})>"
