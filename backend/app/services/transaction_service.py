"""
Transaction records: reads and the status funnel.

    pending --> completed --> refunded
        \\
         --> failed

Moves are applied with a conditional UPDATE on the current status, so
two concurrent updates cannot both take the same edge.

Refunding a purchase cancels the ticket it paid for (or the ticket it was
transferred into) and releases the seats, exactly like a ticket cancel.
A purchase whose ticket was already checked in cannot be refunded.
"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidState, InvalidTransition, NotFound
from app.core.logging import get_logger
from app.models import (
    Notification, NotificationType, Ticket, TicketStatus, Transaction, TransactionStatus, TransactionType,
)
from app.models.transaction import STATUS_TRANSITIONS
from app.schemas.transaction import TransactionStatusUpdate
from app.services.ticket_service import current_ticket, get_ticket, release_ticket

logger = get_logger(__name__)


async def get_transaction(db: AsyncSession, transaction_id: int) -> Transaction:
    transaction = await db.get(Transaction, transaction_id)
    if transaction is None:
        raise NotFound(f"Transaction {transaction_id} not found")
    return transaction


async def list_user_transactions(
    db: AsyncSession,
    user_id: int,
    type: Optional[str] = None,
    status: Optional[str] = None,
) -> list[Transaction]:
    query = select(Transaction).where(Transaction.user_id == user_id)
    if type:
        query = query.where(Transaction.type == type)
    if status:
        query = query.where(Transaction.status == status)
    result = await db.execute(query.order_by(Transaction.created_at.desc(), Transaction.id.desc()))
    return list(result.scalars().all())


async def list_event_transactions(db: AsyncSession, event_id: int) -> list[Transaction]:
    result = await db.execute(
        select(Transaction)
        .where(Transaction.event_id == event_id)
        .order_by(Transaction.id.asc())
    )
    return list(result.scalars().all())


async def update_transaction_status(
    db: AsyncSession,
    transaction_id: int,
    data: TransactionStatusUpdate,
) -> Transaction:
    """
    Move a transaction along the funnel.

    Raises:
        NotFound: unknown transaction.
        InvalidTransition: the move is not an edge of the funnel, or the
            transaction changed status concurrently.
        InvalidState: refunding a purchase whose ticket is no longer active.
    """
    transaction = await get_transaction(db, transaction_id)
    current = transaction.status

    if data.status not in STATUS_TRANSITIONS.get(current, frozenset()):
        logger.warning(
            "transaction_transition_rejected",
            transaction_id=transaction_id,
            current=current,
            requested=data.status,
        )
        raise InvalidTransition(f"Cannot change transaction status from {current} to {data.status}")

    refunded_ticket: Optional[Ticket] = None
    if (
        data.status == TransactionStatus.REFUNDED.value
        and transaction.type == TransactionType.PURCHASE.value
        and transaction.ticket_id is not None
    ):
        refunded_ticket = await current_ticket(db, await get_ticket(db, transaction.ticket_id))
        if refunded_ticket.status != TicketStatus.ACTIVE.value:
            raise InvalidState(
                f"Ticket {refunded_ticket.id} is {refunded_ticket.status}; only unused tickets can be refunded"
            )

    values: dict = {"status": data.status}
    if data.status == TransactionStatus.FAILED.value and data.error_message:
        values["error_message"] = data.error_message
    if data.block_number is not None:
        values["block_number"] = data.block_number

    result = await db.execute(
        update(Transaction)
        .where(Transaction.id == transaction_id, Transaction.status == current)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise InvalidTransition("Transaction status changed concurrently, please retry")

    if refunded_ticket is not None:
        await release_ticket(db, refunded_ticket)

    db.add(Notification(
        user_id=transaction.user_id,
        type=NotificationType.TRANSACTION.value,
        title=f"Transaction {data.status}",
        message=f"Your {transaction.type} transaction is now {data.status}",
        read=False,
        data={"transactionId": str(transaction.id), "eventId": str(transaction.event_id)},
    ))
    await db.flush()
    await db.refresh(transaction)

    logger.info(
        "transaction_status_changed",
        transaction_id=transaction.id,
        previous=current,
        status=transaction.status,
        released_ticket_id=refunded_ticket.id if refunded_ticket else None,
    )
    return transaction
