"""
Ticket service: purchase, check-in, cancellation and transfer.

CONCURRENCY STRATEGY: Atomic Conditional Update
===============================================

Problem:
  Two buyers ask for the last 3 of 5 VIP tickets at the same time.
  Both read sold=0, both see 0 + 3 <= 5, both write sold=3 (or 6).
  Result: Oversell.

Solution:
  The capacity check and the increment are one statement:

    UPDATE ticket_types SET sold = sold + :q
    WHERE id = :id AND sold + :q <= quantity

  The database evaluates the predicate against the row it is about to
  write, under its own row lock, so at most one of the racing requests
  matches. rows_affected == 0 means the sale would oversell and we reject
  it. No version column, no retry loop, no SELECT FOR UPDATE.

  The ticket row, the purchase transaction and the buyer's notification
  are written in the same database transaction as the increment. If any
  of them fails the increment is rolled back with it, so `sold` never
  counts tickets that do not exist.

  A CHECK constraint (sold <= quantity) is the final safety net.

Idempotency:
  `transaction_hash` is unique on transactions. A repeated purchase with
  the same hash by the same buyer for the same event returns the ticket
  from the first call and mutates nothing. The same hash from anyone else
  is a conflict. Two racing requests with one hash both try the insert;
  the loser hits the unique constraint, rolls back (undoing its
  increment) and resolves as a replay.

Check-in uses the same idea: `UPDATE tickets SET status='used'
WHERE id = :id AND status = 'active'`, so a double scan marks the ticket
used exactly once.
"""

import secrets
import time
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.errors import (
    AlreadyUsed, CapacityExceeded, Conflict, Forbidden, InternalError, InvalidCode, InvalidState,
    NotFound, ValidationError,
)
from app.core.logging import get_logger
from app.core.metrics import purchase_latency, record_purchase_attempt, record_verification, tickets_sold
from app.models import (
    Event, Notification, NotificationType, PaymentMethod, Ticket, TicketStatus, TicketType,
    Transaction, TransactionStatus, TransactionType, User,
)
from app.schemas.ticket import TicketPurchase, TicketTransfer
from app.services.event_service import refresh_event_totals

logger = get_logger(__name__)
settings = get_settings()


def generate_qr_code() -> str:
    """Opaque random check-in credential."""
    return secrets.token_urlsafe(settings.QR_CODE_BYTES)


async def _get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user


async def get_ticket(db: AsyncSession, ticket_id: int) -> Ticket:
    result = await db.execute(select(Ticket).where(Ticket.id == ticket_id))
    ticket = result.scalar_one_or_none()
    if ticket is None:
        raise NotFound(f"Ticket {ticket_id} not found")
    return ticket


async def _find_transaction(db: AsyncSession, transaction_hash: str) -> Optional[Transaction]:
    result = await db.execute(
        select(Transaction).where(Transaction.transaction_hash == transaction_hash)
    )
    return result.scalar_one_or_none()


async def _replay_purchase(db: AsyncSession, existing: Transaction, data: TicketPurchase) -> Ticket:
    """Resolve a purchase whose transaction hash is already recorded."""
    if (
        existing.type != TransactionType.PURCHASE.value
        or existing.user_id != data.user_id
        or existing.event_id != data.event_id
        or existing.ticket_id is None
    ):
        record_purchase_attempt("conflict")
        logger.warning(
            "ticket_purchase_hash_conflict",
            transaction_hash=data.transaction_hash,
            existing_transaction_id=existing.id,
            user_id=data.user_id,
            event_id=data.event_id,
        )
        raise Conflict("Transaction hash has already been used for a different purchase")

    record_purchase_attempt("replayed")
    logger.info(
        "ticket_purchase_replayed",
        transaction_hash=data.transaction_hash,
        ticket_id=existing.ticket_id,
    )
    return await get_ticket(db, existing.ticket_id)


async def purchase_tickets(db: AsyncSession, data: TicketPurchase) -> tuple[Ticket, bool]:
    """
    Issue a ticket if the ticket type has capacity left.

    Returns (ticket, replayed). `replayed` is True when the transaction hash
    was already recorded for this buyer and event; nothing was written.

    Raises:
        NotFound: event, user or ticket type missing.
        CapacityExceeded: sold + quantity would exceed the ticket type's quantity.
        Conflict: transaction hash already used by another purchase.
        ValidationError: quantity above the per-purchase limit.
        InternalError: the rows could not be written for another reason.
    """
    started = time.perf_counter()
    try:
        return await _purchase_tickets(db, data)
    finally:
        purchase_latency.observe(time.perf_counter() - started)


async def _purchase_tickets(db: AsyncSession, data: TicketPurchase) -> tuple[Ticket, bool]:
    if data.quantity > settings.MAX_TICKETS_PER_PURCHASE:
        raise ValidationError(
            f"At most {settings.MAX_TICKETS_PER_PURCHASE} tickets can be bought at once"
        )

    existing = await _find_transaction(db, data.transaction_hash)
    if existing is not None:
        return await _replay_purchase(db, existing, data), True

    result = await db.execute(select(Event).where(Event.id == data.event_id))
    event = result.scalar_one_or_none()
    if event is None:
        record_purchase_attempt("not_found")
        raise NotFound("Event not found")

    buyer = await _get_user(db, data.user_id)

    ticket_type = next((t for t in event.ticket_types if t.name == data.ticket_type), None)
    if ticket_type is None:
        record_purchase_attempt("not_found")
        raise NotFound(f"Ticket type '{data.ticket_type}' not found")

    # Price and name are snapshotted here, in the same transaction as the sale
    unit_price = ticket_type.price
    ticket_type_name = ticket_type.name

    claim = await db.execute(
        update(TicketType)
        .where(
            TicketType.id == ticket_type.id,
            TicketType.sold + data.quantity <= TicketType.quantity,
        )
        .values(sold=TicketType.sold + data.quantity)
        .execution_options(synchronize_session=False)
    )
    if claim.rowcount == 0:
        await db.refresh(ticket_type)
        record_purchase_attempt("capacity_exceeded")
        logger.warning(
            "ticket_purchase_rejected",
            reason="capacity_exceeded",
            event_id=event.id,
            ticket_type=ticket_type_name,
            requested=data.quantity,
            available=ticket_type.available,
        )
        raise CapacityExceeded(
            f"Not enough tickets available. Requested: {data.quantity}, "
            f"Available: {ticket_type.available}"
        )

    await refresh_event_totals(db, event.id)

    ticket = Ticket(
        event=event,
        owner_id=buyer.id,
        ticket_type_id=ticket_type.id,
        ticket_type_name=ticket_type_name,
        price=unit_price,
        quantity=data.quantity,
        qr_code=generate_qr_code(),
        status=TicketStatus.ACTIVE.value,
        transaction_hash=data.transaction_hash,
        contract_address=data.contract_address or event.contract_address,
        network=event.network,
    )
    try:
        db.add(ticket)
        await db.flush()

        db.add(Transaction(
            user_id=buyer.id,
            event_id=event.id,
            ticket_id=ticket.id,
            type=TransactionType.PURCHASE.value,
            amount=unit_price * data.quantity,
            currency=settings.DEFAULT_CURRENCY,
            status=TransactionStatus.COMPLETED.value,
            payment_method=PaymentMethod.CRYPTO.value,
            transaction_hash=data.transaction_hash,
            network=event.network,
            wallet_address=data.wallet_address or buyer.wallet_address,
        ))
        db.add(Notification(
            user_id=buyer.id,
            type=NotificationType.TICKET.value,
            title="Ticket purchased",
            message=f"You bought {data.quantity} x {ticket_type_name} for {event.title}",
            read=False,
            data={"eventId": str(event.id), "ticketId": str(ticket.id)},
        ))
        await db.flush()
    except IntegrityError as e:
        # Our increment goes with the rollback
        await db.rollback()
        existing = await _find_transaction(db, data.transaction_hash)
        if existing is None:
            record_purchase_attempt("error")
            logger.error(
                "ticket_purchase_insert_failed",
                event_id=data.event_id,
                user_id=data.user_id,
                error=str(e.orig),
            )
            raise InternalError("Could not record the purchase, please retry") from e
        # Lost a race on the same transaction hash
        return await _replay_purchase(db, existing, data), True

    await db.refresh(ticket)
    await db.refresh(ticket_type)
    await db.refresh(event)

    record_purchase_attempt("success")
    tickets_sold.inc(data.quantity)
    logger.info(
        "ticket_purchased",
        ticket_id=ticket.id,
        event_id=event.id,
        user_id=buyer.id,
        ticket_type=ticket_type_name,
        quantity=data.quantity,
        sold=ticket_type.sold,
        capacity=ticket_type.quantity,
    )
    return ticket, False


async def verify_ticket(db: AsyncSession, ticket_id: int, qr_code: str) -> Ticket:
    """
    Check a ticket in. Succeeds once; `used_date` is set on that one success.

    Raises:
        NotFound: unknown ticket.
        InvalidCode: QR payload does not match; ticket untouched.
        AlreadyUsed: ticket was already checked in.
        InvalidState: ticket was transferred or cancelled.
    """
    ticket = await get_ticket(db, ticket_id)

    if ticket.status == TicketStatus.USED.value:
        record_verification("already_used")
        raise AlreadyUsed("Ticket has already been used")

    if ticket.qr_code != qr_code:
        record_verification("invalid_code")
        logger.warning("ticket_verification_failed", ticket_id=ticket_id, reason="invalid_code")
        raise InvalidCode("Invalid QR code")

    if ticket.status != TicketStatus.ACTIVE.value:
        record_verification("invalid_state")
        raise InvalidState(f"Ticket is {ticket.status} and cannot be used")

    result = await db.execute(
        update(Ticket)
        .where(Ticket.id == ticket_id, Ticket.status == TicketStatus.ACTIVE.value)
        .values(status=TicketStatus.USED.value, used_date=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        # Another scanner got there between our read and our write
        record_verification("already_used")
        raise AlreadyUsed("Ticket has already been used")

    await db.refresh(ticket)
    record_verification("verified")
    logger.info("ticket_verified", ticket_id=ticket.id, event_id=ticket.event_id)
    return ticket


async def _origin_ticket_id(db: AsyncSession, ticket: Ticket) -> int:
    """Id of the ticket that was bought, following transfers backwards."""
    origin_id = ticket.id
    parent_id = ticket.transferred_from_id
    while parent_id is not None:
        origin_id = parent_id
        result = await db.execute(select(Ticket.transferred_from_id).where(Ticket.id == parent_id))
        parent_id = result.scalar_one()
    return origin_id


async def current_ticket(db: AsyncSession, ticket: Ticket) -> Ticket:
    """The ticket that holds the seats now, following transfers forwards."""
    while ticket.status == TicketStatus.TRANSFERRED.value:
        result = await db.execute(select(Ticket).where(Ticket.transferred_from_id == ticket.id))
        successor = result.scalar_one_or_none()
        if successor is None:
            break
        ticket = successor
    return ticket


async def release_ticket(db: AsyncSession, ticket: Ticket) -> None:
    """
    Move an active ticket to `cancelled` and hand its seats back to the
    ticket type. Event totals are refreshed in the same transaction.

    Raises:
        InvalidState: the ticket is not active (checked in the UPDATE itself).
    """
    result = await db.execute(
        update(Ticket)
        .where(Ticket.id == ticket.id, Ticket.status == TicketStatus.ACTIVE.value)
        .values(status=TicketStatus.CANCELLED.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.refresh(ticket)
        raise InvalidState(f"Ticket is {ticket.status} and cannot be cancelled")

    await db.execute(
        update(TicketType)
        .where(TicketType.id == ticket.ticket_type_id)
        .values(sold=TicketType.sold - ticket.quantity)
        .execution_options(synchronize_session=False)
    )
    await refresh_event_totals(db, ticket.event_id)
    await db.refresh(ticket)


async def cancel_ticket(db: AsyncSession, ticket_id: int, user_id: int) -> Ticket:
    """
    Cancel an active ticket and give its capacity back to the ticket type.

    The purchase transaction behind it, if completed, becomes refunded. For
    a ticket received by transfer that is the original buyer's purchase.
    """
    ticket = await get_ticket(db, ticket_id)
    if ticket.owner_id != user_id:
        raise Forbidden("Only the ticket owner can cancel this ticket")

    await release_ticket(db, ticket)

    origin_id = await _origin_ticket_id(db, ticket)
    await db.execute(
        update(Transaction)
        .where(
            Transaction.ticket_id == origin_id,
            Transaction.type == TransactionType.PURCHASE.value,
            Transaction.status == TransactionStatus.COMPLETED.value,
        )
        .values(status=TransactionStatus.REFUNDED.value)
        .execution_options(synchronize_session=False)
    )
    db.add(Notification(
        user_id=user_id,
        type=NotificationType.TICKET.value,
        title="Ticket cancelled",
        message=f"Your {ticket.ticket_type_name} ticket was cancelled",
        read=False,
        data={"eventId": str(ticket.event_id), "ticketId": str(ticket.id)},
    ))
    await db.flush()
    await db.refresh(ticket)

    logger.info(
        "ticket_cancelled",
        ticket_id=ticket.id,
        event_id=ticket.event_id,
        released=ticket.quantity,
    )
    return ticket


async def transfer_ticket(db: AsyncSession, ticket_id: int, data: TicketTransfer) -> tuple[Ticket, Ticket]:
    """
    Move an active ticket to another user.

    The original becomes `transferred` (its QR code stops working) and the
    recipient gets a fresh active ticket with a new code. Capacity is
    unchanged. Returns (new_ticket, old_ticket).
    """
    ticket = await get_ticket(db, ticket_id)
    if ticket.owner_id != data.from_user_id:
        raise Forbidden("Only the ticket owner can transfer this ticket")
    if data.from_user_id == data.to_user_id:
        raise ValidationError("Cannot transfer a ticket to its current owner")

    recipient = await _get_user(db, data.to_user_id)

    if await _find_transaction(db, data.transaction_hash) is not None:
        raise Conflict("Transaction hash has already been used")

    result = await db.execute(
        update(Ticket)
        .where(Ticket.id == ticket_id, Ticket.status == TicketStatus.ACTIVE.value)
        .values(status=TicketStatus.TRANSFERRED.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.refresh(ticket)
        raise InvalidState(f"Ticket is {ticket.status} and cannot be transferred")

    new_ticket = Ticket(
        event_id=ticket.event_id,
        owner_id=recipient.id,
        ticket_type_id=ticket.ticket_type_id,
        ticket_type_name=ticket.ticket_type_name,
        price=ticket.price,
        quantity=ticket.quantity,
        qr_code=generate_qr_code(),
        token_id=ticket.token_id,
        status=TicketStatus.ACTIVE.value,
        transaction_hash=data.transaction_hash,
        contract_address=ticket.contract_address,
        network=ticket.network,
        transferred_from_id=ticket.id,
    )
    db.add(new_ticket)
    await db.flush()

    db.add(Transaction(
        user_id=data.from_user_id,
        event_id=ticket.event_id,
        ticket_id=new_ticket.id,
        type=TransactionType.TRANSFER.value,
        amount=0,
        currency=settings.DEFAULT_CURRENCY,
        status=TransactionStatus.COMPLETED.value,
        payment_method=PaymentMethod.CRYPTO.value,
        transaction_hash=data.transaction_hash,
        network=ticket.network,
        wallet_address=recipient.wallet_address,
    ))
    db.add(Notification(
        user_id=recipient.id,
        type=NotificationType.TICKET.value,
        title="Ticket received",
        message=f"You received a {ticket.ticket_type_name} ticket",
        read=False,
        data={"eventId": str(ticket.event_id), "ticketId": str(new_ticket.id)},
    ))
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Transaction hash has already been used")

    await db.refresh(new_ticket)
    await db.refresh(ticket)

    logger.info(
        "ticket_transferred",
        ticket_id=ticket.id,
        new_ticket_id=new_ticket.id,
        from_user_id=data.from_user_id,
        to_user_id=recipient.id,
    )
    return new_ticket, ticket


async def list_user_tickets(db: AsyncSession, user_id: int, status: Optional[str] = None) -> list[Ticket]:
    query = select(Ticket).where(Ticket.owner_id == user_id)
    if status:
        query = query.where(Ticket.status == status)
    result = await db.execute(query.order_by(Ticket.purchase_date.desc(), Ticket.id.desc()))
    return list(result.scalars().all())


async def list_event_tickets(db: AsyncSession, event_id: int) -> tuple[list[Ticket], dict[str, int]]:
    """Newest first, with check-in counts for the door staff view."""
    result = await db.execute(
        select(Ticket)
        .where(Ticket.event_id == event_id)
        .order_by(Ticket.purchase_date.desc(), Ticket.id.desc())
    )
    tickets = list(result.scalars().all())
    stats = {
        "total": len(tickets),
        "active": sum(1 for t in tickets if t.status == TicketStatus.ACTIVE.value),
        "used": sum(1 for t in tickets if t.status == TicketStatus.USED.value),
    }
    return tickets, stats
