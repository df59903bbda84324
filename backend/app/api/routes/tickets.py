"""
Ticket endpoints: purchase, check-in, cancel, transfer and reads.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.common import ApiResponse
from app.schemas.ticket import (
    EventTicketList, PurchaseResult, TicketCancel, TicketPurchase, TicketResponse, TicketStats,
    TicketTransfer, TicketVerify, TransferResult,
)
from app.services.cache_service import invalidate_event_cache
from app.services.ticket_service import (
    cancel_ticket, get_ticket, list_event_tickets, list_user_tickets, purchase_tickets,
    transfer_ticket, verify_ticket,
)

router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.post("", response_model=ApiResponse[PurchaseResult], status_code=status.HTTP_201_CREATED)
async def purchase_ticket_endpoint(
    purchase: TicketPurchase,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Buy tickets of a named ticket type.

    Capacity is claimed with a single conditional UPDATE, so concurrent
    buyers can never push `sold` past `quantity`. Repeating a purchase with
    the same transaction hash returns the original ticket with 200.
    """
    ticket, replayed = await purchase_tickets(db, purchase)
    if replayed:
        response.status_code = status.HTTP_200_OK
        message = "Ticket already issued for this transaction"
    else:
        await db.commit()
        await invalidate_event_cache()
        message = "Ticket purchased successfully"
    return ApiResponse(
        data=PurchaseResult(ticket=TicketResponse.model_validate(ticket), replayed=replayed),
        message=message,
    )


@router.put("/{ticket_id}/verify", response_model=ApiResponse[TicketResponse])
async def verify_ticket_endpoint(
    ticket_id: int,
    payload: TicketVerify,
    db: AsyncSession = Depends(get_db),
):
    """Check a ticket in with its QR payload. Works exactly once per ticket."""
    ticket = await verify_ticket(db, ticket_id, payload.qr_code)
    return ApiResponse(data=TicketResponse.model_validate(ticket), message="Ticket verified")


@router.put("/{ticket_id}/cancel", response_model=ApiResponse[TicketResponse])
async def cancel_ticket_endpoint(
    ticket_id: int,
    payload: TicketCancel,
    db: AsyncSession = Depends(get_db),
):
    ticket = await cancel_ticket(db, ticket_id, payload.user_id)
    await db.commit()
    await invalidate_event_cache()
    return ApiResponse(data=TicketResponse.model_validate(ticket), message="Ticket cancelled")


@router.put("/{ticket_id}/transfer", response_model=ApiResponse[TransferResult])
async def transfer_ticket_endpoint(
    ticket_id: int,
    payload: TicketTransfer,
    db: AsyncSession = Depends(get_db),
):
    new_ticket, old_ticket = await transfer_ticket(db, ticket_id, payload)
    return ApiResponse(
        data=TransferResult(
            ticket=TicketResponse.model_validate(new_ticket),
            previous_ticket_id=old_ticket.id,
        ),
        message="Ticket transferred",
    )


@router.get("/user/{user_id}", response_model=ApiResponse[list[TicketResponse]])
async def list_user_tickets_endpoint(
    user_id: int,
    ticket_status: Optional[Literal["active", "used", "transferred", "cancelled"]] = Query(
        None, alias="status"
    ),
    db: AsyncSession = Depends(get_db),
):
    tickets = await list_user_tickets(db, user_id, ticket_status)
    return ApiResponse(data=[TicketResponse.model_validate(t) for t in tickets])


@router.get("/event/{event_id}", response_model=ApiResponse[EventTicketList])
async def list_event_tickets_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    tickets, stats = await list_event_tickets(db, event_id)
    return ApiResponse(data=EventTicketList(
        tickets=[TicketResponse.model_validate(t) for t in tickets],
        stats=TicketStats(**stats),
    ))


@router.get("/{ticket_id}", response_model=ApiResponse[TicketResponse])
async def get_ticket_endpoint(ticket_id: int, db: AsyncSession = Depends(get_db)):
    ticket = await get_ticket(db, ticket_id)
    return ApiResponse(data=TicketResponse.model_validate(ticket))
