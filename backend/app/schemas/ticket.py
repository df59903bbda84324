"""
Pydantic schemas for ticket purchase, check-in, cancel and transfer.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, Field

from app.schemas.common import CamelModel


class TicketPurchase(CamelModel):
    event_id: int
    user_id: int
    ticket_type: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(1, gt=0)
    transaction_hash: str = Field(..., min_length=1, max_length=128)
    contract_address: Optional[str] = Field(None, max_length=100)
    wallet_address: Optional[str] = Field(None, max_length=100)


class TicketVerify(CamelModel):
    qr_code: str = Field(..., min_length=1, max_length=128)


class TicketCancel(CamelModel):
    user_id: int


class TicketTransfer(CamelModel):
    from_user_id: int
    to_user_id: int
    transaction_hash: str = Field(..., min_length=1, max_length=128)


class TicketEventSummary(CamelModel):
    id: int
    title: str
    start_date: datetime
    venue: str
    city: str


class TicketResponse(CamelModel):
    id: int
    event_id: int
    owner_id: int
    ticket_type_id: int
    ticket_type: str = Field(
        validation_alias=AliasChoices("ticket_type_name", "ticketType", "ticket_type"),
        serialization_alias="ticketType",
    )
    price: float
    quantity: int
    qr_code: str
    token_id: Optional[str]
    status: str
    purchase_date: datetime
    used_date: Optional[datetime]
    transaction_hash: str
    contract_address: Optional[str]
    network: str
    transferred_from_id: Optional[int]
    event: TicketEventSummary


class PurchaseResult(CamelModel):
    ticket: TicketResponse
    replayed: bool = False


class TransferResult(CamelModel):
    ticket: TicketResponse
    previous_ticket_id: int


class TicketStats(CamelModel):
    total: int
    active: int
    used: int


class EventTicketList(CamelModel):
    tickets: list[TicketResponse]
    stats: TicketStats
