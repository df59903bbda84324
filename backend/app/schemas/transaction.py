"""
Pydantic schemas for transaction records.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from app.schemas.common import CamelModel


class TransactionStatusUpdate(CamelModel):
    status: Literal["pending", "completed", "failed", "refunded"]
    error_message: Optional[str] = Field(None, max_length=1000)
    block_number: Optional[int] = Field(None, ge=0)


class TransactionResponse(CamelModel):
    id: int
    user_id: int
    event_id: int
    ticket_id: Optional[int]
    type: str
    amount: float
    currency: str
    status: str
    payment_method: str
    transaction_hash: str
    block_number: Optional[int]
    network: str
    wallet_address: Optional[str]
    error_message: Optional[str]
    created_at: datetime
