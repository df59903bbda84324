"""
Transaction endpoints: reads and status updates along the funnel.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models import TransactionStatus
from app.schemas.common import ApiResponse
from app.schemas.transaction import TransactionResponse, TransactionStatusUpdate
from app.services.cache_service import invalidate_event_cache
from app.services.transaction_service import (
    get_transaction, list_event_transactions, list_user_transactions, update_transaction_status,
)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("/user/{user_id}", response_model=ApiResponse[list[TransactionResponse]])
async def list_user_transactions_endpoint(
    user_id: int,
    type: Optional[Literal["purchase", "refund", "transfer"]] = Query(None),
    status: Optional[Literal["pending", "completed", "failed", "refunded"]] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    transactions = await list_user_transactions(db, user_id, type=type, status=status)
    return ApiResponse(data=[TransactionResponse.model_validate(t) for t in transactions])


@router.get("/event/{event_id}", response_model=ApiResponse[list[TransactionResponse]])
async def list_event_transactions_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    transactions = await list_event_transactions(db, event_id)
    return ApiResponse(data=[TransactionResponse.model_validate(t) for t in transactions])


@router.get("/{transaction_id}", response_model=ApiResponse[TransactionResponse])
async def get_transaction_endpoint(transaction_id: int, db: AsyncSession = Depends(get_db)):
    transaction = await get_transaction(db, transaction_id)
    return ApiResponse(data=TransactionResponse.model_validate(transaction))


@router.put("/{transaction_id}/status", response_model=ApiResponse[TransactionResponse])
async def update_transaction_status_endpoint(
    transaction_id: int,
    payload: TransactionStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    """pending -> completed | failed, completed -> refunded. Anything else is a 400."""
    transaction = await update_transaction_status(db, transaction_id, payload)
    if transaction.status == TransactionStatus.REFUNDED.value:
        # A refund can release seats
        await db.commit()
        await invalidate_event_cache()
    return ApiResponse(
        data=TransactionResponse.model_validate(transaction),
        message=f"Transaction {transaction.status}",
    )
