"""
User endpoints: register and fetch a profile.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.common import ApiResponse
from app.schemas.user import UserCreate, UserResponse
from app.services.user_service import create_user, get_user

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a host or attendee account."""
    user = await create_user(db, user_data)
    return ApiResponse(data=UserResponse.model_validate(user), message="User created")


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user_endpoint(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await get_user(db, user_id)
    return ApiResponse(data=UserResponse.model_validate(user))
