"""
Pydantic schemas for user-related request/response validation.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field

from app.schemas.common import CamelModel


class UserCreate(CamelModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    role: Literal["host", "attendee"] = "attendee"
    wallet_address: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)


class UserResponse(CamelModel):
    id: int
    email: str
    name: str
    role: str
    wallet_address: Optional[str]
    bio: Optional[str]
    is_active: bool
    created_at: datetime
