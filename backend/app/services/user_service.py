"""
User registration and lookup.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Conflict, NotFound
from app.core.logging import get_logger
from app.models import User
from app.schemas.user import UserCreate

logger = get_logger(__name__)


async def create_user(db: AsyncSession, user_data: UserCreate) -> User:
    """Register a host or attendee. Raises Conflict on duplicate email or wallet."""
    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise Conflict("Email already registered")

    if user_data.wallet_address:
        result = await db.execute(select(User).where(User.wallet_address == user_data.wallet_address))
        if result.scalar_one_or_none():
            logger.warning("registration_failed", reason="wallet_exists")
            raise Conflict("Wallet address already linked to another account")

    user = User(
        email=user_data.email,
        name=user_data.name,
        role=user_data.role,
        wallet_address=user_data.wallet_address,
        bio=user_data.bio,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, role=user.role)
    return user


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user
