"""
Pytest fixtures for test database, client, and seeded domain objects.

Each test gets its own SQLite database file. The HTTP client opens a new
session per request (like the real `get_db`), so requests fired with
asyncio.gather run in separate database transactions and genuinely race.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator, Awaitable, Callable, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.main import app
from app.db.base import Base
from app.db.session import get_db
from app.models import Event, TicketType, User


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create tables in a fresh database file, yield a session factory, dispose."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ticketing_test.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for seeding data directly through the ORM."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each get their own committed-or-rolled-back session."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def reload(session_factory) -> Callable[..., Awaitable]:
    """Read a row back through a fresh session, bypassing any identity map."""

    async def _reload(model, pk):
        async with session_factory() as session:
            return await session.get(model, pk)

    return _reload


async def _create_user(db: AsyncSession, email: str, name: str, role: str, wallet: Optional[str] = None) -> User:
    user = User(email=email, name=name, role=role, wallet_address=wallet)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def host(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "host@example.com", "Event Host", "host", "0xhost")


@pytest_asyncio.fixture
async def attendee(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "attendee@example.com", "John Attendee", "attendee", "0xattendee")


@pytest_asyncio.fixture
async def other_attendee(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "other@example.com", "Jane Other", "attendee", "0xother")


@pytest.fixture
def make_event(db_session: AsyncSession, host: User) -> Callable[..., Awaitable[Event]]:
    """Factory: seed an event whose aggregates match its ticket types."""

    async def _make_event(
        ticket_types: list[dict],
        title: str = "Web3 Developer Conference",
        city: str = "San Francisco",
        category: str = "TECHNOLOGY",
        status: str = "published",
        days_ahead: int = 30,
    ) -> Event:
        start = datetime.now(timezone.utc) + timedelta(days=days_ahead)
        types = [
            TicketType(
                name=t["name"],
                price=t.get("price", 10.0),
                quantity=t["quantity"],
                sold=t.get("sold", 0),
                benefits=t.get("benefits", []),
            )
            for t in ticket_types
        ]
        event = Event(
            host_id=host.id,
            title=title,
            description="Talks, workshops and networking",
            category=category,
            venue="Convention Center",
            address="123 Main St",
            city=city,
            country="USA",
            start_date=start,
            end_date=start + timedelta(hours=8),
            status=status,
            network="sepolia",
            contract_address="0xcontract",
            total_tickets=sum(t.quantity for t in types),
            sold_tickets=sum(t.sold for t in types),
            views=0,
            favorites=0,
            ticket_types=types,
        )
        db_session.add(event)
        await db_session.commit()
        await db_session.refresh(event)
        return event

    return _make_event


@pytest_asyncio.fixture
async def vip_event(make_event) -> Event:
    """VIP: 5 seats, 3 already sold. General: plenty of room."""
    return await make_event([
        {"name": "VIP", "price": 100.0, "quantity": 5, "sold": 3},
        {"name": "General", "price": 25.0, "quantity": 100, "sold": 0},
    ])


@pytest_asyncio.fixture
async def fresh_vip_event(make_event) -> Event:
    """VIP: 5 seats, none sold."""
    return await make_event([{"name": "VIP", "price": 100.0, "quantity": 5, "sold": 0}])

