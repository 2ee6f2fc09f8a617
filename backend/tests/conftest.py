"""
Pytest fixtures for test database, client, and authentication.

Each test gets a fresh SQLite database file (aiosqlite) with the full schema,
so tests are isolated without needing a running PostgreSQL or Redis.
"""

import os

# Settings are cached on first import; configure the test environment before that
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./deskbooking_test.db")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from deskbooking.main import app
from deskbooking.db.base import Base
from deskbooking.db.session import get_db
from deskbooking.core.security import create_access_token, hash_password
from deskbooking.models.booking import Booking, SlotClaim, Slot
from deskbooking.models.seat import Seat, SeatType
from deskbooking.models.user import User, UserRole


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_user(db: AsyncSession, username: str, role: UserRole) -> User:
    user = User(
        username=username,
        hashed_password=hash_password("testpassword123"),
        role=role.value,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def _headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': str(user.id)})}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "testuser", UserRole.EMPLOYEE)


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "otheruser", UserRole.EMPLOYEE)


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _make_user(db_session, "adminuser", UserRole.ADMIN)


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    return _headers(test_user)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict:
    return _headers(other_user)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict:
    return _headers(admin_user)


async def make_seat(db: AsyncSession, label: str, **fields) -> Seat:
    seat = Seat(label=label, type=SeatType.WITH_MONITOR.value, tags=[], **fields)
    db.add(seat)
    await db.commit()
    await db.refresh(seat)
    return seat


async def make_booking(db: AsyncSession, user: User, seat: Seat, day: date, slot: Slot) -> Booking:
    """Insert a booking (and its claims) directly, bypassing the service."""
    booking = Booking(user_id=user.id, seat_id=seat.id, date=day, slot=slot.value)
    db.add(booking)
    await db.flush()
    for half in slot.halves:
        db.add(SlotClaim(booking_id=booking.id, seat_id=seat.id, date=day, half=half.value))
    await db.commit()
    await db.refresh(booking)
    return booking


@pytest_asyncio.fixture
async def test_seat(db_session: AsyncSession) -> Seat:
    """Open seat T10 with no bookings."""
    return await make_seat(db_session, "T10")


@pytest_asyncio.fixture
async def range_blocked_seat(db_session: AsyncSession) -> Seat:
    """Seat blocked 2024-04-01..2024-04-05 with the permanent flag also set."""
    return await make_seat(
        db_session,
        "T11",
        is_blocked=True,
        block_start_date=date(2024, 4, 1),
        block_end_date=date(2024, 4, 5),
    )


@pytest_asyncio.fixture
async def permanently_blocked_seat(db_session: AsyncSession) -> Seat:
    return await make_seat(db_session, "T12", is_blocked=True)
