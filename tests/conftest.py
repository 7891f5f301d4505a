"""
Pytest fixtures for test database, client, and authentication.

Tables are created and dropped around every test. The database defaults to
a local SQLite file; point TEST_DATABASE_URL at PostgreSQL to run the same
suite against the production dialect.
"""

import os
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from hotel_booking.main import app
from hotel_booking.db.base import Base
from hotel_booking.db.session import get_db
from hotel_booking.core.security import create_access_token
from hotel_booking.models import User, Hotel, Room

from tests import factories

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./hotel_booking_test.db")

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await factories.create_user(db_session)


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    """Authorization headers with a Bearer token for test_user."""
    token = create_access_token(data={"sub": str(test_user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def eligible_user(db_session: AsyncSession, test_user: User) -> User:
    """test_user holding a PAID in-person ticket that includes the hotel."""
    enrollment = await factories.create_enrollment(db_session, test_user)
    ticket_type = await factories.create_ticket_type(db_session, is_remote=False, includes_hotel=True)
    await factories.create_ticket(db_session, enrollment, ticket_type, status="PAID")
    return test_user


@pytest_asyncio.fixture
async def hotel(db_session: AsyncSession) -> Hotel:
    return await factories.create_hotel(db_session)


@pytest_asyncio.fixture
async def room(db_session: AsyncSession, hotel: Hotel) -> Room:
    """A room with capacity 3."""
    return await factories.create_room(db_session, hotel, capacity=3)
