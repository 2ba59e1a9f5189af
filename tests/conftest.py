"""Shared fixtures: a fresh in-memory database and local backend per test."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.models import Identity
from app.local_backend import LocalBackend

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def session_factory():
    """Create a fresh database for each test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    """A single session on the test database."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def backend(session_factory):
    """Local backend sharing the test database and one change feed."""
    return LocalBackend(session_factory)


@pytest.fixture
def alice():
    return Identity(id="user-alice", email="alice@example.com")


@pytest.fixture
def bob():
    return Identity(id="user-bob", email="bob@example.com")
