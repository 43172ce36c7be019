"""Service test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB sessions
    - db_manager patched so readiness probes hit the test engine
    - make_user / make_venue insert rows directly, bypassing the services

Design Decisions:
    - SQLite in-memory: fast, no external dependency; PostgreSQL-only pieces
      (advisory locks, asyncpg timeouts) are no-ops on this dialect
"""

import uuid

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

import goingout.models  # noqa: F401
from goingout.db.base import Base
from goingout.infrastructure.database import get_db, DatabaseSessionManager
from goingout.models.user import User
from goingout.models.venue import Venue
import goingout.infrastructure.database as db_module
from goingout.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_user(test_db):
    """Insert a user row; returns the ORM instance."""
    async def _make(name: str = "user", email: str | None = None) -> User:
        user = User(
            id=uuid.uuid4(),
            email=email or f"{name}-{uuid.uuid4().hex[:8]}@example.com",
            display_name=name,
        )
        test_db.add(user)
        await test_db.commit()
        return user
    return _make


@pytest.fixture
def make_venue(test_db):
    """Insert a venue row; returns the ORM instance."""
    async def _make(name: str, city: str = "athens-ga") -> Venue:
        venue = Venue(
            id=uuid.uuid4(), name=name, city=city, lat=33.96, lng=-83.38,
        )
        test_db.add(venue)
        await test_db.commit()
        return venue
    return _make

