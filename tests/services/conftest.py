"""Service test fixtures — async DB, storage adapter, services, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - client fixture installs a DatabaseSessionManager on app.state (lifespan
      does not run under ASGITransport)
    - Seed souls are created through SoulStore, so their credentials are real

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for the
      ON CONFLICT / RETURNING paths the repository uses
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from souls.config import get_settings
from souls.db.base import Base
from souls.infrastructure.database import DatabaseSessionManager
from souls.infrastructure.soul_repository import SqlSoulRepository
from souls.services.relationship_engine import RelationshipEngine
from souls.services.soul_store import SoulStore
import souls.models  # noqa: F401
from souls.main import app


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
def repository(test_db):
    return SqlSoulRepository(test_db)


@pytest.fixture
def hash_params():
    return get_settings().hash_params()


@pytest.fixture
def store(repository, hash_params):
    return SoulStore(repository, hash_params)


@pytest.fixture
def relationship_engine(repository, store):
    return RelationshipEngine(repository, store)


@pytest.fixture
async def alice(store):
    return await store.create("alice", "secret1")


@pytest.fixture
async def bob(store):
    return await store.create("bob", "secret2")


@pytest.fixture
async def client(test_engine):
    """FastAPI test client backed by the in-memory database."""
    original = getattr(app.state, "db_manager", None)
    app.state.db_manager = DatabaseSessionManager.from_engine(test_engine)

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.state.db_manager = original
