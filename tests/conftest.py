"""Shared fixtures.

Every test gets its own SQLite file under ``tmp_path``. HTTP tests talk to the
real app through ``TestClient`` with ``get_db`` pointed at that file; service
tests use sessions from the same factory directly.
"""
import asyncio
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from eventhub.database import get_db
from eventhub.main import app
from eventhub.models import Base
from eventhub.models.user import User



@pytest.fixture
def engine(tmp_path):
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'eventhub_test.db'}",
        poolclass=NullPool,
    )

    async def _create_tables():
        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_create_tables())
    yield test_engine
    asyncio.run(test_engine.dispose())


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as db_session:
        yield db_session


@pytest.fixture
def client(session_factory):
    async def _get_test_db():
        async with session_factory() as db_session:
            yield db_session

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_user(session):
    """Insert a user directly, skipping password hashing."""
    async def _make_user(username: str, email: str | None = None) -> User:
        user = User(
            username=username,
            email=email or f"{username.lower()}@mail.com",
            hashed_password="not-a-real-hash",
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make_user
