"""Database helpers shared by repository and API tests.

Tests use a SQLite file per test (``tmp_path``) with ``NullPool`` so that
every session opens its own connection on whatever event loop runs it.
"""

import asyncio
from pathlib import Path
from uuid import UUID

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from lemon.infrastructure.persistence.sqlalchemy import Base
from lemon_auth.persistence.sqlalchemy import AuthBase

# Fixed UUIDs for testing - ensures deterministic behavior
TEST_USER_ID = UUID("12345678-1234-5678-1234-567812345678")
TEST_USER_EMAIL = "test@example.com"

TEST_USER_ID_2 = UUID("00000000-0000-0000-0000-000000000001")
TEST_USER_EMAIL_2 = "test2@example.com"

TEST_PASSWORD = "SecurePassword123!"


def sqlite_url(directory: Path) -> str:
    return f"sqlite+aiosqlite:///{directory / 'lemon-test.db'}"


def create_test_engine(url: str) -> AsyncEngine:
    return create_async_engine(url, echo=False, poolclass=NullPool)


def create_test_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.run_sync(AuthBase.metadata.create_all)


async def drop_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(AuthBase.metadata.drop_all)
        await conn.run_sync(Base.metadata.drop_all)


def run_sync(coro):
    """Run a coroutine on a fresh event loop.

    Used outside of async tests, e.g. to prepare the database before a
    TestClient (which runs its own loop) takes over.
    """
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()
