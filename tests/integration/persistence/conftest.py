"""Fixtures for SQLite-backed repository tests."""

import pytest_asyncio

from tests.shared.fixtures import (
    create_schema,
    create_test_engine,
    create_test_session_maker,
    sqlite_url,
)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_test_engine(sqlite_url(tmp_path))
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(db_engine):
    return create_test_session_maker(db_engine)


@pytest_asyncio.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session
