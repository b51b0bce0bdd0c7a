"""Integration tests for UserRepositorySQLAlchemy."""

import pytest

from lemon.domain.user import EmailAlreadyExistsError, InvalidEmailError, User, UserRole
from lemon.infrastructure.persistence.sqlalchemy import UserRepositorySQLAlchemy
from tests.shared.fixtures import TEST_USER_EMAIL, TEST_USER_EMAIL_2, TEST_USER_ID

pytestmark = pytest.mark.integration


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_save_and_find(self, db_session):
        repo = UserRepositorySQLAlchemy(db_session)
        user = User(
            TEST_USER_EMAIL,
            name="Jane",
            roles=(UserRole.ADMIN, UserRole.UNVERIFIED),
            id=TEST_USER_ID,
        )

        await repo.save(user)
        await db_session.commit()

        found = await repo.find_by_id(TEST_USER_ID)
        assert found == user
        assert found.email == TEST_USER_EMAIL
        assert found.name == "Jane"
        assert found.roles == frozenset({UserRole.ADMIN, UserRole.UNVERIFIED})
        assert found.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_find_by_email_is_case_insensitive(self, db_session):
        repo = UserRepositorySQLAlchemy(db_session)
        await repo.save(User.create(TEST_USER_EMAIL))

        found = await repo.find_by_email("TEST@Example.com")

        assert found is not None
        assert found.email == TEST_USER_EMAIL

    @pytest.mark.asyncio
    async def test_find_by_malformed_email_raises(self, db_session):
        repo = UserRepositorySQLAlchemy(db_session)

        with pytest.raises(InvalidEmailError):
            await repo.find_by_email("not-an-email")

    @pytest.mark.asyncio
    async def test_missing_user(self, db_session):
        repo = UserRepositorySQLAlchemy(db_session)

        assert await repo.find_by_id(TEST_USER_ID) is None
        assert await repo.find_by_email(TEST_USER_EMAIL) is None
        assert await repo.exists_by_email(TEST_USER_EMAIL) is False

    @pytest.mark.asyncio
    async def test_update_roles_and_email(self, db_session):
        repo = UserRepositorySQLAlchemy(db_session)
        user = User.create(TEST_USER_EMAIL)
        await repo.save(user)

        user.mark_verified()
        user.change_email(TEST_USER_EMAIL_2)
        await repo.save(user)

        found = await repo.find_by_id(user.id)
        assert found.roles == frozenset()
        assert found.email == TEST_USER_EMAIL_2
        assert await repo.exists_by_email(TEST_USER_EMAIL) is False

    @pytest.mark.asyncio
    async def test_duplicate_email(self, session_maker):
        async with session_maker() as session:
            await UserRepositorySQLAlchemy(session).save(User.create(TEST_USER_EMAIL))
            await session.commit()

        async with session_maker() as session:
            with pytest.raises(EmailAlreadyExistsError):
                await UserRepositorySQLAlchemy(session).save(User.create(TEST_USER_EMAIL))

    @pytest.mark.asyncio
    async def test_count_list_and_delete(self, db_session):
        repo = UserRepositorySQLAlchemy(db_session)
        first = User.create(TEST_USER_EMAIL)
        second = User.create(TEST_USER_EMAIL_2)
        await repo.save(first)
        await repo.save(second)

        assert await repo.count() == 2
        assert [u.id for u in await repo.list_all()] == [first.id, second.id]

        assert await repo.delete(first.id) is True
        assert await repo.delete(first.id) is False
        assert await repo.count() == 1
