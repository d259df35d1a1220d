"""Unit tests for the SQLAlchemy user store."""

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth_manager.database import build_engine, build_session_maker
from auth_manager.kernel.errors import ConflictError, StoreUnavailableError
from auth_manager.kernel.identity.password import PasswordHasher
from auth_manager.kernel.models.user import User, UserRole
from auth_manager.kernel.repositories.user_repository import SqlAlchemyUserStore


def make_user(email: str, role: UserRole = UserRole.PLAYER) -> User:
    return User(
        id=uuid.uuid4(),
        email=email,
        password_hash="$2b$04$" + "x" * 53,
        role=role.value,
        profile={},
    )


class TestSqlAlchemyUserStore:

    @pytest.mark.asyncio
    async def test_find_missing_returns_none(self, db_session: AsyncSession):
        store = SqlAlchemyUserStore(db_session)
        assert await store.find_by_email("nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_insert_then_find(self, db_session: AsyncSession, password_hasher: PasswordHasher):
        store = SqlAlchemyUserStore(db_session)
        user = make_user("Found@Example.com", UserRole.PUBLISHER)
        user.password_hash = password_hasher.hash("Secret123")

        await store.insert(user)
        found = await store.find_by_email("found@example.com")

        assert found is not None
        assert found.id == user.id
        assert found.email == "found@example.com"
        assert found.role == "Publisher"
        assert found.created_at is not None

    @pytest.mark.asyncio
    async def test_duplicate_insert_is_conflict(self, db_session: AsyncSession, session_maker):
        store = SqlAlchemyUserStore(db_session)
        await store.insert(make_user("twice@example.com"))

        with pytest.raises(ConflictError):
            await store.insert(make_user("TWICE@example.com", UserRole.PUBLISHER))

        # The session stays usable and nothing partial was written
        async with session_maker() as other:
            count = await other.scalar(select(func.count()).select_from(User))
        assert count == 1
        assert await store.find_by_email("twice@example.com") is not None

    @pytest.mark.asyncio
    async def test_other_integrity_failures_are_not_conflicts(self, db_session: AsyncSession):
        store = SqlAlchemyUserStore(db_session)
        user = make_user("norole@example.com")
        user.role = None

        with pytest.raises(IntegrityError):
            await store.insert(user)

        # Rolled back; the email is still free
        await store.insert(make_user("norole@example.com"))
        assert await store.find_by_email("norole@example.com") is not None

    @pytest.mark.asyncio
    async def test_unreachable_store(self, tmp_path):
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'auth.db'}")
        try:
            async with build_session_maker(engine)() as session:
                store = SqlAlchemyUserStore(session)
                with pytest.raises(StoreUnavailableError):
                    await store.find_by_email("x@example.com")
        finally:
            await engine.dispose()
