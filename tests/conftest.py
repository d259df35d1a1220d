"""
Pytest fixtures for auth manager tests.

Every test gets its own SQLite file database so connections opened by
different sessions see the same data.
"""

import os
from datetime import datetime, timezone
from typing import AsyncGenerator

# Point the app's module-level engine at SQLite before anything imports it
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "development"

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth_manager.config import get_settings

get_settings.cache_clear()

from auth_manager.database import build_engine, build_session_maker
from auth_manager.kernel.identity.identity_service import IdentityService, PasswordPolicy
from auth_manager.kernel.identity.jwt import JWTManager
from auth_manager.kernel.identity.password import PasswordHasher
from auth_manager.kernel.models import Base
from auth_manager.kernel.repositories.user_repository import SqlAlchemyUserStore

TEST_SIGNING_KEY = "test-secret-key-for-testing-only"


class FakeClock:
    """Settable clock for token lifetime tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a test database engine backed by a temp file."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return build_session_maker(db_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def password_hasher() -> PasswordHasher:
    """Cheapest bcrypt cost; the algorithm is unchanged."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime.now(timezone.utc))


@pytest.fixture
def jwt_manager(clock: FakeClock) -> JWTManager:
    """Create a JWT manager for tests."""
    return JWTManager(
        secret_key=TEST_SIGNING_KEY,
        algorithm="HS256",
        access_token_expire_minutes=60,
        clock=clock,
    )


@pytest.fixture
def identity_service(
    db_session: AsyncSession,
    password_hasher: PasswordHasher,
    jwt_manager: JWTManager,
) -> IdentityService:
    return IdentityService(
        user_store=SqlAlchemyUserStore(db_session),
        password_hasher=password_hasher,
        token_issuer=jwt_manager,
        password_policy=PasswordPolicy(),
    )
