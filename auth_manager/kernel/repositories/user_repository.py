"""
User persistence.

`UserStore` is the contract the identity service depends on;
`SqlAlchemyUserStore` implements it on an async SQLAlchemy session.
"""

from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from auth_manager.kernel.errors import ConflictError, StoreUnavailableError
from auth_manager.kernel.models.user import User, normalize_email
from auth_manager.logging_config import get_logger

logger = get_logger(__name__)

EMAIL_UNIQUE_CONSTRAINT = "uq_users_email"


def _is_email_conflict(exc: IntegrityError) -> bool:
    """
    True when the violated constraint is the email uniqueness one.

    PostgreSQL names the constraint; SQLite names the column.
    """
    detail = str(exc.orig)
    return EMAIL_UNIQUE_CONSTRAINT in detail or "UNIQUE constraint failed: users.email" in detail


class UserStore(Protocol):
    """
    Abstraction over user persistence.

    Implementations are responsible for:
    - Looking users up by normalized email.
    - Enforcing email uniqueness atomically on insert; a duplicate raises
      ConflictError and leaves nothing behind.
    """

    async def find_by_email(self, normalized_email: str) -> Optional[User]:
        """Return the user with the given normalized email, or None."""

        ...

    async def insert(self, user: User) -> User:
        """Persist a new user or raise ConflictError."""

        ...


class SqlAlchemyUserStore:
    """
    SQLAlchemy-backed implementation of `UserStore`.

    `insert` commits its own transaction so the unique constraint on
    `users.email` decides concurrent registrations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_email(self, normalized_email: str) -> Optional[User]:
        query = select(User).where(User.email == normalize_email(normalized_email))
        try:
            result = await self.session.execute(query)
        except (OperationalError, InterfaceError) as e:
            logger.error("User store unavailable during lookup: %s", type(e).__name__)
            raise StoreUnavailableError("User store unavailable") from e
        return result.scalar_one_or_none()

    async def insert(self, user: User) -> User:
        user.email = normalize_email(user.email)
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if not _is_email_conflict(e):
                logger.error("User insert violated an integrity constraint: %s", e.orig)
                raise
            raise ConflictError("Email already registered") from e
        except (OperationalError, InterfaceError) as e:
            await self.session.rollback()
            logger.error("User store unavailable during insert: %s", type(e).__name__)
            raise StoreUnavailableError("User store unavailable") from e
        return user
