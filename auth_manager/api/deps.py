"""
FastAPI dependencies wiring the identity service for a request.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from auth_manager.config import get_settings
from auth_manager.database import get_db
from auth_manager.kernel.identity.identity_service import IdentityService, PasswordPolicy
from auth_manager.kernel.identity.jwt import JWTManager
from auth_manager.kernel.identity.password import PasswordHasher
from auth_manager.kernel.repositories.user_repository import SqlAlchemyUserStore


DbSession = Annotated[AsyncSession, Depends(get_db)]


@lru_cache
def get_token_issuer() -> JWTManager:
    """
    Process-wide token issuer.

    Raises SigningError when no usable key is configured; the app lifespan
    calls this at startup so a bad key stops the process before serving.
    """
    return JWTManager.from_settings(get_settings())


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Process-wide password hasher."""
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


def get_password_policy() -> PasswordPolicy:
    return PasswordPolicy.from_settings(get_settings())


async def get_identity_service(
    db: DbSession,
    token_issuer: Annotated[JWTManager, Depends(get_token_issuer)],
    password_hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    password_policy: Annotated[PasswordPolicy, Depends(get_password_policy)],
) -> IdentityService:
    """One service per request, bound to the request's session."""
    return IdentityService(
        user_store=SqlAlchemyUserStore(db),
        password_hasher=password_hasher,
        token_issuer=token_issuer,
        password_policy=password_policy,
    )


IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
