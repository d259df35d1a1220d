"""
Identity Core - credential hashing, token issuing and the identity service.
"""

from auth_manager.kernel.identity.password import PasswordHasher, MAX_PASSWORD_BYTES
from auth_manager.kernel.identity.jwt import (
    JWTManager,
    AccessTokenPayload,
    IssuedToken,
)
from auth_manager.kernel.identity.identity_service import IdentityService, PasswordPolicy

__all__ = [
    "PasswordHasher",
    "MAX_PASSWORD_BYTES",
    "JWTManager",
    "AccessTokenPayload",
    "IssuedToken",
    "IdentityService",
    "PasswordPolicy",
]
