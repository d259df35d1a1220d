"""
Identity service for registration and authentication.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from email_validator import EmailNotValidError, validate_email

from auth_manager.config import Settings
from auth_manager.kernel.errors import AuthenticationError, ConflictError, SigningError, ValidationError
from auth_manager.kernel.identity.jwt import JWTManager
from auth_manager.kernel.identity.password import MAX_PASSWORD_BYTES, PasswordHasher, password_byte_length
from auth_manager.kernel.models.base import utcnow
from auth_manager.kernel.models.user import User, UserRole
from auth_manager.kernel.repositories.user_repository import UserStore
from auth_manager.logging_config import get_logger
from auth_manager.schemas.auth import PlayerProfile, PublisherProfile, TokenResponse, to_public_profile

logger = get_logger(__name__)
audit_logger = get_logger("auth_manager.audit")

RESERVED_PROFILE_KEYS = frozenset({
    "id", "email", "role", "password", "password_hash", "created_at",
})


def canonical_email(email: str) -> str:
    """
    Uniqueness key for an address: email-validator's normalized form, lowercased.

    Raises:
        EmailNotValidError: If the address is not well-formed
    """
    return validate_email(email.strip(), check_deliverability=False).normalized.lower()


@dataclass(frozen=True)
class PasswordPolicy:
    """Structural password requirements. Non-empty is always enforced."""

    min_length: int = 8
    max_length: int = 72
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_digit: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordPolicy":
        return cls(
            min_length=settings.password_min_length,
            max_length=settings.password_max_length,
            require_uppercase=settings.password_require_uppercase,
            require_lowercase=settings.password_require_lowercase,
            require_digit=settings.password_require_digit,
        )

    def check(self, password: str) -> Optional[str]:
        """Return the first violated rule as a message, or None."""
        if not password:
            return "Password must not be empty"
        if len(password) < self.min_length:
            return f"Password must be at least {self.min_length} characters"
        if len(password) > self.max_length:
            return f"Password must be at most {self.max_length} characters"
        if password_byte_length(password) > MAX_PASSWORD_BYTES:
            return f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
        if self.require_uppercase and not any(c.isupper() for c in password):
            return "Password must contain at least one uppercase letter"
        if self.require_lowercase and not any(c.islower() for c in password):
            return "Password must contain at least one lowercase letter"
        if self.require_digit and not any(c.isdigit() for c in password):
            return "Password must contain at least one digit"
        return None


class IdentityService:
    """
    Service for user identity operations.

    Handles player/publisher registration and password authentication.
    Collaborators are passed in; the service holds no state between calls.
    """

    def __init__(
        self,
        user_store: UserStore,
        password_hasher: PasswordHasher,
        token_issuer: Optional[JWTManager] = None,
        password_policy: Optional[PasswordPolicy] = None,
    ):
        self.user_store = user_store
        self.password_hasher = password_hasher
        self.token_issuer = token_issuer
        self.password_policy = password_policy or PasswordPolicy()

    async def register_player(
        self,
        email: str,
        password: str,
        profile: Optional[Mapping[str, Any]] = None,
    ) -> PlayerProfile:
        """
        Register a new player.

        Raises:
            ValidationError: If email, password or profile fields are invalid
            ConflictError: If the email is already registered
        """
        return await self._register(UserRole.PLAYER, email, password, profile)

    async def register_publisher(
        self,
        email: str,
        password: str,
        profile: Optional[Mapping[str, Any]] = None,
    ) -> PublisherProfile:
        """
        Register a new publisher.

        Raises:
            ValidationError: If email, password or profile fields are invalid
            ConflictError: If the email is already registered
        """
        return await self._register(UserRole.PUBLISHER, email, password, profile)

    async def authenticate(self, email: str, password: str) -> TokenResponse:
        """
        Verify credentials and issue an access token.

        Raises:
            AuthenticationError: Unknown email or wrong password (same error)
            SigningError: If no token issuer was configured
        """
        if self.token_issuer is None:
            raise SigningError("Authentication requires a configured token issuer")

        try:
            normalized = canonical_email(email or "")
        except EmailNotValidError:
            # Never registrable, so never a known account
            normalized = (email or "").strip().lower()
            user = None
        else:
            user = await self.user_store.find_by_email(normalized)

        if user is None:
            await self.password_hasher.dummy_verify_async(password or "")
            audit_logger.info("Login failed", extra={"email": normalized, "reason": "unknown_email"})
            raise AuthenticationError()

        if not await self.password_hasher.verify_async(password or "", user.password_hash):
            audit_logger.info(
                "Login failed",
                extra={"email": normalized, "user_id": str(user.id), "reason": "bad_password"},
            )
            raise AuthenticationError()

        issued = self.token_issuer.issue(user.id, user.role)
        audit_logger.info("Login succeeded", extra={"user_id": str(user.id), "role": user.role})

        return TokenResponse(
            token=issued.token,
            expires_at=issued.expires_at,
            expires_in=issued.expires_in,
        )

    async def _register(
        self,
        role: UserRole,
        email: str,
        password: str,
        profile: Optional[Mapping[str, Any]],
    ) -> Union[PlayerProfile, PublisherProfile]:
        normalized, profile_fields = self._validate_registration(email, password, profile)

        # Fast path only; the store's unique constraint is authoritative
        if await self.user_store.find_by_email(normalized) is not None:
            audit_logger.info(
                "Registration rejected",
                extra={"email": normalized, "role": role.value, "reason": "email_taken"},
            )
            raise ConflictError("Email already registered")

        password_hash = await self.password_hasher.hash_async(password)

        user = User(
            id=uuid.uuid4(),
            email=normalized,
            password_hash=password_hash,
            role=role.value,
            profile=profile_fields,
            created_at=utcnow(),
        )
        user = await self.user_store.insert(user)

        logger.info(
            "User registered",
            extra={"user_id": str(user.id), "role": role.value},
        )
        return to_public_profile(user)

    def _validate_registration(
        self,
        email: str,
        password: str,
        profile: Optional[Mapping[str, Any]],
    ) -> tuple[str, Dict[str, Any]]:
        errors: Dict[str, str] = {}

        normalized = ""
        if not (email or "").strip():
            errors["email"] = "Email is required"
        else:
            try:
                normalized = canonical_email(email)
            except EmailNotValidError as e:
                errors["email"] = str(e)

        problem = self.password_policy.check(password or "")
        if problem:
            errors["password"] = problem

        profile_fields = dict(profile or {})
        for key in sorted(RESERVED_PROFILE_KEYS.intersection(profile_fields)):
            errors[f"profile.{key}"] = "Reserved field name"

        if errors:
            raise ValidationError(errors)
        return normalized, profile_fields
