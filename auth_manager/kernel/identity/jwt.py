"""
JWT access token issuing and verification.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwk, jwt
from jose.exceptions import JWKError
from pydantic import BaseModel

from auth_manager.config import Settings, resolve_signing_key
from auth_manager.kernel.errors import SigningError
from auth_manager.logging_config import get_logger

logger = get_logger(__name__)

HMAC_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})
RSA_ALGORITHMS = frozenset({"RS256", "RS384", "RS512"})
SUPPORTED_ALGORITHMS = HMAC_ALGORITHMS | RSA_ALGORITHMS

DEFAULT_EXPIRE_MINUTES = 60


class AccessTokenPayload(BaseModel):
    """Decoded access token claims."""

    sub: str  # User ID
    role: str
    iat: datetime
    exp: datetime
    jti: str


class IssuedToken(BaseModel):
    """A freshly signed access token and its expiry."""

    token: str
    expires_at: datetime
    expires_in: int  # Seconds


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JWTManager:
    """
    Signs time-bounded access tokens carrying identity and role claims.

    The signing key is supplied once at construction. A missing or malformed
    key, or an unsupported algorithm, raises SigningError immediately so the
    process never runs without the ability to sign.
    """

    def __init__(
        self,
        secret_key: Optional[str],
        algorithm: str = "HS256",
        access_token_expire_minutes: int = DEFAULT_EXPIRE_MINUTES,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise SigningError(f"Unsupported signing algorithm: {algorithm}")
        if not secret_key or not secret_key.strip():
            raise SigningError("Token signing key is not configured")
        if access_token_expire_minutes <= 0:
            raise SigningError("Token lifetime must be positive")

        try:
            constructed = jwk.construct(secret_key, algorithm)
            if algorithm in RSA_ALGORITHMS:
                if constructed.is_public():
                    raise SigningError("RSA signing requires a private key")
                verify_key = constructed.public_key().to_pem().decode("utf-8")
            else:
                verify_key = secret_key
        except JWKError as e:
            raise SigningError(f"Malformed {algorithm} signing key") from e

        self._signing_key = secret_key
        self._verify_key = verify_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes
        self.issuer = issuer
        self.audience = audience
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "JWTManager":
        """Build the process-wide issuer from configuration."""
        return cls(
            secret_key=resolve_signing_key(settings),
            algorithm=settings.jwt_algorithm,
            access_token_expire_minutes=settings.access_token_expire_minutes,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        )

    @property
    def lifetime(self) -> timedelta:
        return timedelta(minutes=self.access_token_expire_minutes)

    def issue(self, user_id: uuid.UUID, role: str) -> IssuedToken:
        """
        Create a signed access token.

        Args:
            user_id: User's unique identifier (becomes `sub`)
            role: User's role claim

        Returns:
            IssuedToken with the encoded token and its expiry
        """
        now = self._clock()
        expire = now + self.lifetime

        claims = {
            "sub": str(user_id),
            "role": role,
            "iat": now,
            "exp": expire,
            "jti": str(uuid.uuid4()),
        }
        if self.issuer:
            claims["iss"] = self.issuer
        if self.audience:
            claims["aud"] = self.audience

        try:
            token = jwt.encode(claims, self._signing_key, algorithm=self.algorithm)
        except (JWTError, JWKError) as e:
            raise SigningError("Token signing failed") from e

        return IssuedToken(
            token=token,
            expires_at=expire,
            expires_in=int(self.lifetime.total_seconds()),
        )

    def verify(self, token: str) -> Optional[AccessTokenPayload]:
        """
        Verify signature, expiry, issuer and audience of an access token.

        Expiry is checked against the manager's clock.

        Returns:
            AccessTokenPayload if valid, None otherwise
        """
        try:
            payload = jwt.decode(
                token,
                self._verify_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_exp": False, "require_exp": True, "require_iat": True},
            )
        except JWTError:
            return None

        try:
            exp = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
            iat = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
            parsed = AccessTokenPayload(
                sub=payload["sub"],
                role=payload["role"],
                iat=iat,
                exp=exp,
                jti=payload["jti"],
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Signed token is missing required claims")
            return None

        if self._clock() >= parsed.exp:
            return None
        return parsed
