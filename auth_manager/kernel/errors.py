"""
Error hierarchy for the identity core.

Caller-correctable failures (validation, conflict, authentication) carry a
message safe to show to clients. Infrastructure failures (hashing, signing,
store) carry a generic public message; details go to the logs only.
"""

from typing import Any, Dict, Optional


class IdentityError(Exception):
    """Base class for every error raised by the identity core."""

    code: str = "IDENTITY_ERROR"
    http_status: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.public_message
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        """REST envelope for this error."""
        return {"error": {"code": self.code, "message": self.public_message}}


class ValidationError(IdentityError):
    """Malformed input; `fields` maps each offending field to a message."""

    code = "VALIDATION_ERROR"
    http_status = 400
    public_message = "Invalid request data"

    def __init__(self, fields: Dict[str, str]):
        self.fields = dict(fields)
        super().__init__(
            "Invalid fields: " + ", ".join(sorted(self.fields))
        )

    def to_response(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.public_message,
                "details": [
                    {"field": name, "message": msg}
                    for name, msg in sorted(self.fields.items())
                ],
            },
        }


class ConflictError(IdentityError):
    """The normalized email is already registered."""

    code = "EMAIL_ALREADY_REGISTERED"
    http_status = 409
    public_message = "Email already registered"


class AuthenticationError(IdentityError):
    """
    Credentials did not match an account.

    Deliberately identical for unknown email and wrong password.
    """

    code = "INVALID_CREDENTIALS"
    http_status = 401
    public_message = "Invalid email or password"

    def __init__(self):
        super().__init__(self.public_message)


class HashingError(IdentityError):
    """The password hasher failed (entropy source, backend)."""

    code = "INTERNAL_ERROR"


class SigningError(IdentityError):
    """Token signing key is missing or malformed, or signing failed."""

    code = "INTERNAL_ERROR"


class StoreUnavailableError(IdentityError):
    """The user store could not be reached."""

    code = "SERVICE_UNAVAILABLE"
    http_status = 503
    public_message = "Service temporarily unavailable"
