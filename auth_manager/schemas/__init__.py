"""
Pydantic schemas for API request/response validation.
"""

from auth_manager.schemas.auth import (
    AuthenticateRequest,
    PlayerProfile,
    PublisherProfile,
    RegisterPlayerRequest,
    RegisterPublisherRequest,
    TokenResponse,
    UserProfile,
)
from auth_manager.schemas.common import ErrorResponse, HealthResponse

__all__ = [
    "AuthenticateRequest",
    "PlayerProfile",
    "PublisherProfile",
    "RegisterPlayerRequest",
    "RegisterPublisherRequest",
    "TokenResponse",
    "UserProfile",
    "ErrorResponse",
    "HealthResponse",
]
