"""
Authentication schemas.
"""

import uuid
from datetime import datetime
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from auth_manager.kernel.models.user import User, UserRole


class RegisterPlayerRequest(BaseModel):
    """Player registration request."""

    model_config = ConfigDict(extra="allow")

    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=1024)
    display_name: Optional[str] = Field(None, max_length=255)

    def profile_fields(self) -> Dict[str, Any]:
        """Everything except the credentials."""
        return self.model_dump(exclude={"email", "password"}, exclude_none=True)


class RegisterPublisherRequest(BaseModel):
    """Publisher registration request."""

    model_config = ConfigDict(extra="allow")

    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=1024)
    company_name: Optional[str] = Field(None, max_length=255)

    def profile_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"email", "password"}, exclude_none=True)


class AuthenticateRequest(BaseModel):
    """Login request."""

    email: str
    password: str


class _ProfileBase(BaseModel):
    id: uuid.UUID
    email: str
    created_at: datetime
    profile: Dict[str, Any] = Field(default_factory=dict)


class PlayerProfile(_ProfileBase):
    """Public view of a registered player."""

    role: Literal["Player"] = UserRole.PLAYER.value


class PublisherProfile(_ProfileBase):
    """Public view of a registered publisher."""

    role: Literal["Publisher"] = UserRole.PUBLISHER.value


UserProfile = Annotated[
    Union[PlayerProfile, PublisherProfile],
    Field(discriminator="role"),
]


def to_public_profile(user: User) -> Union[PlayerProfile, PublisherProfile]:
    """Map a stored user to its public, hash-free view."""
    model = PlayerProfile if user.role == UserRole.PLAYER.value else PublisherProfile
    return model(
        id=user.id,
        email=user.email,
        created_at=user.created_at,
        profile=dict(user.profile or {}),
    )


class TokenResponse(BaseModel):
    """Authentication token response."""

    token: str
    token_type: str = "bearer"
    expires_at: datetime
    expires_in: int
