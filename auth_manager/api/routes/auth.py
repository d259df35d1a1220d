"""
Authentication endpoints.
"""

from fastapi import APIRouter, Response, status

from auth_manager.api.deps import IdentityServiceDep
from auth_manager.schemas.auth import (
    AuthenticateRequest,
    PlayerProfile,
    PublisherProfile,
    RegisterPlayerRequest,
    RegisterPublisherRequest,
    TokenResponse,
)
from auth_manager.schemas.common import ErrorResponse

router = APIRouter()

_REGISTER_ERRORS = {
    400: {"model": ErrorResponse, "description": "Invalid email, password or profile fields"},
    409: {"model": ErrorResponse, "description": "Email already registered"},
}


def _set_location(response: Response, user_id) -> None:
    response.headers["Location"] = f"/api/users/{user_id}"


@router.post(
    "/register/player",
    response_model=PlayerProfile,
    status_code=status.HTTP_201_CREATED,
    responses=_REGISTER_ERRORS,
)
async def register_player(
    data: RegisterPlayerRequest,
    response: Response,
    identity_service: IdentityServiceDep,
):
    """Register a new player account."""
    profile = await identity_service.register_player(
        email=data.email,
        password=data.password,
        profile=data.profile_fields(),
    )
    _set_location(response, profile.id)
    return profile


@router.post(
    "/register/publisher",
    response_model=PublisherProfile,
    status_code=status.HTTP_201_CREATED,
    responses=_REGISTER_ERRORS,
)
async def register_publisher(
    data: RegisterPublisherRequest,
    response: Response,
    identity_service: IdentityServiceDep,
):
    """Register a new publisher account."""
    profile = await identity_service.register_publisher(
        email=data.email,
        password=data.password,
        profile=data.profile_fields(),
    )
    _set_location(response, profile.id)
    return profile


@router.post(
    "/authenticate",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid email or password"}},
)
async def authenticate(
    data: AuthenticateRequest,
    identity_service: IdentityServiceDep,
):
    """Authenticate with email and password and return an access token."""
    return await identity_service.authenticate(email=data.email, password=data.password)
