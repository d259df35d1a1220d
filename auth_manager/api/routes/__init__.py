"""
API routes.
"""

from fastapi import APIRouter

from auth_manager.api.routes import auth

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
