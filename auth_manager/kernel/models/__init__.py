"""
Kernel data models.
"""

from auth_manager.kernel.models.base import Base, generate_uuid
from auth_manager.kernel.models.user import User, UserRole, normalize_email

__all__ = [
    "Base",
    "generate_uuid",
    "User",
    "UserRole",
    "normalize_email",
]
