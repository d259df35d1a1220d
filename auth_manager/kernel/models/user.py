"""
User model for identity management.

Players and publishers share one table; `role` is the discriminant and the
role-specific fields live in the `profile` JSON payload.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from auth_manager.kernel.models.base import Base, generate_uuid, utcnow


class UserRole(str, Enum):
    """User kinds that can register."""
    PLAYER = "Player"
    PUBLISHER = "Publisher"


def normalize_email(email: str) -> str:
    """Uniqueness key for an email address."""
    return (email or "").strip().lower()


class User(Base):
    """User account model."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    # Always stored normalized
    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    profile: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
