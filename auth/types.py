"""Pydantic models for auth domain."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    """A registered user. Never carries the password hash."""

    id: UUID
    email: EmailStr
    role: Role = Role.USER
    is_active: bool = True
    created_at: datetime
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}

    def public(self) -> dict:
        """Fields safe to return to API callers."""
        return {
            "id": str(self.id),
            "email": self.email,
            "role": self.role.value,
        }


class Session(BaseModel):
    """An active user session."""

    token: str = Field(..., description="Session token (opaque string)")
    user_id: UUID
    created_at: datetime
    expires_at: datetime
    last_activity_at: datetime


class LoginRequest(BaseModel):
    """Request payload for password login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=1024)


class AuthenticatedUser(BaseModel):
    """User info returned after successful authentication."""

    user: User
    session: Session
