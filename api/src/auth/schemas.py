"""Pydantic schemas for authentication.

Request and response models for registration, login and the
author summary embedded in posts, comments and likes.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class RegisterRequest(BaseModel):
    """User registration request."""

    email: EmailStr = Field(..., description="User email address")
    name: str = Field(..., min_length=2, max_length=100, description="Display name")
    password: str = Field(
        ..., min_length=8, max_length=128, description="Password (min 8 chars)"
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Trim surrounding whitespace from the display name."""
        stripped = v.strip()
        if len(stripped) < 2:
            raise ValueError("Name must have at least 2 characters")
        return stripped


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., min_length=1, description="User password")


class UserResponse(BaseModel):
    """Public user data."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    created_at: datetime | None = None


class TokenResponse(BaseModel):
    """Login response with access token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: UserResponse


class AuthorSummary(BaseModel):
    """Populated author/user reference."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
