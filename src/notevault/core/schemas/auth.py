"""
Authentication and account schemas.

These schemas define the API contracts for registration, login, JWT token
management and profile updates.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class LoginRequest(BaseModel):
    """User login request schema."""

    email: EmailStr = Field(description="Account e-mail")
    password: str = Field(min_length=1, max_length=128, description="User password")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "jane@example.com", "password": "securepassword123"}
        }
    )


class RegisterRequest(BaseModel):
    """User registration request schema."""

    email: EmailStr = Field(description="Unique e-mail address")
    name: str = Field(min_length=1, max_length=100, description="Display name")
    password: str = Field(min_length=8, max_length=128, description="User password")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "jane@example.com",
                "name": "Jane Doe",
                "password": "securepassword123",
            }
        }
    )


class UserResponse(BaseModel):
    """User information response schema."""

    id: uuid.UUID = Field(description="User unique identifier")
    email: str = Field(description="E-mail address")
    name: str = Field(description="Display name")
    role: str = Field(description="USER or ADMIN")
    is_active: bool = Field(description="Whether user account is active")
    profile_picture: Optional[str] = Field(default=None, description="Profile picture URL")
    created_at: datetime = Field(description="Account creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """Public view of a user, embedded in notes and share lists."""

    id: uuid.UUID
    name: str
    email: str
    profile_picture: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """JWT token response schema."""

    access_token: str = Field(description="JWT access token")
    refresh_token: str = Field(description="Opaque refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(description="Token expiration time in seconds")
    user: UserResponse = Field(description="User information")


class RefreshTokenRequest(BaseModel):
    """Refresh token request schema."""

    refresh_token: str = Field(min_length=1, description="Refresh token from login")


class PasswordChangeRequest(BaseModel):
    """Password change request schema."""

    current_password: str = Field(description="Current password")
    new_password: str = Field(min_length=8, max_length=128, description="New password")


class UserUpdateRequest(BaseModel):
    """User profile update request schema."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100, description="Display name")
    profile_picture: Optional[str] = Field(
        default=None, max_length=500, description="Profile picture URL from the file store"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "Jane D.", "profile_picture": "https://cdn.example.com/u/jane.png"}
        }
    )


class Identity(BaseModel):
    """What a bearer credential resolves to."""

    id: uuid.UUID
    role: str
    is_active: bool

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"
