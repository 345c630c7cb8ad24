"""Authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserRegister(BaseModel):
    """User registration request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    name: str | None = Field(None, max_length=255)


class UserLogin(BaseModel):
    """User login request.

    The email format is not checked here: an address that could never have
    registered simply fails authentication.
    """

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    created_at: datetime


class AuthData(BaseModel):
    """Token and user returned by register and login."""

    user: UserResponse
    token: str
    token_type: str = "bearer"  # noqa: S105


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    success: bool = True
    data: AuthData


class UserEnvelope(BaseModel):
    """Current user response."""

    success: bool = True
    data: UserResponse
