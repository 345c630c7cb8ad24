"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from taskmanager.api.dependencies import (
    get_credential_store,
    get_current_user,
    get_token_service,
)
from taskmanager.errors import AuthError
from taskmanager.models.user import User
from taskmanager.schemas.auth import (
    AuthData,
    AuthResponse,
    UserEnvelope,
    UserLogin,
    UserRegister,
    UserResponse,
)
from taskmanager.schemas.common import MessageResponse
from taskmanager.services.auth import TokenService
from taskmanager.services.users import CredentialStore

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    users: Annotated[CredentialStore, Depends(get_credential_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    """Register a new user."""
    # DuplicateEmailError propagates as 409
    user = users.create(user_data.email, user_data.password, user_data.name)
    token = tokens.issue(user.id, user.email)

    return AuthResponse(data=AuthData(user=UserResponse.model_validate(user), token=token))


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    users: Annotated[CredentialStore, Depends(get_credential_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    """Login with email and password."""
    user = users.authenticate(credentials.email, credentials.password)
    if not user:
        raise AuthError("Invalid email or password")

    token = tokens.issue(user.id, user.email)

    return AuthResponse(data=AuthData(user=UserResponse.model_validate(user), token=token))


@router.get("/me", response_model=UserEnvelope)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return UserEnvelope(data=UserResponse.model_validate(current_user))


@router.post("/logout", response_model=MessageResponse)
def logout(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Logout (client should discard token)."""
    return MessageResponse(message="Logged out successfully")
