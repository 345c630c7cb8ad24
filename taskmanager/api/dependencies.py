"""FastAPI dependencies for authentication and storage."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskmanager.config import Settings
from taskmanager.errors import AuthError
from taskmanager.models.user import User
from taskmanager.services.auth import TokenService
from taskmanager.services.tasks import TaskStore
from taskmanager.services.users import CredentialStore

# Missing or non-Bearer headers are rejected by get_current_user, not here.
security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Get the settings the running app was built with."""
    return request.app.state.settings


def get_credential_store(request: Request) -> CredentialStore:
    """Get the shared credential store."""
    return request.app.state.credential_store


def get_task_store(request: Request) -> TaskStore:
    """Get the shared task store."""
    return request.app.state.task_store


def get_token_service(request: Request) -> TokenService:
    """Get the token service."""
    return request.app.state.token_service


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    users: Annotated[CredentialStore, Depends(get_credential_store)],
) -> User:
    """Resolve the bearer token to a user or reject the request with 401."""
    if credentials is None:
        raise AuthError("No token provided. Authorization header must be: Bearer <token>")

    claims = tokens.verify(credentials.credentials)
    if claims is None:
        raise AuthError("Invalid or expired token")

    user = users.find_by_id(claims.user_id)
    if user is None:
        raise AuthError("User not found")

    return user
