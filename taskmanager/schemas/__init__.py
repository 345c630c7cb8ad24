"""Pydantic schemas for API requests and responses."""

from taskmanager.schemas.auth import (
    AuthData,
    AuthResponse,
    UserEnvelope,
    UserLogin,
    UserRegister,
    UserResponse,
)
from taskmanager.schemas.common import ErrorResponse, MessageResponse
from taskmanager.schemas.task import (
    TaskCreate,
    TaskEnvelope,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "AuthData",
    "AuthResponse",
    "UserEnvelope",
    "MessageResponse",
    "ErrorResponse",
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
    "TaskEnvelope",
    "TaskListResponse",
]
