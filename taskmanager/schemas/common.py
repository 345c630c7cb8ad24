"""Response envelopes shared by all endpoints."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Success response carrying only a message."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Failure response."""

    success: bool = False
    error: str | list[str]
    detail: str | None = None
