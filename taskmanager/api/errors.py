"""Mapping of errors to JSON error envelopes."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskmanager.config import Settings
from taskmanager.errors import AuthError, StorageError, TaskManagerError
from taskmanager.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal server error"


def error_response(
    status_code: int,
    error: str | list[str],
    detail: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def format_validation_errors(exc: RequestValidationError) -> list[str]:
    """Turn pydantic error entries into readable messages.

    The leading location part (``body``, ``query``) is dropped so messages
    read as ``title: String should have at most 200 characters``.
    """
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())[1:]]
        msg = err.get("msg", "Invalid value")
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return messages


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Install the error handlers on ``app``."""

    @app.exception_handler(TaskManagerError)
    async def handle_task_manager_error(request: Request, exc: TaskManagerError):
        if isinstance(exc, StorageError):
            logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
            detail = str(exc) if settings.debug else None
            return error_response(exc.status_code, GENERIC_ERROR, detail)

        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        return error_response(exc.status_code, exc.message, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, format_validation_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        detail = repr(exc) if settings.debug else None
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_ERROR, detail)
