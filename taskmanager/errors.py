"""Domain error taxonomy.

Every error carries the HTTP status it maps to at the API boundary; the
stores raise these and never deal with responses themselves.
"""


class TaskManagerError(Exception):
    """Base class for errors raised by the task manager."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TaskManagerError):
    """Malformed or missing input fields."""

    status_code = 400


class AuthError(TaskManagerError):
    """Missing, invalid or expired token, or bad credentials."""

    status_code = 401


class NotFoundError(TaskManagerError):
    """Unknown resource id for the authenticated owner."""

    status_code = 404


class ConflictError(TaskManagerError):
    """Request conflicts with existing state."""

    status_code = 409


class DuplicateEmailError(ConflictError):
    """A user with this email is already registered."""

    def __init__(self, email: str):
        super().__init__("User with this email already exists")
        self.email = email


class StorageError(TaskManagerError):
    """The document store could not be read or written."""

    status_code = 500


class CorruptionError(StorageError):
    """A stored document could not be decoded into valid records."""
