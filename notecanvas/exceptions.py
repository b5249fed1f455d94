"""Application error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe to
show to a client. Detail that must stay server-side belongs in the log, not in
the message.
"""

from fastapi import status


class AppError(Exception):
    """Base application error (unexpected failure)."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

    def __init__(self, message: str | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class AuthError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"


class InvalidCredentialsError(AuthError):
    """Email/password pair did not match an account."""

    default_message = "Invalid email or password"


class NotFoundError(AppError):
    """Resource does not exist or is not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    """Resource already exists."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class DuplicateEmailError(ConflictError):
    default_message = "User with this email already exists"


class StorageError(AppError):
    """Document store failure. Safe to retry with backoff."""

    default_message = "Storage failure"


class UpstreamError(AppError):
    """Completion service failure."""

    default_message = "Completion service failure"


class ConnectivityError(AppError):
    """The server could not be reached (client side only).

    Unlike AuthError this says nothing about whether a session is valid.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Could not reach the server"


ERRORS_BY_STATUS: dict[int, type[AppError]] = {
    status.HTTP_400_BAD_REQUEST: ValidationError,
    status.HTTP_401_UNAUTHORIZED: AuthError,
    status.HTTP_404_NOT_FOUND: NotFoundError,
    status.HTTP_409_CONFLICT: ConflictError,
}


def error_for_status(status_code: int, message: str | None = None) -> AppError:
    """Rebuild an application error from an HTTP status (used by the client)."""
    error_cls = ERRORS_BY_STATUS.get(status_code)
    if error_cls is not None:
        return error_cls(message)
    if status_code >= 500:
        return StorageError(message)
    return AppError(message)
