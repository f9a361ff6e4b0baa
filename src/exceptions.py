"""Application error taxonomy.

Every error raised by the services carries the HTTP status it maps to at the
API boundary. Handlers in ``src.main`` render them as the error envelope.
"""

from typing import Any

from fastapi import status


class ApiError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, errors: list[Any] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationError(ApiError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthError(ApiError):
    """Bad credentials, bad/expired/mismatched token, or missing auth context."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(ApiError):
    """A unique field is already taken."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class DependencyError(ApiError):
    """An external collaborator (media storage, token signing) failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"
