"""
Error taxonomy for ResumeForge API.

Services raise these; a single exception handler in app.main turns them into
``{"detail": ..., "code": ...}`` responses with the matching status code.
"""
from fastapi import status


class ServiceError(Exception):
    """Base service error with HTTP semantics."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str, *, code: str = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class InvalidInputError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_input"


class UnauthenticatedError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"


class ForbiddenError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class GoneError(ServiceError):
    status_code = status.HTTP_410_GONE
    code = "gone"


class RateLimitedError(ServiceError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "rate_limited"


class InternalError(ServiceError):
    """Store or renderer failure. The message is always generic."""


class ConflictError(Exception):
    """Raised by the store when a conditional update's precondition fails."""


class RenderError(Exception):
    """Raised by a renderer when it cannot produce a PDF."""
