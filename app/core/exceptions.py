"""
Global exception handling for the application.
Every account error is a named kind carrying its HTTP status; the handler
renders them all with the same JSON envelope.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Application error"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class EmailInUseError(AppError):
    """Another account already owns the email.

    403 when registering, 400 when a profile update collides.
    """
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "That email is already in use"


class PasswordTooShortError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Password too short!"


class IncorrectCredentialsError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Incorrect email or password"


class SamePasswordError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "New password must be different"


class ResetNotPendingError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "No password reset is pending for this account"


class UserNotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class UserUpdateError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Unable to update user info"


class UnauthorizedException(AppError):
    """Authentication failure error."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class InfrastructureError(AppError):
    """The data store could not be reached or failed mid-operation."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "The account store is unavailable. Please try again later."


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a named application error."""
    headers = None
    if isinstance(exc, UnauthorizedException):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.__class__.__name__,
                "message": exc.message,
                "details": exc.details,
                "path": request.url.path,
            }
        },
        headers=headers,
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all uncaught exceptions globally."""

    if isinstance(exc, AppError):
        return await app_error_handler(request, exc)

    logger.exception("Unexpected error occurred", path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "InternalServerError",
                "message": "An unexpected error occurred. Please try again later.",
                "path": request.url.path,
            }
        },
    )
