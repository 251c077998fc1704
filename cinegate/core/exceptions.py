"""
Exception taxonomy and global exception handling for the application.
Every failure leaves the API as {"success": false, "error": ..., "code": ...}.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

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


class ValidationError(AppError):
    """Malformed or missing input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(AppError):
    """Bad credentials or session token."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    """Resource not found error."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    """Uniqueness violation the caller can fix."""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class RateLimitedError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many attempts. Please try again later."


class ConfigurationError(AppError):
    """Required environment configuration is missing."""
    default_message = "Server configuration error"


class StoreError(AppError):
    """The credential store failed. The message stays generic, details go to the log."""
    default_message = "Database error"


class GenerationExhaustedError(StoreError):
    default_message = "Failed to generate a unique access code"


class AccessCodeError(AppError):
    """
    Base for access code verification failures.

    The status code depends on the caller: 401 when verifying a code on its
    own, 400 when the code is part of a registration request.
    """
    status_code = status.HTTP_401_UNAUTHORIZED


class AccessCodeNotFoundError(AccessCodeError):
    default_message = "Invalid or expired access code"


class AccessCodeExpiredError(AccessCodeError):
    default_message = "Access code has expired"


class AccessCodeAlreadyUsedError(AccessCodeError):
    default_message = "Access code has already been used"


def error_payload(exc: AppError) -> Dict[str, Any]:
    content: Dict[str, Any] = {
        "success": False,
        "error": exc.message,
        "code": exc.__class__.__name__,
    }
    if exc.details:
        content["details"] = exc.details
    return content


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError with its own status code."""
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            error=exc.__class__.__name__,
            message=exc.message,
            path=request.url.path,
        )
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc))


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ValidationError.default_message
    first = errors[0]
    ctx = first.get("ctx") or {}
    # Messages raised by our own validators are already user facing
    if "error" in ctx:
        return str(ctx["error"])
    if first.get("type") in ("missing", "json_invalid"):
        return "Invalid request format"
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Turn schema failures into the same 400 shape as ValidationError."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_payload(ValidationError(_validation_message(exc))),
    )


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database failures surface as a generic StoreError; the driver message stays in the log."""
    logger.exception("Database error", path=request.url.path)
    return JSONResponse(
        status_code=StoreError.status_code,
        content=error_payload(StoreError()),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all uncaught exceptions globally."""
    if isinstance(exc, AppError):
        return await app_error_handler(request, exc)

    logger.exception("Unexpected error occurred", path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Internal server error",
            "code": "InternalServerError",
        },
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
