"""Error taxonomy and the handlers that render it.

Every business-rule violation raised inside the core is a ``StudioError``
subclass. The handlers registered by :func:`register_exception_handlers`
turn them into the stable ``{"error": ..., "details": ...}`` shape. Storage
failures and anything unexpected become a 500; exception text is only
included when running in development.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from studio.core.config import get_settings

logger = logging.getLogger(__name__)


class StudioError(Exception):
    """Base exception for all business-rule failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(StudioError):
    """Malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class NotFoundError(StudioError):
    """Missing session, participant, response or OTP match."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(StudioError):
    """Uniqueness violation, e.g. a duplicate phone number."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class ForbiddenError(StudioError):
    """Wrong role, admin-locked response or unauthorized OAuth email."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class UnauthorizedError(StudioError):
    """No credentials were presented."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access token required"


class InvalidTokenError(UnauthorizedError):
    """Credentials were presented but failed verification."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid or expired token"


class InternalError(StudioError):
    """Storage or other server-side failure."""


def error_body(message: str, details: Any = None) -> dict:
    body: dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    return body


async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.details),
        headers=headers,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation failed", messages),
    )


def debug_details(request: Request, exc: Exception) -> str | None:
    """Exception text for the response body, in development only.

    Settings are resolved through the app's dependency overrides so the
    environment seen here matches the one the routes see.
    """
    provider = request.app.dependency_overrides.get(get_settings, get_settings)
    return str(exc) if provider().environment == "development" else None


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"Storage failure on {request.method} {request.url.path}")
    return await studio_error_handler(
        request, InternalError(details=debug_details(request, exc))
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return await studio_error_handler(
        request, InternalError(details=debug_details(request, exc))
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the taxonomy handlers to the application."""
    app.add_exception_handler(StudioError, studio_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
