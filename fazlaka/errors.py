"""Application error taxonomy and the JSON error envelope.

Every failure leaves the API as ``{"error": "<message>"}`` with a 4xx/5xx
status. Services raise the ``AppError`` subclasses below; anything else that
escapes a route is logged and reported as a generic 500 so no internal
detail reaches the caller.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class AppError(Exception):
    """Base exception for errors surfaced to API callers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(AppError):
    """Unique value (email) already taken."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidProofError(AppError):
    """Proof artifact is wrong, expired, already used or never issued.

    The message is the same for all of those cases.
    """

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):
    """Missing or invalid session."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AppError):
    """Authenticated, but not allowed to perform this operation."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    """No matching record."""

    status_code = status.HTTP_404_NOT_FOUND


class UpstreamError(AppError):
    """A remote collaborator (store, mail transport, identity provider) failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(message: str, status_code: int) -> JSONResponse:
    """Build the ``{"error": ...}`` envelope."""
    return JSONResponse(status_code=status_code, content={"error": message})


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return error_response(INTERNAL_ERROR_MESSAGE, exc.status_code)
    return error_response(exc.message, exc.status_code)


async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return error_response(message, status.HTTP_400_BAD_REQUEST)


async def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return error_response(f"Rate limit exceeded: {exc.detail}", status.HTTP_429_TOO_MANY_REQUESTS)


async def _database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return error_response(INTERNAL_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(INTERNAL_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error envelope on the application."""
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.add_exception_handler(SQLAlchemyError, _database_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
