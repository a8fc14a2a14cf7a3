"""
Domain error taxonomy and the global exception handlers that render it.

Services raise the classes below; the handlers translate them (and raw
SQLAlchemy errors) into JSON responses without leaking stack traces.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for every error the API reports to a caller."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "APP_ERROR"
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, *, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": self.message, "code": self.code, "success": False}
        if self.details is not None:
            body["errors"] = self.details
        return body


# ── 422 ─────────────────────────────────────────────────────────────
class ValidationError(AppError):
    status_code = 422
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, *, field: str | None = None) -> None:
        details = [{"field": field, "message": message}] if field else None
        super().__init__(message, details=details)
        self.field = field


# ── 401 ─────────────────────────────────────────────────────────────
class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTHENTICATION_ERROR"
    default_message = "Could not validate credentials"


class InvalidCredentials(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class MissingToken(AuthenticationError):
    code = "MISSING_TOKEN"
    default_message = "Authentication required"


class InvalidToken(AuthenticationError):
    code = "INVALID_TOKEN"
    default_message = "Invalid or expired token"


class UnknownSubject(AuthenticationError):
    code = "UNKNOWN_SUBJECT"
    default_message = "Invalid user"


# ── 403 ─────────────────────────────────────────────────────────────
class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "AUTHORIZATION_ERROR"
    default_message = "Access denied"


class SelfRatingForbidden(AuthorizationError):
    code = "SELF_RATING_FORBIDDEN"
    default_message = "You cannot rate your own store"


# ── 404 ─────────────────────────────────────────────────────────────
class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class UserNotFound(NotFoundError):
    code = "USER_NOT_FOUND"
    default_message = "User not found"


class StoreNotFound(NotFoundError):
    code = "STORE_NOT_FOUND"
    default_message = "Store not found"


class RatingNotFound(NotFoundError):
    code = "RATING_NOT_FOUND"
    default_message = "Rating not found"


class NoStoresForOwner(NotFoundError):
    code = "NO_STORES_FOR_OWNER"
    default_message = "No stores found for this owner"


# ── 409 ─────────────────────────────────────────────────────────────
class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Resource already exists with this unique constraint"


class EmailAlreadyRegistered(ConflictError):
    code = "EMAIL_ALREADY_REGISTERED"
    default_message = "User with this email already exists"


class OwnerHasStores(ConflictError):
    code = "OWNER_HAS_STORES"
    default_message = "User still owns stores; delete or reassign them first"


# ── 500 ─────────────────────────────────────────────────────────────
class StorageError(AppError):
    code = "STORAGE_ERROR"
    default_message = "Internal database error"


# ── Handlers ────────────────────────────────────────────────────────
async def _app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.code, exc.message, exc_info=exc)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation failed",
            "code": ValidationError.code,
            "errors": errors,
            "success": False,
        },
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(status_code=409, content=ConflictError().to_dict())


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(status_code=500, content=StorageError().to_dict())


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(AppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
