"""
Domain errors and global exception handlers (prevent stack-trace leakage).

Every error the services raise derives from :class:`IdeaFlowError` and
carries the HTTP status it maps to, so the API layer never has to
translate them by hand.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class IdeaFlowError(Exception):
    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


# ── Validation ──────────────────────────────────────────────────────
class ValidationFailure(IdeaFlowError):
    status_code = 400
    detail = "Invalid request"


class DuplicateEmail(ValidationFailure):
    detail = "User already exists."


class EmptyContent(ValidationFailure):
    detail = "Idea content must not be empty"


# ── Auth ────────────────────────────────────────────────────────────
class AuthFailure(IdeaFlowError):
    status_code = 401
    detail = "Could not validate credentials"


class InvalidCredentials(AuthFailure):
    detail = "Invalid credentials."


class AuthorizationFailure(IdeaFlowError):
    status_code = 403
    detail = "Operation not permitted"


class SelfModification(AuthorizationFailure):
    detail = "You cannot change your own admin status or delete your own account."


class NotFound(IdeaFlowError):
    status_code = 404
    detail = "Not found"


# ── Persistence / remote ────────────────────────────────────────────
class StorageFailure(IdeaFlowError):
    status_code = 503
    detail = "Storage is unavailable"


class DecodeFailure(IdeaFlowError):
    """Stored value could not be parsed; readers treat the key as absent."""

    detail = "Stored data is malformed"


class GatewayFailure(IdeaFlowError):
    """Remote AI call failed; the gateway absorbs it and returns ``None``."""

    status_code = 502
    detail = "Enhancement service unavailable"


# ── Handlers ────────────────────────────────────────────────────────
async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _domain_error_handler(_request: Request, exc: IdeaFlowError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc, exc_info=exc.__cause__)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IdeaFlowError, _domain_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
