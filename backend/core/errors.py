# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Error taxonomy and the FastAPI handlers that render it.

Every error leaves the API in the same envelope::

    {"success": false, "error": "<user-safe message>", "details": [...]}

``details`` is only present for validation failures (field errors are safe
to show) and, for upstream failures, when ``expose_error_details`` is on.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from core.logger import logger


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str | None = None, details: list | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class ConflictError(AppError):
    # Duplicate e-mail is reported as a plain bad request
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User with this email already exists"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UpstreamError(AppError):
    """A store or provider failure.  ``raw`` is logged, never shown by default."""

    default_message = "Server error"

    def __init__(self, message: str | None = None, raw: str | None = None):
        super().__init__(message)
        self.raw = raw


def register_exception_handlers(app: FastAPI, expose_details: bool = False) -> None:
    """Attach the JSON renderers for the taxonomy above to *app*."""

    async def _app_error(request: Request, exc: AppError) -> JSONResponse:
        body = {"success": False, "error": exc.message}
        if isinstance(exc, UpstreamError):
            logger.error("%s %s | upstream failure: %s", request.method, request.url.path, exc.raw)
            if expose_details and exc.raw:
                body["details"] = exc.raw
        elif exc.details:
            body["details"] = exc.details

        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        return JSONResponse(status_code=exc.status_code, content=body, headers=headers)

    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Validation failed", "details": details},
        )

    async def _store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(
            "%s %s | database error", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Server error"},
        )

    app.add_exception_handler(AppError, _app_error)
    app.add_exception_handler(RequestValidationError, _request_validation)
    app.add_exception_handler(SQLAlchemyError, _store_error)
