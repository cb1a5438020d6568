"""Global exception handlers for consistent error responses.

Domain errors (AppError subclasses) become ``{"error": {...}}`` bodies with a
status chosen by error type; anything else falls through to a generic 500
that never leaks internals. Every body carries the request_id so a client
report can be matched to the ``request.completed`` log line.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    ErrorDetails,
    LLMAppError,
    NotFoundAppError,
    StoreAppError,
    ValidationAppError,
)
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)

# Checked in order; first isinstance match wins.
_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (ValidationAppError, 400),
    (AuthenticationAppError, 401),
    (NotFoundAppError, 404),
    (LLMAppError, 500),
    (StoreAppError, 500),
)

INTERNAL_ERROR_CODE = "internal_server_error"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def status_code_for(exc: AppError) -> int:
    """Return the HTTP status code for a domain error (400 by default)."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: ErrorDetails | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {"code": code, "message": message, "request_id": get_request_id()}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"error": body})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate a domain error raised by a service or dependency.

    Server-side failures (LLM, store) log at error level; caller mistakes
    log as warnings.
    """
    status_code = status_code_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "error.handled",
        extra={
            "error_code": exc.code,
            "error_type": type(exc).__name__,
            "status": status_code,
            "route": request.url.path,
            "has_details": bool(exc.details),
        },
    )
    return _error_response(status_code, exc.code, exc.message, exc.details)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for anything that escaped the domain error hierarchy.

    The exception text goes to the log only; the client gets a fixed message.
    """
    logger.error(
        "error.unhandled",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={
            "error_type": type(exc).__name__,
            "route": request.url.path,
            "method": request.method,
        },
    )
    return _error_response(500, INTERNAL_ERROR_CODE, INTERNAL_ERROR_MESSAGE)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the domain and fallback handlers on app."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
