"""Exception handlers rendering every failure as Problem Details."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, cast

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from .logging import log_context
from .problem_details import (
    PROBLEM_MEDIA_TYPE,
    ApiError,
    ProblemDetails,
    ProblemDetailsErrorItem,
    default_error_type,
    error_items,
    status_title,
)

logger = logging.getLogger("changesets_api.errors")

type ExceptionHandler = Callable[[Request, Exception], Response | Awaitable[Response]]


def problem_response(
    request: Request,
    *,
    status_code: int,
    error_type: str | None = None,
    detail: str | None = None,
    errors: list[ProblemDetailsErrorItem] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    problem = ProblemDetails(
        type=error_type or default_error_type(status_code),
        title=status_title(status_code),
        status=status_code,
        detail=detail,
        instance=request.url.path,
        request_id=getattr(request.state, "correlation_id", None),
        errors=errors,
    )
    return JSONResponse(
        status_code=status_code,
        content=problem.model_dump(by_alias=True, exclude_none=True),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


def _log_server_error(request: Request, event: str, **extra: Any) -> None:
    logger.error(
        event,
        extra=log_context(path=request.url.path, method=request.method, **extra),
    )


def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        _log_server_error(
            request, "api_error", status_code=exc.status_code, error_type=exc.error_type
        )
    return problem_response(
        request,
        status_code=exc.status_code,
        error_type=exc.error_type,
        detail=exc.detail,
        headers=exc.headers,
    )


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing failures (404/405) and any ``HTTPException`` raised by dependencies."""

    detail: str | None = None
    errors: list[ProblemDetailsErrorItem] | None = None
    if isinstance(exc.detail, list):
        errors = error_items(exc.detail)
    elif exc.detail is not None:
        detail = str(exc.detail)

    if exc.status_code >= 500:
        _log_server_error(request, "http_exception", status_code=exc.status_code)
        detail, errors = "Internal server error", None

    return problem_response(
        request,
        status_code=exc.status_code,
        detail=detail,
        errors=errors,
        headers=getattr(exc, "headers", None),
    )


def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Reject malformed parameters as ``rest_invalid_param`` naming each bad field."""

    errors = error_items(exc.errors())
    invalid = sorted({item.path for item in errors if item.path})
    detail = f"Invalid parameter(s): {', '.join(invalid)}" if invalid else "Invalid request"
    return problem_response(
        request,
        status_code=status.HTTP_400_BAD_REQUEST,
        error_type="rest_invalid_param",
        detail=detail,
        errors=errors,
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception",
        extra=log_context(
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
        ),
    )
    return problem_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    handlers: dict[type[Exception], Callable[..., Response]] = {
        RequestValidationError: request_validation_exception_handler,
        StarletteHTTPException: http_exception_handler,
        ApiError: api_error_handler,
        Exception: unhandled_exception_handler,
    }
    for exc_class, handler in handlers.items():
        app.add_exception_handler(exc_class, cast(ExceptionHandler, handler))


__all__ = [
    "ExceptionHandler",
    "api_error_handler",
    "http_exception_handler",
    "problem_response",
    "register_exception_handlers",
    "request_validation_exception_handler",
    "unhandled_exception_handler",
]
