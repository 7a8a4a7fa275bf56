"""Exception handlers that translate auth errors to HTTP responses."""

from __future__ import annotations

from typing import cast

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from changesets_api.common.exceptions import ExceptionHandler, problem_response

from ..auth.errors import AuthenticationError


def _handle_authentication_error(request: Request, exc: AuthenticationError) -> JSONResponse:
    return problem_response(
        request,
        status_code=status.HTTP_401_UNAUTHORIZED,
        error_type="unauthorized",
        detail=str(exc) or "Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )


def register_auth_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(
        AuthenticationError,
        cast(ExceptionHandler, _handle_authentication_error),
    )


__all__ = ["register_auth_exception_handlers"]
