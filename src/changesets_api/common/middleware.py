"""HTTP middleware for the changesets API."""

from __future__ import annotations

import logging
import time
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from changesets_api.settings import Settings

from .logging import REQUEST_LOGGER_NAME, bind_request_context, log_context, reset_request_context

REQUEST_ID_HEADER = "X-Request-ID"

# Response headers browser clients need to page through collections.
EXPOSED_HEADERS = ("X-WP-Total", "X-WP-TotalPages", "Link", "Location", REQUEST_ID_HEADER)

request_logger = logging.getLogger(REQUEST_LOGGER_NAME)


def _request_fields(request: Request, started: float, **extra: Any) -> dict[str, Any]:
    return log_context(
        path=request.url.path,
        method=request.method,
        duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
        **extra,
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation id, echo it back and log the outcome."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.correlation_id = request_id
        token = bind_request_context(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            request_logger.error("request.error", extra=_request_fields(request, started))
            raise
        else:
            request_logger.info(
                "request.complete",
                extra=_request_fields(request, started, status_code=response.status_code),
            )
        finally:
            reset_request_context(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def register_middleware(app: FastAPI, *, settings: Settings) -> None:
    if settings.server_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.server_cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=list(EXPOSED_HEADERS),
        )
    app.add_middleware(RequestContextMiddleware)


__all__ = ["REQUEST_ID_HEADER", "RequestContextMiddleware", "register_middleware"]
