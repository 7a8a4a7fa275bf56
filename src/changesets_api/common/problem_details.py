"""Problem Details payloads shared by every error response.

The ``type`` member carries the machine-readable error code (for example
``rest_cannot_edit``) and ``detail`` the human-readable message.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from http import HTTPStatus
from typing import Any

from pydantic import Field

from .schema import BaseSchema

PROBLEM_MEDIA_TYPE = "application/problem+json"

# Error code used when the raiser did not supply one.
_FALLBACK_TYPES: dict[int, str] = {
    400: "rest_invalid_param",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    410: "gone",
    500: "internal_error",
    503: "service_unavailable",
}

_REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})


class ProblemDetailsErrorItem(BaseSchema):
    """One offending field in a rejected request."""

    path: str | None = None
    message: str
    code: str | None = None


class ProblemDetails(BaseSchema):
    type: str
    title: str
    status: int
    detail: str | None = None
    instance: str
    request_id: str | None = Field(default=None, alias="requestId")
    errors: list[ProblemDetailsErrorItem] | None = None


class ApiError(RuntimeError):
    """An error that maps straight onto a Problem Details response."""

    def __init__(
        self,
        *,
        error_type: str,
        status_code: int,
        detail: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(detail or error_type)
        self.error_type = error_type
        self.status_code = status_code
        self.detail = detail
        self.headers = headers


def default_error_type(status_code: int) -> str:
    return _FALLBACK_TYPES.get(status_code, "error")


def status_title(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def format_error_path(loc: Iterable[Any] | None) -> str | None:
    """Render a pydantic ``loc`` as ``settings.blogname[0]``, minus its request location."""

    entries = list(loc or ())
    if entries and entries[0] in _REQUEST_LOCATIONS:
        entries = entries[1:]
    path = ""
    for entry in entries:
        if isinstance(entry, int):
            path += f"[{entry}]"
        else:
            path = f"{path}.{entry}" if path else str(entry)
    return path or None


def error_items(errors: Iterable[Mapping[str, Any]]) -> list[ProblemDetailsErrorItem]:
    """Convert pydantic error dicts into Problem Details items."""

    return [
        ProblemDetailsErrorItem(
            path=format_error_path(error.get("loc")),
            message=str(error.get("msg") or "Invalid value"),
            code=error.get("type"),
        )
        for error in errors
    ]


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "ApiError",
    "ProblemDetails",
    "ProblemDetailsErrorItem",
    "default_error_type",
    "error_items",
    "format_error_path",
    "status_title",
]
