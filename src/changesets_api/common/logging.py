"""Logging setup for the changesets API.

Events are dotted names (``changesets.create.success``) logged through the
standard :mod:`logging` module with their fields passed as ``extra``. Every
record is stamped with the correlation id of the request that produced it.
``CHANGESETS_LOG_FORMAT`` picks single-line console output or JSON objects.
"""

from __future__ import annotations

import json
import logging
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from typing import Any

from changesets_api.settings import Settings

REQUEST_LOGGER_NAME = "changesets_api.request"

_correlation_id: ContextVar[str | None] = ContextVar("changesets_correlation_id", default=None)

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "correlation_id",
    "color_message",
}

_SQLALCHEMY_LOGGERS = ("sqlalchemy", "sqlalchemy.engine", "sqlalchemy.pool")


class _EventFormatter(logging.Formatter):
    """Timestamp, correlation id and ``extra`` handling shared by both formats."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=UTC)
        return f"{stamp:%Y-%m-%dT%H:%M:%S}.{int(record.msecs):03d}Z"

    @staticmethod
    def correlation_id(record: logging.LogRecord) -> str:
        return getattr(record, "correlation_id", None) or _correlation_id.get() or "-"

    @staticmethod
    def fields(record: logging.LogRecord) -> dict[str, Any]:
        return {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }


class ConsoleLogFormatter(_EventFormatter):
    """``<time> <LEVEL> <logger> [cid=<id>] <event> key=value ...``"""

    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"{self.formatTime(record)} {record.levelname:<5} {record.name} "
            f"[cid={self.correlation_id(record)}] {record.getMessage()}"
        )
        pairs = [
            f"{key}={'null' if value is None else value}"
            for key, value in sorted(self.fields(record).items())
        ]
        if pairs:
            line = f"{line} {' '.join(pairs)}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class JsonLogFormatter(_EventFormatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
            "correlation_id": self.correlation_id(record),
            **self.fields(record),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


def setup_logging(settings: Settings) -> None:
    """Route all output through one root stream handler.

    Calling it again replaces the previous handler, so app factories can run
    repeatedly in one process.
    """

    handler = logging.StreamHandler()
    handler.setFormatter(
        JsonLogFormatter() if settings.log_format == "json" else ConsoleLogFormatter()
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level)

    levels: dict[str, str | int] = {
        "uvicorn": settings.log_level,
        "uvicorn.error": settings.log_level,
        "uvicorn.access": logging.NOTSET,
        REQUEST_LOGGER_NAME: settings.effective_request_log_level,
    }
    # SQL statements only show up when CHANGESETS_DATABASE_LOG_LEVEL asks for them.
    for name in _SQLALCHEMY_LOGGERS:
        levels[name] = settings.database_log_level or "WARNING"

    for name, level in levels.items():
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(level)


def bind_request_context(correlation_id: str) -> Token[str | None]:
    return _correlation_id.set(correlation_id)


def reset_request_context(token: Token[str | None]) -> None:
    _correlation_id.reset(token)


def log_context(
    *,
    changeset_uuid: str | None = None,
    changeset_id: int | None = None,
    user_id: int | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build the ``extra`` mapping for a changeset event; unset ids are left out."""

    ids = {"changeset_uuid": changeset_uuid, "changeset_id": changeset_id, "user_id": user_id}
    return {**{key: value for key, value in ids.items() if value is not None}, **extra}


__all__ = [
    "REQUEST_LOGGER_NAME",
    "ConsoleLogFormatter",
    "JsonLogFormatter",
    "bind_request_context",
    "log_context",
    "reset_request_context",
    "setup_logging",
]
