"""Engine construction for the changesets store."""

from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url


class DatabaseSettingsProtocol(Protocol):
    """Structural type for the database settings consumed here."""

    database_url: str
    database_echo: bool


def build_engine(settings: DatabaseSettingsProtocol) -> Engine:
    url = make_url(str(settings.database_url))
    connect_args: dict[str, Any] = {}
    if url.get_backend_name() == "sqlite":
        # Requests run in the threadpool; sessions never cross threads.
        connect_args["check_same_thread"] = False
    return create_engine(
        url,
        echo=bool(settings.database_echo),
        future=True,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


__all__ = ["DatabaseSettingsProtocol", "build_engine"]
