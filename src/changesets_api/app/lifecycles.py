"""FastAPI lifespan helpers for the changesets application."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.routing import Lifespan
from sqlalchemy import text
from sqlalchemy.engine import make_url

from changesets_api.common.logging import log_context
from changesets_api.common.time import utc_now
from changesets_api.core.auth.pipeline import dev_principal
from changesets_api.db import (
    create_schema,
    get_engine_from_app,
    get_session_factory_from_app,
    init_db,
    shutdown_db,
)
from changesets_api.settings import Settings, get_settings
from changesets_db.models import User, UserRole

logger = logging.getLogger(__name__)


def ensure_runtime_dirs(settings: Settings | None = None) -> None:
    """Create the directory holding a file-backed SQLite database."""

    resolved = settings or get_settings()
    url = make_url(str(resolved.database_url))
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def create_application_lifespan(
    *,
    settings: Settings,
) -> Lifespan[FastAPI]:
    """Return the FastAPI lifespan handler used by the app factory."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        ensure_runtime_dirs(settings)
        app.state.settings = settings
        app.state.started_at = utc_now()

        logger.info(
            "changesets_api.startup",
            extra=log_context(
                logging_level=settings.log_level,
                auth_disabled=bool(settings.auth_disabled),
                site_timezone=settings.site_timezone,
                version=settings.app_version,
            ),
        )
        if settings.auth_disabled:
            logger.warning(
                "auth.disabled",
                extra=log_context(auth_disabled=True),
            )

        safe_url = make_url(str(settings.database_url)).render_as_string(hide_password=True)
        logger.info("db.init.start", extra={"database_url": safe_url})
        init_db(app, settings)
        logger.info("db.init.complete", extra={"database_url": safe_url})

        engine = get_engine_from_app(app)
        session_factory = get_session_factory_from_app(app)

        def _check_db_connection() -> None:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))

        def _seed_dev_user() -> None:
            if not settings.auth_disabled:
                return

            principal = dev_principal(settings)
            with session_factory() as session:
                with session.begin():
                    user = session.get(User, principal.user_id)
                    if user is None:
                        session.add(
                            User(
                                id=principal.user_id,
                                login=settings.auth_disabled_user_login,
                                display_name=settings.auth_disabled_user_login,
                                role=UserRole.ADMINISTRATOR,
                            )
                        )
                        logger.info(
                            "auth.dev_user.seeded",
                            extra=log_context(user_id=principal.user_id),
                        )

        try:
            try:
                await asyncio.to_thread(_check_db_connection)
            except Exception as exc:
                logger.error(
                    "db.connection.failed",
                    extra={"database_url": safe_url},
                    exc_info=True,
                )
                raise RuntimeError(
                    "Database is not reachable. Verify CHANGESETS_DATABASE_URL."
                ) from exc

            await asyncio.to_thread(create_schema, engine)
            await asyncio.to_thread(_seed_dev_user)
            yield
        finally:
            shutdown_db(app)
            logger.info("changesets_api.shutdown")

    return lifespan


__all__ = ["create_application_lifespan", "ensure_runtime_dirs"]
