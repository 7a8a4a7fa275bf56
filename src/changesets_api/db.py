"""Engine and request-session wiring for the changesets API.

The lifespan stores the engine and sessionmaker on ``app.state``. A request
gets one session however many dependencies ask for it: ``get_db_write``
commits it when the endpoint returns, ``get_db_read`` leaves it to be rolled
back, and any exception rolls back everything the request did.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from starlette.exceptions import HTTPException

from changesets_api.common.logging import log_context
from changesets_api.common.problem_details import ApiError
from changesets_api.core.auth.errors import AuthenticationError
from changesets_api.settings import Settings, get_settings
from changesets_db import Base, build_engine

logger = logging.getLogger(__name__)

_ENGINE_ATTR = "db_engine"
_SESSIONMAKER_ATTR = "db_sessionmaker"
_WRITE_FLAG = "db_commit_on_success"


def init_db(app: FastAPI, settings: Settings | None = None) -> None:
    shutdown_db(app)
    engine = build_engine(settings or get_settings())
    setattr(app.state, _ENGINE_ATTR, engine)
    setattr(app.state, _SESSIONMAKER_ATTR, sessionmaker(bind=engine, expire_on_commit=False))


def shutdown_db(app: FastAPI) -> None:
    engine = getattr(app.state, _ENGINE_ATTR, None)
    if engine is not None:
        engine.dispose()
    setattr(app.state, _ENGINE_ATTR, None)
    setattr(app.state, _SESSIONMAKER_ATTR, None)


def create_schema(engine: Engine) -> None:
    """Create the users and changesets tables when they are missing."""

    import changesets_db.models  # noqa: F401 - registers mappers on Base.metadata

    Base.metadata.create_all(engine)


def _from_state(app: FastAPI, attr: str) -> Any:
    value = getattr(app.state, attr, None)
    if value is None:
        raise RuntimeError("Database not initialized; the application lifespan has not run.")
    return value


def get_engine_from_app(app: FastAPI) -> Engine:
    return _from_state(app, _ENGINE_ATTR)


def get_session_factory_from_app(app: FastAPI) -> sessionmaker[Session]:
    return _from_state(app, _SESSIONMAKER_ATTR)


def _is_client_error(exc: BaseException) -> bool:
    if isinstance(exc, ApiError):
        return exc.status_code < 500
    return isinstance(exc, (HTTPException, RequestValidationError, AuthenticationError))


def _request_session(request: Request) -> Generator[Session]:
    session = get_session_factory_from_app(request.app)()
    try:
        yield session
    except BaseException as exc:
        session.rollback()
        if not _is_client_error(exc):
            logger.warning(
                "db.session.rollback",
                extra=log_context(path=request.url.path, method=request.method),
                exc_info=exc,
            )
        raise
    else:
        if getattr(request.state, _WRITE_FLAG, False):
            session.commit()
        else:
            session.rollback()
    finally:
        session.close()


def get_db_write(
    request: Request,
    session: Annotated[Session, Depends(_request_session)],
) -> Session:
    setattr(request.state, _WRITE_FLAG, True)
    return session


def get_db_read(session: Annotated[Session, Depends(_request_session)]) -> Session:
    return session


__all__ = [
    "create_schema",
    "get_db_read",
    "get_db_write",
    "get_engine_from_app",
    "get_session_factory_from_app",
    "init_db",
    "shutdown_db",
]
