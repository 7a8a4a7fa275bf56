"""Changesets FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from .api.v1.router import create_api_router
from .app.lifecycles import create_application_lifespan
from .common.exceptions import register_exception_handlers
from .common.logging import setup_logging
from .common.middleware import register_middleware
from .core.http.errors import register_auth_exception_handlers
from .features.changesets.hooks import ChangesetHooks
from .features.health.router import router as health_router
from .settings import Settings, get_settings

API_PREFIX = "/customize/v1"
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    hooks: ChangesetHooks | None = None,
) -> FastAPI:
    """Create and configure the changesets FastAPI application.

    ``hooks`` carries the query augmenters, setting registrars and response
    transformers; the core settings registrar is used when omitted.
    """
    # Settings + logging first so everything else uses the configured root logger.
    settings = settings or get_settings()
    setup_logging(settings)

    lifespan = create_application_lifespan(settings=settings)

    docs_enabled = bool(settings.api_docs_enabled)
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        debug=False,
        lifespan=lifespan,
    )
    app.state.changeset_hooks = hooks or ChangesetHooks()

    register_exception_handlers(app)
    register_auth_exception_handlers(app)

    # Middleware and routers.
    register_middleware(app, settings=settings)
    app.include_router(health_router, include_in_schema=False)
    app.include_router(create_api_router(), prefix=API_PREFIX)
    if docs_enabled:
        logger.info("api.docs.enabled", extra={"openapi_url": app.openapi_url})

    return app


__all__ = [
    "API_PREFIX",
    "create_app",
]
