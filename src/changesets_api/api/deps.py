"""Service factories used by API routers.

Routers import their per-request service constructors from here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from changesets_api.core.auth import AuthenticatedPrincipal
from changesets_api.core.http import PrincipalDep, RbacDep
from changesets_api.core.rbac import RbacService
from changesets_api.db import get_db_read, get_db_write
from changesets_api.features.changesets.hooks import ChangesetHooks, get_changeset_hooks
from changesets_api.settings import Settings, get_settings

if TYPE_CHECKING:
    from changesets_api.features.changesets.service import ChangesetsService

WriteSessionDep = Annotated[Session, Depends(get_db_write)]
ReadSessionDep = Annotated[Session, Depends(get_db_read)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
HooksDep = Annotated[ChangesetHooks, Depends(get_changeset_hooks)]


def _build_changesets_service(
    session: Session,
    settings: Settings,
    principal: AuthenticatedPrincipal,
    rbac: RbacService,
    hooks: ChangesetHooks,
) -> ChangesetsService:
    from changesets_api.features.changesets.service import ChangesetsService

    return ChangesetsService(
        session=session,
        settings=settings,
        principal=principal,
        rbac=rbac,
        hooks=hooks,
    )


def get_changesets_service(
    session: WriteSessionDep,
    settings: SettingsDep,
    principal: PrincipalDep,
    rbac: RbacDep,
    hooks: HooksDep,
) -> ChangesetsService:
    return _build_changesets_service(session, settings, principal, rbac, hooks)


def get_changesets_service_read(
    session: ReadSessionDep,
    settings: SettingsDep,
    principal: PrincipalDep,
    rbac: RbacDep,
    hooks: HooksDep,
) -> ChangesetsService:
    return _build_changesets_service(session, settings, principal, rbac, hooks)


__all__ = [
    "HooksDep",
    "ReadSessionDep",
    "SettingsDep",
    "WriteSessionDep",
    "get_changesets_service",
    "get_changesets_service_read",
]
