"""FastAPI dependencies that bridge HTTP requests to the auth/RBAC foundation."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from changesets_api.db import get_db_read
from changesets_api.settings import Settings, get_settings

from ..auth import AuthenticatedPrincipal, authenticate_request
from ..rbac import RbacService, RoleRbacService

ReadSessionDep = Annotated[Session, Depends(get_db_read)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_current_principal(
    request: Request,
    db: ReadSessionDep,
    settings: SettingsDep,
) -> AuthenticatedPrincipal:
    """Resolve the request principal (anonymous when no credentials are sent)."""

    principal = authenticate_request(request, db, settings)
    request.state.principal = principal
    return principal


def get_rbac_service(db: ReadSessionDep) -> RbacService:
    return RoleRbacService(session=db)


PrincipalDep = Annotated[AuthenticatedPrincipal, Depends(get_current_principal)]
RbacDep = Annotated[RbacService, Depends(get_rbac_service)]


__all__ = [
    "PrincipalDep",
    "RbacDep",
    "get_current_principal",
    "get_rbac_service",
]
