"""Interface for capability checks consumed by feature modules."""

from __future__ import annotations

from sqlalchemy.orm import Session

from ..auth.principal import AuthenticatedPrincipal


class RbacService:
    """Interface describing the capability oracle.

    Implementations accept a ``Session`` for DB access and answer whether a
    principal holds a primitive capability key.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_permissions(  # pragma: no cover - interface only
        self,
        principal: AuthenticatedPrincipal,
    ) -> frozenset[str]:
        raise NotImplementedError

    def has_permission(
        self,
        principal: AuthenticatedPrincipal,
        permission_key: str,
    ) -> bool:  # pragma: no cover - interface only
        raise NotImplementedError
