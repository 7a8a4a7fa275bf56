"""Role table backing the capability oracle."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from changesets_api.common.logging import log_context
from changesets_db.models import User, UserRole

from ..auth.principal import AuthenticatedPrincipal
from .service_interface import RbacService

logger = logging.getLogger(__name__)

CHANGESETS_READ = "changesets.read"
CHANGESETS_READ_PRIVATE = "changesets.read_private"
CHANGESETS_EDIT = "changesets.edit"
CHANGESETS_EDIT_OTHERS = "changesets.edit_others"
CHANGESETS_EDIT_PUBLISHED = "changesets.edit_published"
CHANGESETS_CREATE = "changesets.create"
CHANGESETS_PUBLISH = "changesets.publish"
CHANGESETS_DELETE = "changesets.delete"
CHANGESETS_DELETE_OTHERS = "changesets.delete_others"
CHANGESETS_DELETE_PUBLISHED = "changesets.delete_published"
SETTINGS_EDIT_THEME_OPTIONS = "settings.edit_theme_options"
SETTINGS_MANAGE_OPTIONS = "settings.manage_options"

_CONTRIBUTOR = frozenset(
    {
        CHANGESETS_READ,
        CHANGESETS_EDIT,
        CHANGESETS_CREATE,
        CHANGESETS_DELETE,
    }
)
_AUTHOR = _CONTRIBUTOR | {
    CHANGESETS_EDIT_PUBLISHED,
    CHANGESETS_PUBLISH,
    CHANGESETS_DELETE_PUBLISHED,
}
_EDITOR = _AUTHOR | {
    CHANGESETS_READ_PRIVATE,
    CHANGESETS_EDIT_OTHERS,
    CHANGESETS_DELETE_OTHERS,
    SETTINGS_EDIT_THEME_OPTIONS,
}
_ADMINISTRATOR = _EDITOR | {
    SETTINGS_MANAGE_OPTIONS,
}

ROLE_CAPABILITIES: dict[UserRole, frozenset[str]] = {
    UserRole.ADMINISTRATOR: frozenset(_ADMINISTRATOR),
    UserRole.EDITOR: frozenset(_EDITOR),
    UserRole.AUTHOR: frozenset(_AUTHOR),
    UserRole.CONTRIBUTOR: _CONTRIBUTOR,
    UserRole.SUBSCRIBER: frozenset({CHANGESETS_READ}),
}


class RoleRbacService(RbacService):
    """Answer capability checks from the principal's role.

    Anonymous principals hold no capabilities. Lookups are memoised for the
    lifetime of the instance, which is one request.
    """

    def __init__(self, session: Session):
        super().__init__(session=session)
        self._cache: dict[int, frozenset[str]] = {}

    def get_permissions(self, principal: AuthenticatedPrincipal) -> frozenset[str]:
        if principal.user_id is None:
            return frozenset()
        cached = self._cache.get(principal.user_id)
        if cached is not None:
            return cached
        user = self.session.get(User, principal.user_id)
        permissions = ROLE_CAPABILITIES.get(user.role, frozenset()) if user else frozenset()
        self._cache[principal.user_id] = permissions
        return permissions

    def has_permission(self, principal: AuthenticatedPrincipal, permission_key: str) -> bool:
        granted = permission_key in self.get_permissions(principal)
        if not granted:
            logger.debug(
                "rbac.permission.denied",
                extra=log_context(user_id=principal.user_id, permission=permission_key),
            )
        return granted


__all__ = [
    "CHANGESETS_CREATE",
    "CHANGESETS_DELETE",
    "CHANGESETS_DELETE_OTHERS",
    "CHANGESETS_DELETE_PUBLISHED",
    "CHANGESETS_EDIT",
    "CHANGESETS_EDIT_OTHERS",
    "CHANGESETS_EDIT_PUBLISHED",
    "CHANGESETS_PUBLISH",
    "CHANGESETS_READ",
    "CHANGESETS_READ_PRIVATE",
    "ROLE_CAPABILITIES",
    "RoleRbacService",
    "SETTINGS_EDIT_THEME_OPTIONS",
    "SETTINGS_MANAGE_OPTIONS",
]
