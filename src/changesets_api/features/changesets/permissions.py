"""Two-tier authorization for changesets.

Resource level checks ask the capability oracle about the changeset type or a
specific changeset (own vs. others, published vs. not). Field level checks
resolve every setting id through the working context and apply the
descriptor's capability: failures are dropped on read and reject the whole
request on write.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import status

from changesets_api.common.logging import log_context
from changesets_api.core.auth import AuthenticatedPrincipal
from changesets_api.core.rbac import RbacService
from changesets_api.core.rbac.roles import (
    CHANGESETS_CREATE,
    CHANGESETS_DELETE,
    CHANGESETS_DELETE_OTHERS,
    CHANGESETS_DELETE_PUBLISHED,
    CHANGESETS_EDIT,
    CHANGESETS_EDIT_OTHERS,
    CHANGESETS_EDIT_PUBLISHED,
    CHANGESETS_PUBLISH,
    CHANGESETS_READ,
    CHANGESETS_READ_PRIVATE,
)
from changesets_db.models import Changeset, ChangesetStatus

from .exceptions import ChangesetAuthorizationError, ChangesetValidationError
from .manager import ChangesetManager
from .registry import SettingDescriptor, SettingFound

logger = logging.getLogger(__name__)

PUBLISHING_STATUSES = frozenset({ChangesetStatus.PUBLISH.value, ChangesetStatus.FUTURE.value})
_PUBLISHED = frozenset({ChangesetStatus.PUBLISH, ChangesetStatus.FUTURE})

EDIT_CONTEXT = "edit"


class ChangesetAuthorizationGate:
    """Answer and enforce capability questions for one principal."""

    def __init__(self, *, principal: AuthenticatedPrincipal, rbac: RbacService) -> None:
        self._principal = principal
        self._rbac = rbac

    @property
    def principal(self) -> AuthenticatedPrincipal:
        return self._principal

    # ---- Primitives --------------------------------------------------------

    def can(self, capability: str) -> bool:
        return self._rbac.has_permission(self._principal, capability)

    def deny(self, code: str, message: str) -> ChangesetAuthorizationError:
        """Build an authorization error; anonymous principals get 401."""

        status_code = (
            status.HTTP_403_FORBIDDEN
            if self._principal.is_authenticated
            else status.HTTP_401_UNAUTHORIZED
        )
        logger.info(
            "changesets.authorization.denied",
            extra=log_context(user_id=self._principal.user_id, code=code),
        )
        return ChangesetAuthorizationError(code, message, status_code=status_code)

    def require(self, capability: str, *, code: str, message: str) -> None:
        if not self.can(capability):
            raise self.deny(code, message)

    def _is_owner(self, changeset: Changeset) -> bool:
        return (
            self._principal.user_id is not None and changeset.author_id == self._principal.user_id
        )

    # ---- Meta capabilities -------------------------------------------------

    def can_read(self, changeset: Changeset) -> bool:
        if changeset.status == ChangesetStatus.PUBLISH:
            return self.can(CHANGESETS_READ)
        if changeset.status == ChangesetStatus.PRIVATE:
            if self._is_owner(changeset):
                return self.can(CHANGESETS_READ)
            return self.can(CHANGESETS_READ_PRIVATE)
        if self._is_owner(changeset):
            return self.can(CHANGESETS_READ)
        return self.can(CHANGESETS_EDIT_OTHERS)

    def can_edit(self, changeset: Changeset) -> bool:
        return self._can_manage(
            changeset,
            own=CHANGESETS_EDIT,
            others=CHANGESETS_EDIT_OTHERS,
            published=CHANGESETS_EDIT_PUBLISHED,
        )

    def can_delete(self, changeset: Changeset) -> bool:
        return self._can_manage(
            changeset,
            own=CHANGESETS_DELETE,
            others=CHANGESETS_DELETE_OTHERS,
            published=CHANGESETS_DELETE_PUBLISHED,
        )

    def _can_manage(self, changeset: Changeset, *, own: str, others: str, published: str) -> bool:
        required = {own}
        if not self._is_owner(changeset):
            required.add(others)
        effective = changeset.status
        if effective == ChangesetStatus.TRASH and changeset.previous_status is not None:
            effective = changeset.previous_status
        if effective in _PUBLISHED:
            required.add(published)
        if effective == ChangesetStatus.PRIVATE and not self._is_owner(changeset):
            required.add(CHANGESETS_READ_PRIVATE)
        return all(self.can(capability) for capability in required)

    # ---- Field level -------------------------------------------------------

    def can_access_setting(self, descriptor: SettingDescriptor) -> bool:
        return self.can(descriptor.capability)

    def readable_settings(
        self,
        manager: ChangesetManager,
        content: Mapping[str, Any],
    ) -> dict[str, dict[str, Any]]:
        """Return the subset of ``content`` the principal may read."""

        readable: dict[str, dict[str, Any]] = {}
        for setting_id, params in content.items():
            lookup = manager.get_setting(setting_id)
            if not isinstance(lookup, SettingFound):
                continue
            if not self.can_access_setting(lookup.descriptor):
                continue
            value = params.get("value") if isinstance(params, Mapping) else None
            readable[setting_id] = {"value": value}
        return readable

    def check_update_permission(self, changeset: Changeset, manager: ChangesetManager) -> bool:
        """Edit capability on the changeset plus write access to every setting it holds."""

        if not self.can_edit(changeset):
            return False
        for setting_id in (changeset.content or {}):
            lookup = manager.get_setting(setting_id)
            if not isinstance(lookup, SettingFound):
                return False
            if not self.can_access_setting(lookup.descriptor):
                return False
        return True

    def authorize_setting_writes(
        self,
        manager: ChangesetManager,
        settings: Mapping[str, Any],
    ) -> None:
        """Reject the write unless every supplied setting resolves and is writable."""

        for setting_id in settings:
            lookup = manager.get_setting(setting_id)
            if not isinstance(lookup, SettingFound):
                raise ChangesetValidationError(
                    "invalid_customize_changeset_data",
                    "Invalid setting.",
                )
            if not self.can_access_setting(lookup.descriptor):
                raise self.deny(
                    "rest_forbidden",
                    "Sorry, you are not allowed to edit some of the settings.",
                )

    # ---- Resource level ----------------------------------------------------

    def authorize_list(self, *, context: str) -> None:
        self.require(
            CHANGESETS_READ,
            code="rest_cannot_read",
            message="Sorry, you are not allowed to view changesets.",
        )
        if context == EDIT_CONTEXT:
            self.require(
                CHANGESETS_EDIT,
                code="rest_forbidden_context",
                message="Sorry, you are not allowed to edit changesets.",
            )

    def authorize_read(
        self,
        changeset: Changeset,
        manager: ChangesetManager,
        *,
        context: str,
    ) -> None:
        if context == EDIT_CONTEXT and not self.check_update_permission(changeset, manager):
            raise self.deny(
                "rest_forbidden_context",
                "Sorry, you are not allowed to edit this changeset.",
            )
        if not self.can_read(changeset):
            raise self.deny("rest_cannot_read", "Sorry, you are not allowed to view this changeset.")

    def authorize_create(self, *, author_id: int | None) -> None:
        if author_id is not None and author_id != self._principal.user_id:
            self.require(
                CHANGESETS_EDIT_OTHERS,
                code="rest_cannot_edit_others",
                message="Sorry, you are not allowed to create changesets as this user.",
            )
        self.require(
            CHANGESETS_CREATE,
            code="rest_cannot_create",
            message="Sorry, you are not allowed to create changesets.",
        )

    def authorize_update(
        self,
        changeset: Changeset,
        manager: ChangesetManager,
        *,
        author_id: int | None = None,
    ) -> None:
        if not self.check_update_permission(changeset, manager):
            raise self.deny("rest_cannot_edit", "Sorry, you are not allowed to edit this changeset.")
        if author_id is not None and author_id != self._principal.user_id:
            self.require(
                CHANGESETS_EDIT_OTHERS,
                code="rest_cannot_edit_others",
                message="Sorry, you are not allowed to update changesets as this user.",
            )

    def authorize_delete(self, changeset: Changeset) -> None:
        if not self.can_delete(changeset):
            raise self.deny(
                "rest_cannot_delete",
                "Sorry, you are not allowed to delete this changeset.",
            )

    def authorize_publish(self, status_value: str | None) -> None:
        if status_value in PUBLISHING_STATUSES:
            self.require(
                CHANGESETS_PUBLISH,
                code="changeset_publish_unauthorized",
                message="Sorry, you are not allowed to publish customize changesets.",
            )


__all__ = [
    "EDIT_CONTEXT",
    "PUBLISHING_STATUSES",
    "ChangesetAuthorizationGate",
]
