"""Working contexts bound to a changeset UUID and the resolver that owns them."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from uuid import uuid4

from changesets_api.common.logging import log_context
from changesets_db.models import Changeset

from .registry import (
    DocumentTypeRegistrar,
    DynamicSettingRule,
    SettingDescriptor,
    SettingFound,
    SettingLookup,
    SettingNotFound,
)
from .repository import ChangesetRepository

logger = logging.getLogger(__name__)

_UNRESOLVED = object()


class ChangesetManager:
    """Coordinates access to one changeset's settings during a request."""

    def __init__(self, *, uuid: str, repository: ChangesetRepository) -> None:
        self._uuid = uuid
        self._repository = repository
        self._settings: dict[str, SettingDescriptor] = {}
        self._dynamic_rules: list[DynamicSettingRule] = []
        self._changeset: Changeset | None | object = _UNRESOLVED

    @property
    def uuid(self) -> str:
        return self._uuid

    # ---- Document handle ---------------------------------------------------

    def changeset(self) -> Changeset | None:
        """Return the persisted changeset for this UUID, or ``None``."""

        if self._changeset is _UNRESOLVED:
            self._changeset = self._repository.find_by_uuid(self._uuid)
        return self._changeset  # type: ignore[return-value]

    def changeset_post_id(self) -> int | None:
        """Return the store id of the changeset, or ``None`` when it does not exist."""

        changeset = self.changeset()
        return changeset.id if changeset is not None else None

    def bind(self, changeset: Changeset) -> None:
        """Attach a freshly persisted changeset to this context."""

        if changeset.uuid != self._uuid:
            raise ValueError("Changeset UUID does not match the working context.")
        self._changeset = changeset

    def forget(self) -> None:
        self._changeset = None

    # ---- Settings ----------------------------------------------------------

    def add_setting(self, descriptor: SettingDescriptor) -> None:
        self._settings[descriptor.id] = descriptor

    def add_dynamic_setting(self, rule: DynamicSettingRule) -> None:
        self._dynamic_rules.append(rule)

    @property
    def settings(self) -> Mapping[str, SettingDescriptor]:
        return MappingProxyType(self._settings)

    def get_setting(self, setting_id: str) -> SettingLookup:
        descriptor = self._settings.get(setting_id)
        if descriptor is None:
            for rule in self._dynamic_rules:
                descriptor = rule.resolve(setting_id)
                if descriptor is not None:
                    self._settings[setting_id] = descriptor
                    break
        if descriptor is None:
            return SettingNotFound(setting_id)
        return SettingFound(descriptor)


class ChangesetManagerResolver:
    """Request-scoped owner of the single live :class:`ChangesetManager`.

    ``ensure`` reuses the live context when it is bound to the requested UUID
    and otherwise replaces it with a fresh one, running every registrar on it.
    """

    def __init__(
        self,
        *,
        repository: ChangesetRepository,
        registrars: Sequence[DocumentTypeRegistrar] = (),
    ) -> None:
        self._repository = repository
        self._registrars = tuple(registrars)
        self._current: ChangesetManager | None = None

    @property
    def current(self) -> ChangesetManager | None:
        return self._current

    def ensure(self, uuid: str | None = None) -> ChangesetManager:
        requested = (uuid or str(uuid4())).lower()
        if self._current is not None and self._current.uuid == requested:
            return self._current

        manager = ChangesetManager(uuid=requested, repository=self._repository)
        for registrar in self._registrars:
            registrar.register(manager)
        self._current = manager
        logger.debug(
            "changesets.manager.bound",
            extra=log_context(changeset_uuid=requested, registrars=len(self._registrars)),
        )
        return manager


__all__ = ["ChangesetManager", "ChangesetManagerResolver"]
