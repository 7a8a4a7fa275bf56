from __future__ import annotations

import re

from changesets_api.features.changesets.manager import (
    ChangesetManager,
    ChangesetManagerResolver,
)
from changesets_api.features.changesets.registry import (
    DynamicSettingRule,
    SettingDescriptor,
    SettingFound,
    SettingNotFound,
)
from changesets_db.models import Changeset, ChangesetStatus

UUID = "0b9d8f3a-6a1e-4c34-8a64-8e1f0f8f2a10"
OTHER_UUID = "8e2c1a44-5d0b-4b7f-9d13-3f6a7c2e1b90"


class FakeRepository:
    def __init__(self, *changesets: Changeset) -> None:
        self._by_uuid = {changeset.uuid: changeset for changeset in changesets}
        self.lookups: list[str] = []

    def find_by_uuid(self, uuid: str) -> Changeset | None:
        self.lookups.append(uuid)
        return self._by_uuid.get(uuid)


class RecordingRegistrar:
    def __init__(self) -> None:
        self.managers: list[ChangesetManager] = []

    def register(self, manager: ChangesetManager) -> None:
        self.managers.append(manager)
        manager.add_setting(SettingDescriptor("blogname", "settings.manage_options"))


def _changeset(uuid: str = UUID) -> Changeset:
    return Changeset(id=11, uuid=uuid, author_id=1, status=ChangesetStatus.DRAFT, content={})


def test_changeset_lookup_is_cached() -> None:
    repository = FakeRepository(_changeset())
    manager = ChangesetManager(uuid=UUID, repository=repository)  # type: ignore[arg-type]

    assert manager.changeset_post_id() == 11
    assert manager.changeset() is manager.changeset()
    assert repository.lookups == [UUID]


def test_missing_changeset_has_no_post_id() -> None:
    manager = ChangesetManager(uuid=UUID, repository=FakeRepository())  # type: ignore[arg-type]

    assert manager.changeset() is None
    assert manager.changeset_post_id() is None


def test_dynamic_settings_resolve_on_demand() -> None:
    manager = ChangesetManager(uuid=UUID, repository=FakeRepository())  # type: ignore[arg-type]
    manager.add_dynamic_setting(
        DynamicSettingRule(re.compile(r"nav_menu_item\[-?\d+\]"), "settings.edit_theme_options")
    )

    found = manager.get_setting("nav_menu_item[-4]")
    missing = manager.get_setting("nav_menu_item[abc]")

    assert isinstance(found, SettingFound)
    assert found.descriptor.capability == "settings.edit_theme_options"
    assert "nav_menu_item[-4]" in manager.settings
    assert missing == SettingNotFound("nav_menu_item[abc]")


def test_resolver_reuses_live_context_for_same_uuid() -> None:
    registrar = RecordingRegistrar()
    resolver = ChangesetManagerResolver(
        repository=FakeRepository(),  # type: ignore[arg-type]
        registrars=(registrar,),
    )

    first = resolver.ensure(UUID.upper())
    second = resolver.ensure(UUID)

    assert first is second
    assert first.uuid == UUID
    assert len(registrar.managers) == 1
    assert isinstance(first.get_setting("blogname"), SettingFound)


def test_resolver_replaces_context_for_new_uuid() -> None:
    registrar = RecordingRegistrar()
    resolver = ChangesetManagerResolver(
        repository=FakeRepository(),  # type: ignore[arg-type]
        registrars=(registrar,),
    )

    first = resolver.ensure(UUID)
    second = resolver.ensure(OTHER_UUID)

    assert first is not second
    assert resolver.current is second
    assert len(registrar.managers) == 2


def test_resolver_generates_uuid_when_missing() -> None:
    resolver = ChangesetManagerResolver(repository=FakeRepository())  # type: ignore[arg-type]

    manager = resolver.ensure()

    assert re.fullmatch(
        r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[0-9a-f]{4}-[0-9a-f]{12}",
        manager.uuid,
    )
