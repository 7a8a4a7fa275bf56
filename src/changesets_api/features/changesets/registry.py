"""Setting descriptors and the registrar hook that populates a working context.

A changeset's content map is keyed by setting id. Each id must resolve to a
:class:`SettingDescriptor` naming the capability required to read or write it.
Lookups return a :data:`SettingLookup`, either :class:`SettingFound` or
:class:`SettingNotFound`, so callers apply one uniform capability predicate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from changesets_api.core.rbac.roles import (
    SETTINGS_EDIT_THEME_OPTIONS,
    SETTINGS_MANAGE_OPTIONS,
)

if TYPE_CHECKING:
    from .manager import ChangesetManager


@dataclass(frozen=True, slots=True)
class SettingDescriptor:
    """A registered setting and the capability guarding it."""

    id: str
    capability: str
    default: Any = None


@dataclass(frozen=True, slots=True)
class DynamicSettingRule:
    """Resolve setting ids matching ``pattern`` to descriptors on demand."""

    pattern: re.Pattern[str]
    capability: str

    def resolve(self, setting_id: str) -> SettingDescriptor | None:
        if self.pattern.fullmatch(setting_id) is None:
            return None
        return SettingDescriptor(id=setting_id, capability=self.capability)


@dataclass(frozen=True, slots=True)
class SettingFound:
    descriptor: SettingDescriptor


@dataclass(frozen=True, slots=True)
class SettingNotFound:
    setting_id: str


type SettingLookup = SettingFound | SettingNotFound


@runtime_checkable
class DocumentTypeRegistrar(Protocol):
    """Invoked on every freshly built working context before it is used."""

    def register(self, manager: ChangesetManager) -> None: ...


CORE_SETTINGS: tuple[SettingDescriptor, ...] = (
    SettingDescriptor("blogname", SETTINGS_MANAGE_OPTIONS),
    SettingDescriptor("blogdescription", SETTINGS_MANAGE_OPTIONS),
    SettingDescriptor("show_on_front", SETTINGS_MANAGE_OPTIONS, default="posts"),
    SettingDescriptor("site_icon", SETTINGS_MANAGE_OPTIONS, default=0),
    SettingDescriptor("background_color", SETTINGS_EDIT_THEME_OPTIONS),
    SettingDescriptor("header_textcolor", SETTINGS_EDIT_THEME_OPTIONS),
    SettingDescriptor("custom_css", SETTINGS_EDIT_THEME_OPTIONS, default=""),
    SettingDescriptor("nav_menu_locations", SETTINGS_EDIT_THEME_OPTIONS, default={}),
)

CORE_DYNAMIC_SETTINGS: tuple[DynamicSettingRule, ...] = (
    DynamicSettingRule(re.compile(r"nav_menu_item\[-?\d+\]"), SETTINGS_EDIT_THEME_OPTIONS),
    DynamicSettingRule(re.compile(r"widget_[a-z0-9_-]+\[\d+\]"), SETTINGS_EDIT_THEME_OPTIONS),
    DynamicSettingRule(re.compile(r"sidebars_widgets\[[a-z0-9_-]+\]"), SETTINGS_EDIT_THEME_OPTIONS),
)


class CoreSettingsRegistrar:
    """Register the built-in site and theme settings."""

    def register(self, manager: ChangesetManager) -> None:
        for descriptor in CORE_SETTINGS:
            manager.add_setting(descriptor)
        for rule in CORE_DYNAMIC_SETTINGS:
            manager.add_dynamic_setting(rule)


__all__ = [
    "CORE_DYNAMIC_SETTINGS",
    "CORE_SETTINGS",
    "CoreSettingsRegistrar",
    "DocumentTypeRegistrar",
    "DynamicSettingRule",
    "SettingDescriptor",
    "SettingFound",
    "SettingLookup",
    "SettingNotFound",
]
