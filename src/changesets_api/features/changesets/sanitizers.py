"""Normalization and validation for writable changeset fields."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from typing import Any

from changesets_api.common.time import local_to_utc, utc_to_local
from changesets_api.common.validators import parse_slug_list
from changesets_api.core.rbac.roles import CHANGESETS_EDIT
from changesets_db.models import ChangesetStatus

from .exceptions import ChangesetValidationError
from .permissions import ChangesetAuthorizationGate

DEFAULT_STATUS = ChangesetStatus.AUTO_DRAFT.value
WRITABLE_STATUSES: tuple[str, ...] = (
    ChangesetStatus.AUTO_DRAFT.value,
    ChangesetStatus.DRAFT.value,
    ChangesetStatus.FUTURE.value,
    ChangesetStatus.PUBLISH.value,
    ChangesetStatus.PRIVATE.value,
)
QUERYABLE_STATUSES: tuple[str, ...] = (*WRITABLE_STATUSES, ChangesetStatus.TRASH.value, "any")

_RFC3339 = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}(?::?\d{2})?)?$"
)
_TWELVE_HOUR = re.compile(r"^\d{4}-\d{2}-\d{2} \d{1,2}:\d{2} ?[AaPp][Mm]$")
_TWELVE_HOUR_FORMAT = "%Y-%m-%d %I:%M %p"


# ---- Status ----------------------------------------------------------------


def sanitize_statuses(
    raw: object,
    *,
    gate: ChangesetAuthorizationGate,
    allowed: Iterable[str] = WRITABLE_STATUSES,
) -> list[str]:
    """Normalize ``raw`` to an ordered list of status slugs.

    ``auto-draft`` is always accepted. Every other value requires the edit
    capability and must be one of ``allowed``; the first failure aborts.
    """

    allowed_values = tuple(allowed)
    statuses = parse_slug_list(raw)
    for status_value in statuses:
        if status_value == DEFAULT_STATUS:
            continue
        if not gate.can(CHANGESETS_EDIT):
            raise gate.deny("rest_forbidden_status", "Status is forbidden.")
        if status_value not in allowed_values:
            raise ChangesetValidationError(
                "rest_invalid_param",
                f"Invalid parameter(s): status ({status_value} is not one of "
                f"{', '.join(allowed_values)}).",
            )
    return statuses


# ---- Dates -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResolvedDate:
    """A wall-clock timestamp in the site timezone and its UTC counterpart."""

    local: datetime
    gmt: datetime


def parse_changeset_date(value: str) -> datetime:
    """Parse an RFC 3339 / ISO-8601 timestamp or a ``Y-m-d g:i a`` string.

    Returns a naive datetime unless ``value`` carries an explicit offset.
    """

    candidate = value.strip() if isinstance(value, str) else ""
    if _RFC3339.match(candidate):
        if candidate[-1] in "Zz":
            candidate = f"{candidate[:-1]}+00:00"
        try:
            return datetime.fromisoformat(candidate)
        except ValueError:
            pass
    elif _TWELVE_HOUR.match(candidate):
        normalized = re.sub(r"\s*([AaPp][Mm])$", r" \1", candidate)
        try:
            return datetime.strptime(normalized, _TWELVE_HOUR_FORMAT)
        except ValueError:
            pass
    raise ChangesetValidationError("rest_incorrect_date", "Invalid date.")


def resolve_date(value: str, *, is_utc: bool, zone: tzinfo) -> ResolvedDate:
    """Derive both the local and the UTC timestamp from one supplied value.

    Offset-qualified input is converted directly. Otherwise ``value`` is read
    as UTC when ``is_utc`` is set and as site-local wall-clock time if not.
    """

    parsed = parse_changeset_date(value)
    if parsed.tzinfo is not None:
        gmt = parsed.astimezone(UTC)
    elif is_utc:
        gmt = parsed.replace(tzinfo=UTC)
    else:
        gmt = local_to_utc(parsed, zone)
    gmt = gmt.replace(microsecond=0)
    return ResolvedDate(local=utc_to_local(gmt, zone), gmt=gmt)


def format_date(value: datetime | None) -> str | None:
    """Render a timestamp as ``YYYY-MM-DDTHH:MM:SS``; unset timestamps are ``None``."""

    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value.replace(microsecond=0).isoformat()


# ---- Content ---------------------------------------------------------------


def sanitize_settings(raw: object) -> dict[str, dict[str, Any] | None]:
    """Validate the shape of a settings map before any capability check.

    Each entry must be an object carrying ``value``, or ``null`` to remove the
    setting from the changeset.
    """

    if not isinstance(raw, Mapping):
        raise ChangesetValidationError(
            "invalid_customize_changeset_data",
            "Invalid customize changeset data.",
        )
    cleaned: dict[str, dict[str, Any] | None] = {}
    for setting_id, params in raw.items():
        if not isinstance(setting_id, str) or not setting_id:
            raise ChangesetValidationError(
                "invalid_customize_changeset_data",
                "Invalid customize changeset data.",
            )
        if params is None:
            cleaned[setting_id] = None
            continue
        if not isinstance(params, Mapping) or "value" not in params:
            raise ChangesetValidationError(
                "invalid_customize_changeset_data",
                "Invalid customize changeset data.",
            )
        cleaned[setting_id] = dict(params)
    return cleaned


def merge_settings(
    existing: Mapping[str, Any],
    incoming: Mapping[str, dict[str, Any] | None],
) -> dict[str, Any]:
    """Merge sanitized ``incoming`` params into ``existing`` content.

    ``None`` removes a setting; objects are merged key by key.
    """

    merged: dict[str, Any] = {key: dict(value) for key, value in existing.items()}
    for setting_id, params in incoming.items():
        if params is None:
            merged.pop(setting_id, None)
            continue
        current = merged.get(setting_id) or {}
        merged[setting_id] = {**current, **params}
    return merged


__all__ = [
    "DEFAULT_STATUS",
    "QUERYABLE_STATUSES",
    "WRITABLE_STATUSES",
    "ResolvedDate",
    "format_date",
    "merge_settings",
    "parse_changeset_date",
    "resolve_date",
    "sanitize_settings",
    "sanitize_statuses",
]
