"""Clock helpers shared by services."""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime without microseconds."""

    return datetime.now(UTC).replace(microsecond=0)


def local_to_utc(value: datetime, zone: tzinfo) -> datetime:
    """Interpret naive ``value`` as wall-clock time in ``zone`` and convert to UTC."""

    return value.replace(tzinfo=zone).astimezone(UTC)


def utc_to_local(value: datetime, zone: tzinfo) -> datetime:
    """Convert an aware (or naive UTC) datetime into naive wall-clock time in ``zone``."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(zone).replace(tzinfo=None)


__all__ = ["local_to_utc", "utc_now", "utc_to_local"]
