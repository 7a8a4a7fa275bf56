"""Shared database schema for the customize changesets service."""

from .base import NAMING_CONVENTION, Base, TimestampMixin, metadata, utc_now
from .engine import build_engine
from .types import UTCDateTime

__all__ = [
    "Base",
    "metadata",
    "NAMING_CONVENTION",
    "UTCDateTime",
    "TimestampMixin",
    "build_engine",
    "utc_now",
]
