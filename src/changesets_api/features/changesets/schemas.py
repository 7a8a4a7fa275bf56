"""Pydantic schemas for the changesets API."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator

from changesets_api.common.schema import BaseSchema
from changesets_api.common.validators import parse_csv_or_repeated
from changesets_api.settings import DEFAULT_PER_PAGE, MAX_PER_PAGE

UUID_PATTERN = r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"

RequestContext = Literal["view", "edit"]
OrderDirection = Literal["asc", "desc"]
OrderBy = Literal["date", "relevance", "id", "title", "slug"]


class ChangesetListQuery(BaseSchema):
    """Collection query parameters after array/CSV normalisation."""

    context: RequestContext = "view"
    page: int = Field(1, ge=1)
    per_page: int = Field(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE)
    search: str | None = None
    author: list[int] | None = None
    author_exclude: list[int] | None = None
    offset: int | None = Field(default=None, ge=0)
    order: OrderDirection = "desc"
    orderby: OrderBy = "date"
    status: list[str] = Field(default_factory=lambda: ["auto-draft"])

    @field_validator("author", "author_exclude", mode="before")
    @classmethod
    def _split_ids(cls, value: object) -> object:
        return parse_csv_or_repeated(value)

    @field_validator("order", "orderby", "context", mode="before")
    @classmethod
    def _lower(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


class ChangesetTitleIn(BaseSchema):
    raw: str


class ChangesetWrite(BaseSchema):
    """Writable changeset fields shared by create and update.

    ``settings`` and the date fields stay loosely typed so their dedicated
    sanitizers can report field-specific error codes. ``slug`` is accepted
    only so that any attempt to set it can be rejected.
    """

    title: str | ChangesetTitleIn | None = None
    status: str | list[str] | None = None
    date: str | None = None
    date_gmt: str | None = None
    author: int | None = Field(default=None, ge=1)
    settings: Any = None
    slug: Any = None


class ChangesetCreate(ChangesetWrite):
    uuid: str | None = Field(default=None, pattern=UUID_PATTERN)


class ChangesetTitleOut(BaseSchema):
    raw: str | None = None
    rendered: str


class ChangesetSettingOut(BaseSchema):
    value: Any = None


class ChangesetOut(BaseSchema):
    """Public representation of a changeset."""

    author: int
    date: str | None = None
    date_gmt: str | None = None
    settings: dict[str, ChangesetSettingOut] = Field(default_factory=dict)
    slug: str
    status: str
    title: ChangesetTitleOut


class ChangesetDeleted(BaseSchema):
    deleted: bool
    previous: ChangesetOut


__all__ = [
    "UUID_PATTERN",
    "ChangesetCreate",
    "ChangesetDeleted",
    "ChangesetListQuery",
    "ChangesetOut",
    "ChangesetSettingOut",
    "ChangesetTitleIn",
    "ChangesetTitleOut",
    "ChangesetWrite",
    "RequestContext",
]
