"""ORM model for customize changesets."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import Mapped, mapped_column, relationship

from changesets_db.base import Base, TimestampMixin
from changesets_db.types import UTCDateTime

from .user import User


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class ChangesetStatus(str, Enum):
    """Lifecycle states a changeset can be in."""

    AUTO_DRAFT = "auto-draft"
    DRAFT = "draft"
    FUTURE = "future"
    PUBLISH = "publish"
    PRIVATE = "private"
    TRASH = "trash"


CHANGESET_STATUS_VALUES = tuple(value.value for value in ChangesetStatus)
CHANGESET_POST_TYPE = "customize_changeset"


class Changeset(TimestampMixin, Base):
    """A bundle of pending setting values identified by UUID.

    ``date_local`` is the wall-clock time in the site timezone and is always
    set. ``date_gmt`` is ``None`` while the changeset has no fixed timestamp.
    """

    __tablename__ = "changesets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    status: Mapped[ChangesetStatus] = mapped_column(
        SAEnum(
            ChangesetStatus,
            name="changeset_status",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=ChangesetStatus.AUTO_DRAFT,
    )
    previous_status: Mapped[ChangesetStatus | None] = mapped_column(
        SAEnum(
            ChangesetStatus,
            name="changeset_previous_status",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
        ),
        nullable=True,
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="NO ACTION"),
        nullable=False,
    )
    author: Mapped[User] = relationship("User", lazy="joined")

    date_local: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    date_gmt: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    title: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    content: Mapped[dict[str, Any]] = mapped_column(
        MutableDict.as_mutable(JSON),
        nullable=False,
        default=dict,
    )

    __table_args__ = (
        Index("ix_changesets_status_date", "status", "date_local"),
        Index("ix_changesets_author_id", "author_id"),
    )

    def __repr__(self) -> str:
        return f"<Changeset id={self.id} uuid={self.uuid} status={self.status.value}>"


__all__ = [
    "CHANGESET_POST_TYPE",
    "CHANGESET_STATUS_VALUES",
    "Changeset",
    "ChangesetStatus",
]
