"""Principals that author changesets."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from changesets_db.base import Base, TimestampMixin


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class UserRole(str, Enum):
    """Role assigned to a user; drives the capability table."""

    ADMINISTRATOR = "administrator"
    EDITOR = "editor"
    AUTHOR = "author"
    CONTRIBUTOR = "contributor"
    SUBSCRIBER = "subscriber"


USER_ROLE_VALUES = tuple(value.value for value in UserRole)


def _clean_display_name(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    return cleaned[:255]


class User(TimestampMixin, Base):
    """Single identity model for people who edit changesets."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    login: Mapped[str] = mapped_column(String(60), nullable=False, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(
            UserRole,
            name="user_role",
            native_enum=False,
            length=20,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=UserRole.SUBSCRIBER,
    )

    @validates("display_name")
    def _validate_display_name(self, _key: str, value: str | None) -> str | None:
        return _clean_display_name(value)

    def __repr__(self) -> str:
        return f"<User id={self.id} login={self.login!r} role={self.role.value}>"


__all__ = ["USER_ROLE_VALUES", "User", "UserRole"]
