"""Persistence helpers for changesets.

``query`` executes the native query descriptor produced by the translator.
Like the store it stands in for, it only computes ``found`` when the bounded
page has rows; an empty page always reports ``found == 0``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import String, Select, case, cast, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from changesets_api.settings import DEFAULT_PER_PAGE
from changesets_db.models import (
    CHANGESET_POST_TYPE,
    Changeset,
    ChangesetStatus,
    User,
)

from .exceptions import ChangesetPersistenceError

_ANY_STATUS = "any"
_EXCLUDED_FROM_ANY = frozenset({ChangesetStatus.TRASH, ChangesetStatus.AUTO_DRAFT})

_ORDER_COLUMNS = {
    "date": Changeset.date_local,
    "ID": Changeset.id,
    "title": Changeset.title,
    "post_name": Changeset.uuid,
}


@dataclass(frozen=True, slots=True)
class ChangesetQueryResult:
    items: list[Changeset]
    found: int


class ChangesetRepository:
    """Query helpers for changeset rows."""

    def __init__(self, session: Session) -> None:
        self._session = session

    # ---- Lookups -----------------------------------------------------------

    def find_by_uuid(self, uuid: str) -> Changeset | None:
        stmt = select(Changeset).where(Changeset.uuid == uuid).limit(1)
        return self._session.execute(stmt).scalar_one_or_none()

    def user_exists(self, user_id: int) -> bool:
        return self._session.get(User, user_id) is not None

    # ---- Query -------------------------------------------------------------

    def query(self, args: Mapping[str, Any]) -> ChangesetQueryResult:
        if args.get("post_type", CHANGESET_POST_TYPE) != CHANGESET_POST_TYPE:
            return ChangesetQueryResult(items=[], found=0)

        filtered = self._apply_filters(select(Changeset), args)

        per_page = int(args.get("posts_per_page", DEFAULT_PER_PAGE))
        stmt = filtered.order_by(*self._ordering(args))
        if per_page >= 0:
            offset = args.get("offset")
            if offset is None:
                paged = max(int(args.get("paged", 1)), 1)
                offset = (paged - 1) * per_page
            stmt = stmt.offset(int(offset)).limit(per_page)

        items = list(self._session.scalars(stmt).unique().all())
        if not items:
            return ChangesetQueryResult(items=[], found=0)

        count_stmt = select(func.count()).select_from(filtered.order_by(None).subquery())
        found = int(self._session.execute(count_stmt).scalar_one())
        return ChangesetQueryResult(items=items, found=found)

    def _apply_filters(
        self,
        stmt: Select[tuple[Changeset]],
        args: Mapping[str, Any],
    ) -> Select[tuple[Changeset]]:
        statuses = _resolve_statuses(args.get("post_status"))
        stmt = stmt.where(Changeset.status.in_(statuses))

        author_in = args.get("author__in")
        if author_in:
            stmt = stmt.where(Changeset.author_id.in_([int(value) for value in author_in]))
        author_not_in = args.get("author__not_in")
        if author_not_in:
            stmt = stmt.where(Changeset.author_id.not_in([int(value) for value in author_not_in]))

        term = (args.get("s") or "").strip()
        if term:
            stmt = stmt.where(
                or_(
                    Changeset.title.icontains(term, autoescape=True),
                    cast(Changeset.content, String).icontains(term, autoescape=True),
                )
            )
        return stmt

    def _ordering(self, args: Mapping[str, Any]) -> list[Any]:
        orderby = args.get("orderby") or "date"
        descending = str(args.get("order") or "desc").lower() != "asc"
        term = (args.get("s") or "").strip()

        if orderby == "relevance" and term:
            title_match = case((Changeset.title.icontains(term, autoescape=True), 0), else_=1)
            return [title_match.asc(), Changeset.date_local.desc(), Changeset.id.desc()]

        column = _ORDER_COLUMNS.get(orderby, Changeset.date_local)
        if descending:
            return [column.desc(), Changeset.id.desc()]
        return [column.asc(), Changeset.id.asc()]

    # ---- Writes ------------------------------------------------------------

    def insert(self, changeset: Changeset) -> Changeset:
        try:
            self._session.add(changeset)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise ChangesetPersistenceError(
                "db_insert_error",
                "Could not insert changeset into the database.",
            ) from exc
        return changeset

    def save(self, changeset: Changeset) -> Changeset:
        try:
            self._session.flush()
        except SQLAlchemyError as exc:
            raise ChangesetPersistenceError(
                "db_update_error",
                "Could not update changeset in the database.",
            ) from exc
        return changeset

    def delete(self, changeset: Changeset) -> None:
        try:
            self._session.delete(changeset)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise ChangesetPersistenceError(
                "rest_cannot_delete",
                "The changeset cannot be deleted.",
            ) from exc


def _resolve_statuses(raw: Sequence[str] | str | None) -> list[ChangesetStatus]:
    if raw is None:
        values: list[str] = [_ANY_STATUS]
    elif isinstance(raw, str):
        values = [raw]
    else:
        values = list(raw)

    if _ANY_STATUS in values:
        return [status for status in ChangesetStatus if status not in _EXCLUDED_FROM_ANY]
    resolved: list[ChangesetStatus] = []
    for value in values:
        try:
            resolved.append(ChangesetStatus(value))
        except ValueError:
            continue
    return resolved


__all__ = ["ChangesetQueryResult", "ChangesetRepository"]
