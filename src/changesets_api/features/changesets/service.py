"""Business logic for customize changesets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy.orm import Session
from starlette.datastructures import URL

from changesets_api.common.logging import log_context
from changesets_api.common.time import local_to_utc, utc_now, utc_to_local
from changesets_api.core.auth import AuthenticatedPrincipal
from changesets_api.core.rbac import RbacService
from changesets_api.settings import Settings
from changesets_db.models import Changeset, ChangesetStatus

from .exceptions import ChangesetGoneError, ChangesetNotFoundError, ChangesetValidationError
from .hooks import ChangesetHooks
from .manager import ChangesetManager, ChangesetManagerResolver
from .pagination import build_pagination_headers, paginate
from .permissions import EDIT_CONTEXT, ChangesetAuthorizationGate
from .presenter import ChangesetPresenter
from .query import translate_collection_query
from .repository import ChangesetRepository
from .sanitizers import (
    DEFAULT_STATUS,
    QUERYABLE_STATUSES,
    WRITABLE_STATUSES,
    ResolvedDate,
    merge_settings,
    resolve_date,
    sanitize_settings,
    sanitize_statuses,
)
from .schemas import ChangesetCreate, ChangesetListQuery, ChangesetTitleIn, ChangesetWrite

logger = logging.getLogger(__name__)

# Statuses whose timestamp floats until explicitly set.
FLOATING_STATUSES = frozenset({ChangesetStatus.AUTO_DRAFT, ChangesetStatus.DRAFT})


@dataclass(slots=True)
class PreparedChangeset:
    """Sanitized write fields; ``None`` means the field was not supplied."""

    title: str | None = None
    content: dict[str, Any] | None = None
    status: str | None = None
    author_id: int | None = None
    date: ResolvedDate | None = None


@dataclass(frozen=True, slots=True)
class ChangesetWriteResult:
    data: dict[str, Any]
    uuid: str
    created: bool


class ChangesetsService:
    """Orchestrate translation, authorization, sanitization and assembly."""

    def __init__(
        self,
        *,
        session: Session,
        settings: Settings,
        principal: AuthenticatedPrincipal,
        rbac: RbacService,
        hooks: ChangesetHooks,
    ) -> None:
        self._session = session
        self._zone = settings.site_zone
        self._principal = principal
        self._repo = ChangesetRepository(session)
        self._gate = ChangesetAuthorizationGate(principal=principal, rbac=rbac)
        self._resolver = ChangesetManagerResolver(
            repository=self._repo,
            registrars=hooks.registrars,
        )
        self._presenter = ChangesetPresenter(
            gate=self._gate,
            transformers=hooks.response_transformers,
        )
        self._augmenters = tuple(hooks.query_augmenters)

    # ---- Reads -------------------------------------------------------------

    def list_changesets(
        self,
        params: ChangesetListQuery,
        *,
        base_url: URL,
    ) -> tuple[list[dict[str, Any]], dict[str, str]]:
        """Return one page of changesets plus the pagination headers."""

        logger.debug(
            "changesets.list.start",
            extra=log_context(
                user_id=self._principal.user_id,
                page=params.page,
                per_page=params.per_page,
                orderby=params.orderby,
            ),
        )
        self._gate.authorize_list(context=params.context)
        statuses = sanitize_statuses(params.status, gate=self._gate, allowed=QUERYABLE_STATUSES)
        query_args = translate_collection_query(
            params,
            statuses=statuses or [DEFAULT_STATUS],
            augmenters=self._augmenters,
        )
        page = paginate(
            self._repo.query,
            query_args,
            page=params.page,
            per_page=params.per_page,
        )

        items = [
            self._present(changeset, context=params.context)
            for changeset in page.items
            if self._gate.can_read(changeset)
        ]
        headers = build_pagination_headers(page, base_url)
        logger.info(
            "changesets.list.success",
            extra=log_context(
                user_id=self._principal.user_id,
                page=page.page,
                total=page.total,
                total_pages=page.total_pages,
                returned=len(items),
            ),
        )
        return items, headers

    def get_changeset(self, uuid: str, *, context: str) -> dict[str, Any]:
        manager = self._resolver.ensure(uuid)
        changeset = self._require_changeset(manager)
        self._gate.authorize_read(changeset, manager, context=context)
        return self._presenter.present(changeset, manager, context=context)

    # ---- Writes ------------------------------------------------------------

    def create_changeset(self, payload: ChangesetCreate) -> ChangesetWriteResult:
        """Create a changeset, or update the existing one that owns ``payload.uuid``."""

        self._reject_slug(payload)
        self._gate.authorize_create(author_id=payload.author)

        manager = self._resolver.ensure(payload.uuid)
        existing = manager.changeset()
        if existing is not None:
            self._gate.authorize_update(existing, manager, author_id=payload.author)

        prepared = self._prepare(payload, manager, existing)

        if existing is None:
            changeset = self._insert(manager, prepared)
            event = "changesets.create.success"
        else:
            changeset = self._apply(existing, prepared)
            event = "changesets.upsert.success"

        logger.info(
            event,
            extra=log_context(
                changeset_uuid=changeset.uuid,
                changeset_id=changeset.id,
                user_id=self._principal.user_id,
                status=changeset.status.value,
            ),
        )
        return ChangesetWriteResult(
            data=self._presenter.present(changeset, manager, context=EDIT_CONTEXT),
            uuid=changeset.uuid,
            created=existing is None,
        )

    def update_changeset(self, uuid: str, payload: ChangesetWrite) -> dict[str, Any]:
        self._reject_slug(payload)
        manager = self._resolver.ensure(uuid)
        changeset = self._require_changeset(manager)
        self._gate.authorize_update(changeset, manager, author_id=payload.author)

        prepared = self._prepare(payload, manager, changeset)
        changeset = self._apply(changeset, prepared)

        logger.info(
            "changesets.update.success",
            extra=log_context(
                changeset_uuid=changeset.uuid,
                changeset_id=changeset.id,
                user_id=self._principal.user_id,
                status=changeset.status.value,
            ),
        )
        return self._presenter.present(changeset, manager, context=EDIT_CONTEXT)

    def delete_changeset(self, uuid: str, *, force: bool) -> dict[str, Any]:
        """Trash the changeset, or remove it permanently when ``force`` is set."""

        manager = self._resolver.ensure(uuid)
        changeset = self._require_changeset(manager)
        self._gate.authorize_delete(changeset)

        if force:
            previous = self._presenter.present(changeset, manager, context=EDIT_CONTEXT)
            changeset_id = changeset.id
            self._repo.delete(changeset)
            manager.forget()
            logger.info(
                "changesets.delete.success",
                extra=log_context(
                    changeset_uuid=uuid,
                    changeset_id=changeset_id,
                    user_id=self._principal.user_id,
                    force=True,
                ),
            )
            return {"deleted": True, "previous": previous}

        if changeset.status == ChangesetStatus.TRASH:
            raise ChangesetGoneError(
                "rest_already_trashed",
                "The changeset has already been trashed.",
            )

        changeset.previous_status = changeset.status
        changeset.status = ChangesetStatus.TRASH
        self._repo.save(changeset)
        logger.info(
            "changesets.trash.success",
            extra=log_context(
                changeset_uuid=uuid,
                changeset_id=changeset.id,
                user_id=self._principal.user_id,
            ),
        )
        return self._presenter.present(changeset, manager, context=EDIT_CONTEXT)

    # ---- Helpers -----------------------------------------------------------

    def _present(self, changeset: Changeset, *, context: str) -> dict[str, Any]:
        manager = self._resolver.ensure(changeset.uuid)
        manager.bind(changeset)
        return self._presenter.present(changeset, manager, context=context)

    @staticmethod
    def _require_changeset(manager: ChangesetManager) -> Changeset:
        if manager.changeset_post_id() is None:
            raise ChangesetNotFoundError()
        return cast(Changeset, manager.changeset())

    @staticmethod
    def _reject_slug(payload: ChangesetWrite) -> None:
        if "slug" in payload.model_fields_set:
            raise ChangesetValidationError(
                "cannot_edit_changeset_slug",
                "Changeset slug cannot be edited.",
            )

    def _prepare(
        self,
        payload: ChangesetWrite,
        manager: ChangesetManager,
        existing: Changeset | None,
    ) -> PreparedChangeset:
        """Sanitize every supplied field; nothing is applied until all pass."""

        prepared = PreparedChangeset()

        if payload.title is not None:
            title = payload.title
            prepared.title = title.raw if isinstance(title, ChangesetTitleIn) else title

        if payload.settings is not None:
            incoming = sanitize_settings(payload.settings)
            self._gate.authorize_setting_writes(manager, incoming)
            current = dict(existing.content or {}) if existing is not None else {}
            prepared.content = merge_settings(current, incoming)

        if payload.date is not None:
            prepared.date = resolve_date(payload.date, is_utc=False, zone=self._zone)
        elif payload.date_gmt is not None:
            prepared.date = resolve_date(payload.date_gmt, is_utc=True, zone=self._zone)

        if payload.author is not None:
            if payload.author != self._principal.user_id and not self._repo.user_exists(
                payload.author
            ):
                raise ChangesetValidationError("rest_invalid_author", "Invalid author ID.")
            prepared.author_id = payload.author

        if payload.status is not None:
            statuses = sanitize_statuses(
                payload.status,
                gate=self._gate,
                allowed=WRITABLE_STATUSES,
            )
            prepared.status = statuses[0] if statuses else None
            self._gate.authorize_publish(prepared.status)

        return prepared

    def _insert(self, manager: ChangesetManager, prepared: PreparedChangeset) -> Changeset:
        now = utc_now()
        status = ChangesetStatus(prepared.status or DEFAULT_STATUS)
        if prepared.date is not None:
            date_local, date_gmt = prepared.date.local, prepared.date.gmt
        else:
            date_local = utc_to_local(now, self._zone)
            date_gmt = None if status in FLOATING_STATUSES else now

        author_id = prepared.author_id or self._principal.user_id
        if author_id is None:
            raise ChangesetValidationError("rest_invalid_author", "Invalid author ID.")

        changeset = Changeset(
            uuid=manager.uuid,
            status=status,
            author_id=author_id,
            title=prepared.title or "",
            content=prepared.content or {},
            date_local=date_local,
            date_gmt=date_gmt,
        )
        self._repo.insert(changeset)
        manager.bind(changeset)
        return changeset

    def _apply(self, changeset: Changeset, prepared: PreparedChangeset) -> Changeset:
        if prepared.title is not None:
            changeset.title = prepared.title
        if prepared.content is not None:
            changeset.content = prepared.content
        if prepared.author_id is not None:
            changeset.author_id = prepared.author_id
        if prepared.status is not None:
            changeset.status = ChangesetStatus(prepared.status)
            changeset.previous_status = None

        if prepared.date is not None:
            changeset.date_local = prepared.date.local
            changeset.date_gmt = prepared.date.gmt
        elif changeset.date_gmt is None and changeset.status not in FLOATING_STATUSES:
            changeset.date_gmt = local_to_utc(changeset.date_local, self._zone)

        self._repo.save(changeset)
        return changeset


__all__ = ["ChangesetWriteResult", "ChangesetsService", "PreparedChangeset"]
