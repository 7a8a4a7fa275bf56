"""Project changesets into their public representation."""

from __future__ import annotations

import html
from collections.abc import Sequence
from typing import Any

from changesets_db.models import Changeset, ChangesetStatus

from .hooks import ResponseTransformer
from .manager import ChangesetManager
from .permissions import EDIT_CONTEXT, ChangesetAuthorizationGate
from .sanitizers import format_date
from .schemas import ChangesetOut, ChangesetSettingOut, ChangesetTitleOut

PRIVATE_TITLE_PREFIX = "Private: "


def render_title(changeset: Changeset) -> str:
    rendered = html.escape(changeset.title or "", quote=False)
    if changeset.status == ChangesetStatus.PRIVATE:
        return f"{PRIVATE_TITLE_PREFIX}{rendered}"
    return rendered


class ChangesetPresenter:
    """Assemble the response dict for one changeset."""

    def __init__(
        self,
        *,
        gate: ChangesetAuthorizationGate,
        transformers: Sequence[ResponseTransformer] = (),
    ) -> None:
        self._gate = gate
        self._transformers = tuple(transformers)

    def present(
        self,
        changeset: Changeset,
        manager: ChangesetManager,
        *,
        context: str,
    ) -> dict[str, Any]:
        readable = self._gate.readable_settings(manager, changeset.content or {})
        model = ChangesetOut(
            author=changeset.author_id,
            date=format_date(changeset.date_local),
            date_gmt=format_date(changeset.date_gmt),
            settings={key: ChangesetSettingOut(**value) for key, value in readable.items()},
            slug=changeset.uuid,
            status=changeset.status.value,
            title=ChangesetTitleOut(raw=changeset.title or "", rendered=render_title(changeset)),
        )
        exclude = None if context == EDIT_CONTEXT else {"title": {"raw"}}
        data = model.serializable_dict(exclude=exclude)
        for transformer in self._transformers:
            data = transformer.transform(data, changeset, context=context)
        return data


__all__ = ["ChangesetPresenter", "render_title"]
