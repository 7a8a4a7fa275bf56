"""Extension points injected at application construction."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from fastapi import Request

from changesets_db.models import Changeset

from .query import QueryAugmenter
from .registry import CoreSettingsRegistrar, DocumentTypeRegistrar


@runtime_checkable
class ResponseTransformer(Protocol):
    """Adjusts an assembled changeset representation before it is returned."""

    def transform(
        self,
        data: dict[str, Any],
        changeset: Changeset,
        *,
        context: str,
    ) -> dict[str, Any]: ...


@dataclass(frozen=True, slots=True)
class ChangesetHooks:
    query_augmenters: Sequence[QueryAugmenter] = ()
    registrars: Sequence[DocumentTypeRegistrar] = field(
        default_factory=lambda: (CoreSettingsRegistrar(),)
    )
    response_transformers: Sequence[ResponseTransformer] = ()


def get_changeset_hooks(request: Request) -> ChangesetHooks:
    hooks = getattr(request.app.state, "changeset_hooks", None)
    return hooks if hooks is not None else ChangesetHooks()


__all__ = ["ChangesetHooks", "ResponseTransformer", "get_changeset_hooks"]
