"""Translate collection query parameters into the store's native query shape."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from changesets_db.models import CHANGESET_POST_TYPE

from .exceptions import ChangesetValidationError
from .schemas import ChangesetListQuery

logger = logging.getLogger(__name__)

type QueryArgs = dict[str, Any]

# API parameter name -> native query key.
COLLECTION_PARAMS: Mapping[str, str] = {
    "author": "author__in",
    "author_exclude": "author__not_in",
    "offset": "offset",
    "order": "order",
    "orderby": "orderby",
    "page": "paged",
    "search": "s",
    "status": "post_status",
}

ORDERBY_ALIASES: Mapping[str, str] = {
    "id": "ID",
    "slug": "post_name",
}


@runtime_checkable
class QueryAugmenter(Protocol):
    """Adjusts the assembled query descriptor right before execution."""

    def augment(self, query: QueryArgs, params: ChangesetListQuery) -> QueryArgs: ...


def translate_collection_query(
    params: ChangesetListQuery,
    *,
    statuses: Sequence[str],
    augmenters: Sequence[QueryAugmenter] = (),
) -> QueryArgs:
    """Build the native query descriptor for ``params``.

    ``statuses`` is the already sanitized status list. Only registered
    parameters carrying a value are translated; ``per_page`` always sets
    ``posts_per_page`` and the document type is always injected.
    """

    values = params.model_dump()
    values["status"] = list(statuses)

    args: QueryArgs = {}
    for api_name, native_name in COLLECTION_PARAMS.items():
        value = values.get(api_name)
        if value is None:
            continue
        args[native_name] = value

    args["posts_per_page"] = params.per_page
    args["post_type"] = CHANGESET_POST_TYPE
    args["ignore_sticky_posts"] = True

    orderby = args.get("orderby")
    if orderby in ORDERBY_ALIASES:
        args["orderby"] = ORDERBY_ALIASES[orderby]

    if args.get("orderby") == "relevance" and not (params.search or "").strip():
        raise ChangesetValidationError(
            "rest_no_search_term_defined",
            "You need to define a search term to order by relevance.",
        )

    for augmenter in augmenters:
        args = augmenter.augment(args, params)

    logger.debug(
        "changesets.query.translated",
        extra={"query_keys": sorted(args), "paged": args.get("paged")},
    )
    return args


__all__ = [
    "COLLECTION_PARAMS",
    "ORDERBY_ALIASES",
    "QueryAugmenter",
    "QueryArgs",
    "translate_collection_query",
]
