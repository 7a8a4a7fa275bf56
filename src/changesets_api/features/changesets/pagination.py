"""Pagination metadata for changeset collections."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from starlette.datastructures import URL

from changesets_db.models import Changeset

from .exceptions import ChangesetValidationError
from .repository import ChangesetQueryResult

logger = logging.getLogger(__name__)

TOTAL_HEADER = "X-WP-Total"
TOTAL_PAGES_HEADER = "X-WP-TotalPages"

type QueryRunner = Callable[[Mapping[str, Any]], ChangesetQueryResult]

# Bounds dropped when recounting an empty page.
UNBOUNDED_KEYS = frozenset({"paged", "offset"})


@dataclass(frozen=True, slots=True)
class ChangesetPage:
    items: list[Changeset]
    total: int
    total_pages: int
    page: int
    per_page: int

    @property
    def prev_page(self) -> int | None:
        if self.page <= 1:
            return None
        return min(self.page - 1, max(self.total_pages, 1))

    @property
    def next_page(self) -> int | None:
        if self.total_pages > self.page:
            return self.page + 1
        return None


def paginate(
    run_query: QueryRunner,
    query_args: Mapping[str, Any],
    *,
    page: int,
    per_page: int,
) -> ChangesetPage:
    """Execute ``query_args`` and compute totals for the requested page.

    An empty first result triggers a recount with the page and offset bounds removed, so
    an out-of-range page is told apart from an empty collection.
    """

    result = run_query(query_args)
    total = result.found

    if total < 1:
        unbounded = {
            key: value for key, value in query_args.items() if key not in UNBOUNDED_KEYS
        }
        total = run_query(unbounded).found
        logger.debug(
            "changesets.pagination.recount",
            extra={"page": page, "total": total},
        )

    total_pages = math.ceil(total / per_page) if per_page else 0

    if page > total_pages and total > 0:
        raise ChangesetValidationError(
            "rest_post_invalid_page_number",
            "The page number requested is larger than the number of pages available.",
        )

    return ChangesetPage(
        items=result.items,
        total=total,
        total_pages=total_pages,
        page=page,
        per_page=per_page,
    )


def build_pagination_headers(page: ChangesetPage, base_url: URL) -> dict[str, str]:
    """Return total headers plus a ``Link`` header with ``prev``/``next`` entries."""

    headers = {
        TOTAL_HEADER: str(page.total),
        TOTAL_PAGES_HEADER: str(page.total_pages),
    }
    links: list[str] = []
    if page.prev_page is not None:
        links.append(f'<{base_url.include_query_params(page=page.prev_page)}>; rel="prev"')
    if page.next_page is not None:
        links.append(f'<{base_url.include_query_params(page=page.next_page)}>; rel="next"')
    if links:
        headers["Link"] = ", ".join(links)
    return headers


__all__ = [
    "TOTAL_HEADER",
    "TOTAL_PAGES_HEADER",
    "ChangesetPage",
    "build_pagination_headers",
    "paginate",
]
