from __future__ import annotations

import re
from collections.abc import Iterable

_SLUG_SEPARATORS = re.compile(r"[\s,]+")


def parse_csv_or_repeated(value: object) -> list[str] | None:
    """Normalise query values that may be CSV strings or repeated params.

    Order of first appearance is preserved and duplicates are dropped.
    """

    if value is None:
        return None
    raw: list[str] = []
    if isinstance(value, str):
        raw.extend(segment.strip() for segment in value.split(","))
    elif isinstance(value, Iterable) and not isinstance(value, str | bytes):
        for item in value:
            if isinstance(item, str):
                raw.extend(segment.strip() for segment in item.split(","))
            else:
                raw.append(str(item))
    else:
        raw.append(str(value))
    tokens = list(dict.fromkeys(token for token in raw if token))
    return tokens or None


def parse_slug_list(value: object) -> list[str]:
    """Split ``value`` into an ordered, de-duplicated list of slugs.

    Strings are split on commas and whitespace; nested lists are flattened.
    """

    if value is None:
        return []
    items: Iterable[object]
    if isinstance(value, str):
        items = [value]
    elif isinstance(value, Iterable) and not isinstance(value, bytes):
        items = value
    else:
        items = [value]

    slugs: list[str] = []
    for item in items:
        if isinstance(item, str):
            candidates = _SLUG_SEPARATORS.split(item)
        elif isinstance(item, Iterable) and not isinstance(item, bytes):
            candidates = parse_slug_list(item)
        else:
            candidates = [str(item)]
        for candidate in candidates:
            slug = candidate.strip().lower()
            if slug and slug not in slugs:
                slugs.append(slug)
    return slugs


__all__ = ["parse_csv_or_repeated", "parse_slug_list"]
