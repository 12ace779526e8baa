"""Shape normalisation for scraped fields that arrive in many forms.

Scrapers disagree on whether an author is ``"Oda"``, ``{"name": "Oda"}``,
``[{"person": {"fullName": "Oda"}}]`` or something else entirely. These helpers
collapse such values into plain strings and lists before schema validation.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Final, cast

STRING_CANDIDATE_KEYS: Final[tuple[str, ...]] = (
    "name",
    "fullName",
    "title",
    "url",
    "src",
    "path",
    "filename",
    "slug",
    "id",
)
WRAPPER_KEYS: Final[tuple[str, ...]] = ("person", "attributes")
IMAGE_KEYS: Final[tuple[str, ...]] = (
    "images",
    "image_urls",
    "image_urls_list",
    "image_list",
    "image",
)
COVER_KEYS: Final[tuple[str, ...]] = ("coverImage", "cover_image", "cover")

_LEADING_INT = re.compile(r"^\s*\+?(\d+)")
_CHAPTER_NUMBER = re.compile(r"chapter\s*[-_]?\s*(\d+)", re.IGNORECASE)


def _scalar_text(value: object) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(int(value)) if value.is_integer() else str(value)
    return None


def collapse_to_string(value: object, *, _nested: bool = False) -> str | None:
    """Collapse a string, object, or array of either into one string.

    Objects are searched with ``STRING_CANDIDATE_KEYS`` in priority order, then
    one level into ``person``/``attributes`` wrappers. Arrays yield their first
    element that collapses.
    """

    text = _scalar_text(value)
    if text is not None:
        return text
    if isinstance(value, Mapping):
        mapping = cast(Mapping[str, object], value)
        for key in STRING_CANDIDATE_KEYS:
            text = _scalar_text(mapping.get(key))
            if text is not None:
                return text
        if not _nested:
            for wrapper in WRAPPER_KEYS:
                inner = mapping.get(wrapper)
                if isinstance(inner, Mapping):
                    text = collapse_to_string(inner, _nested=True)
                    if text is not None:
                        return text
        return None
    if isinstance(value, (list, tuple)):
        for item in cast(list[object], value):
            text = collapse_to_string(item, _nested=_nested)
            if text is not None:
                return text
    return None


def _ordered_unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for value in values:
        key = value.casefold()
        if key in seen:
            continue
        seen.add(key)
        unique.append(value)
    return unique


def normalize_genres(value: object) -> list[str]:
    """Turn a comma-separated string or a list of strings/objects into genre names."""

    if value is None:
        return []
    if isinstance(value, str):
        parts = [part.strip() for part in value.split(",")]
    elif isinstance(value, (list, tuple)):
        parts = [collapse_to_string(item) or "" for item in cast(list[object], value)]
    else:
        parts = [collapse_to_string(value) or ""]
    return _ordered_unique([part.strip() for part in parts if part and part.strip()])


def collect_image_urls(record: Mapping[str, object]) -> list[str]:
    urls: list[str] = []
    for key in IMAGE_KEYS:
        value = record.get(key)
        if value is None:
            continue
        items = cast(list[object], value) if isinstance(value, (list, tuple)) else [value]
        for item in items:
            url = collapse_to_string(item)
            if url and url not in urls:
                urls.append(url)
    return urls


def pick_cover(record: Mapping[str, object], image_urls: list[str]) -> str | None:
    for key in COVER_KEYS:
        cover = collapse_to_string(record.get(key))
        if cover:
            return cover
    return image_urls[0] if image_urls else None


def first_present(record: Mapping[str, object], *keys: str) -> object:
    """Return the first value under ``keys`` that is not ``None`` or blank."""

    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def leading_int(value: object) -> int | None:
    """Parse the leading non-negative integer of ``value``."""

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value >= 0 else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def chapter_number_from_text(*values: object) -> int | None:
    """Find ``chapter <n>`` in the first value that contains it."""

    for value in values:
        if not isinstance(value, str):
            continue
        match = _CHAPTER_NUMBER.search(value)
        if match:
            return int(match.group(1))
    return None
