"""Adapter turning scraped JSON documents into validated domain records."""

from __future__ import annotations

from .loader import (
    CONTAINER_KEYS,
    expand_sources,
    extract_items,
    load,
    load_document,
    read_document,
    validate_record,
)
from .schema import (
    FlatChapterPayload,
    NestedChapterPayload,
    ReferencePayload,
    WorkPayload,
    detect_variant,
)
from .shapes import collapse_to_string, collect_image_urls, normalize_genres

__all__ = [
    "CONTAINER_KEYS",
    "FlatChapterPayload",
    "NestedChapterPayload",
    "ReferencePayload",
    "WorkPayload",
    "collapse_to_string",
    "collect_image_urls",
    "detect_variant",
    "expand_sources",
    "extract_items",
    "load",
    "load_document",
    "normalize_genres",
    "read_document",
    "validate_record",
]
