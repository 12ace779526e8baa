"""Domain model for comicseed."""

from __future__ import annotations

from .catalog import (
    REFERENCE_CLASS_BY_KIND,
    UNKNOWN_NAME,
    Artist,
    Author,
    Chapter,
    Genre,
    ReferenceEntity,
    Work,
    WorkType,
    utcnow,
)
from .enums import ChildSyncMode, ImageOrigin, ReferenceKind, UpsertOutcome, WorkStatus

__all__ = [
    "REFERENCE_CLASS_BY_KIND",
    "UNKNOWN_NAME",
    "Artist",
    "Author",
    "Chapter",
    "ChildSyncMode",
    "Genre",
    "ImageOrigin",
    "ReferenceEntity",
    "ReferenceKind",
    "UpsertOutcome",
    "Work",
    "WorkStatus",
    "WorkType",
    "utcnow",
]
