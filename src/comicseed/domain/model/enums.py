"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ReferenceKind(StrEnum):
    AUTHOR = "author"
    ARTIST = "artist"
    GENRE = "genre"
    WORK_TYPE = "type"


class WorkStatus(StrEnum):
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    HIATUS = "Hiatus"
    DROPPED = "Dropped"
    SEASON_END = "Season End"
    COMING_SOON = "Coming Soon"

    @classmethod
    def parse(cls, value: object) -> WorkStatus:
        """Match ``value`` case-insensitively, falling back to ``ONGOING``."""

        if isinstance(value, str):
            folded = " ".join(value.split()).casefold()
            for status in cls:
                if status.value.casefold() == folded:
                    return status
        return cls.ONGOING


class ImageOrigin(StrEnum):
    CACHE = "cache"
    FRESH = "fresh"


class UpsertOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"


class ChildSyncMode(StrEnum):
    """How child collections (genre links, image lists) are synchronised."""

    REPLACE = "replace"
    PRESERVE_ON_EMPTY = "preserve_on_empty"
