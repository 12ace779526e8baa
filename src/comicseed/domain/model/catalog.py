"""Canonical catalog entities: works, chapters and their reference vocabulary.

Entities are plain dataclasses; the SQLAlchemy adapter maps them imperatively.
Child collections (genre links, ordered image lists) are not modelled as
attributes here because they are always replaced wholesale through the
repositories.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import ClassVar
from uuid import UUID, uuid4

from comicseed.domain.model.enums import ReferenceKind, WorkStatus

UNKNOWN_NAME = "Unknown"


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class ReferenceEntity:
    """Low-cardinality vocabulary row shared by many works."""

    KIND: ClassVar[ReferenceKind]

    name: str
    description: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class Author(ReferenceEntity):
    KIND: ClassVar[ReferenceKind] = ReferenceKind.AUTHOR


@dataclass(eq=False, kw_only=True)
class Artist(ReferenceEntity):
    KIND: ClassVar[ReferenceKind] = ReferenceKind.ARTIST


@dataclass(eq=False, kw_only=True)
class Genre(ReferenceEntity):
    KIND: ClassVar[ReferenceKind] = ReferenceKind.GENRE


@dataclass(eq=False, kw_only=True)
class WorkType(ReferenceEntity):
    KIND: ClassVar[ReferenceKind] = ReferenceKind.WORK_TYPE


REFERENCE_CLASS_BY_KIND: dict[ReferenceKind, type[ReferenceEntity]] = {
    ReferenceKind.AUTHOR: Author,
    ReferenceKind.ARTIST: Artist,
    ReferenceKind.GENRE: Genre,
    ReferenceKind.WORK_TYPE: WorkType,
}


@dataclass(eq=False, kw_only=True)
class Work:
    title: str
    slug: str
    description: str | None = None
    cover_image: str | None = None
    status: WorkStatus = WorkStatus.ONGOING
    publication_date: str | None = None
    rating: float = 0.0
    views: int = 0
    url: str | None = None
    serialization: str | None = None
    author_id: UUID | None = None
    artist_id: UUID | None = None
    type_id: UUID | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def touch(self, now: datetime | None = None) -> None:
        self.updated_at = now or utcnow()


@dataclass(eq=False, kw_only=True)
class Chapter:
    work_id: UUID
    chapter_number: int
    slug: str
    title: str | None = None
    release_date: str | None = None
    url: str | None = None
    content: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def touch(self, now: datetime | None = None) -> None:
        self.updated_at = now or utcnow()
