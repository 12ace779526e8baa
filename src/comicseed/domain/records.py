"""Validated, shape-normalised records produced by the loader.

These values live for a single run only; the pipeline consumes them and
persists their effects, never the records themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from comicseed.domain.model import ReferenceKind, WorkStatus


@dataclass(slots=True, frozen=True, kw_only=True)
class RecordOrigin:
    source_name: str
    source_index: int

    def describe(self) -> str:
        return f"{self.source_name}#{self.source_index}"


@dataclass(slots=True, frozen=True, kw_only=True)
class ValidatedReferenceRecord:
    origin: RecordOrigin
    kind: ReferenceKind
    name: str
    description: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class ValidatedWorkRecord:
    origin: RecordOrigin
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
    author: str | None = None
    artist: str | None = None
    work_type: str | None = None
    genres: tuple[str, ...] = ()
    image_urls: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True, kw_only=True)
class ValidatedSubUnitRecord:
    origin: RecordOrigin
    chapter_number: int
    slug: str
    parent_slug: str | None = None
    parent_title: str | None = None
    title: str | None = None
    url: str | None = None
    release_date: str | None = None
    content: str | None = None
    image_urls: tuple[str, ...] = ()


type ValidatedRecord = ValidatedWorkRecord | ValidatedSubUnitRecord | ValidatedReferenceRecord


@dataclass(slots=True, frozen=True, kw_only=True)
class QuarantinedRecord:
    origin: RecordOrigin
    record: object
    reason: str


@dataclass(slots=True, frozen=True, kw_only=True)
class SourceFailure:
    source_name: str
    reason: str


@dataclass(slots=True)
class LoadResult:
    valid: list[ValidatedRecord] = field(default_factory=list["ValidatedRecord"])
    invalid: list[QuarantinedRecord] = field(default_factory=list[QuarantinedRecord])
    failed_sources: list[SourceFailure] = field(default_factory=list[SourceFailure])
    loaded_sources: list[str] = field(default_factory=list[str])

    def extend(self, other: LoadResult) -> None:
        self.valid.extend(other.valid)
        self.invalid.extend(other.invalid)
        self.failed_sources.extend(other.failed_sources)
        self.loaded_sources.extend(other.loaded_sources)

    @property
    def works(self) -> list[ValidatedWorkRecord]:
        return [record for record in self.valid if isinstance(record, ValidatedWorkRecord)]

    @property
    def chapters(self) -> list[ValidatedSubUnitRecord]:
        return [record for record in self.valid if isinstance(record, ValidatedSubUnitRecord)]

    @property
    def references(self) -> list[ValidatedReferenceRecord]:
        return [record for record in self.valid if isinstance(record, ValidatedReferenceRecord)]
