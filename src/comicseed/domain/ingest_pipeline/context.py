"""Shared context structures for the seeding pipeline (batch + run state)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from comicseed.domain.model import ChildSyncMode, UpsertOutcome
from comicseed.domain.ports.persistence import ParentKey
from comicseed.domain.resolution import DEFAULT_MATCHERS, MatchSettings

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from comicseed.domain.metadata_cache import MetadataCache
    from comicseed.domain.ports.images import ImageAcquirerPort
    from comicseed.domain.ports.unit_of_work import SeedUnitOfWork
    from comicseed.domain.records import (
        LoadResult,
        RecordOrigin,
        ValidatedReferenceRecord,
        ValidatedSubUnitRecord,
        ValidatedWorkRecord,
    )
    from comicseed.domain.resolution import Matcher

DEFAULT_UNMATCHED_SAMPLE_SIZE = 100
DEFAULT_ISSUE_SAMPLE_SIZE = 100


class RecordKind(StrEnum):
    REFERENCE = "references"
    WORK = "works"
    CHAPTER = "chapters"


class IssueCategory(StrEnum):
    SKIPPED = "skipped"
    ERRORED = "errored"


@dataclass(slots=True)
class SeedBatch:
    """Validated records of one run, grouped by the order they are persisted in."""

    references: list[ValidatedReferenceRecord] = field(
        default_factory=list["ValidatedReferenceRecord"]
    )
    works: list[ValidatedWorkRecord] = field(default_factory=list["ValidatedWorkRecord"])
    chapters: list[ValidatedSubUnitRecord] = field(
        default_factory=list["ValidatedSubUnitRecord"]
    )

    @classmethod
    def from_load_result(cls, result: LoadResult) -> SeedBatch:
        return cls(
            references=result.references,
            works=result.works,
            chapters=result.chapters,
        )

    def __len__(self) -> int:
        return len(self.references) + len(self.works) + len(self.chapters)


@dataclass(slots=True, frozen=True)
class PipelineOptions:
    dry_run: bool = False
    placeholder_image: str | None = None
    child_sync: ChildSyncMode = ChildSyncMode.REPLACE
    image_concurrency: int | None = None
    unmatched_sample_size: int = DEFAULT_UNMATCHED_SAMPLE_SIZE
    issue_sample_size: int = DEFAULT_ISSUE_SAMPLE_SIZE
    match_settings: MatchSettings = field(default_factory=MatchSettings)


@dataclass(slots=True)
class KindStats:
    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errored: int = 0
    unmatched: int = 0

    def record(self, outcome: UpsertOutcome) -> None:
        if outcome is UpsertOutcome.CREATED:
            self.created += 1
        else:
            self.updated += 1


@dataclass(slots=True)
class RunStats:
    references: KindStats = field(default_factory=KindStats)
    works: KindStats = field(default_factory=KindStats)
    chapters: KindStats = field(default_factory=KindStats)

    def for_kind(self, kind: RecordKind) -> KindStats:
        match kind:
            case RecordKind.REFERENCE:
                return self.references
            case RecordKind.WORK:
                return self.works
            case RecordKind.CHAPTER:
                return self.chapters

    def items(self) -> list[tuple[RecordKind, KindStats]]:
        return [(kind, self.for_kind(kind)) for kind in RecordKind]

    @property
    def errored(self) -> int:
        return sum(stats.errored for _, stats in self.items())


@dataclass(slots=True, frozen=True)
class UnmatchedEntry:
    source_name: str
    source_index: int
    raw_identifier: str | None
    attempted_value: str | None


@dataclass(slots=True, frozen=True)
class RecordIssue:
    kind: RecordKind
    category: IssueCategory
    source_name: str
    source_index: int
    natural_key: str
    reason: str


@dataclass(slots=True)
class PipelineContext:
    """Mutable state shared across pipeline phases for one run.

    Everything here is created per run and handed to each phase explicitly;
    no phase keeps state of its own between runs.
    """

    unit_of_work_factory: Callable[[], SeedUnitOfWork]
    metadata_cache: MetadataCache
    image_acquirer: ImageAcquirerPort | None = None
    options: PipelineOptions = field(default_factory=PipelineOptions)
    matchers: Sequence[Matcher] = DEFAULT_MATCHERS
    stats: RunStats = field(default_factory=RunStats)
    known_parents: dict[UUID, ParentKey] = field(default_factory=dict["UUID", ParentKey])
    unmatched: list[UnmatchedEntry] = field(default_factory=list[UnmatchedEntry])
    issues: list[RecordIssue] = field(default_factory=list[RecordIssue])
    strategy_hits: dict[str, int] = field(default_factory=dict[str, int])

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run

    def register_parent(self, parent_id: UUID, *, slug: str, title: str) -> None:
        self.known_parents[parent_id] = ParentKey(id=parent_id, slug=slug, title=title)

    def record_unmatched(
        self,
        origin: RecordOrigin,
        *,
        raw_identifier: str | None,
        attempted_value: str | None,
    ) -> None:
        self.stats.chapters.unmatched += 1
        if len(self.unmatched) >= self.options.unmatched_sample_size:
            return
        self.unmatched.append(
            UnmatchedEntry(
                source_name=origin.source_name,
                source_index=origin.source_index,
                raw_identifier=raw_identifier,
                attempted_value=attempted_value,
            )
        )

    def record_issue(
        self,
        kind: RecordKind,
        category: IssueCategory,
        origin: RecordOrigin,
        *,
        natural_key: str,
        reason: str,
    ) -> None:
        stats = self.stats.for_kind(kind)
        if category is IssueCategory.SKIPPED:
            stats.skipped += 1
        else:
            stats.errored += 1
        if len(self.issues) >= self.options.issue_sample_size:
            return
        self.issues.append(
            RecordIssue(
                kind=kind,
                category=category,
                source_name=origin.source_name,
                source_index=origin.source_index,
                natural_key=natural_key,
                reason=reason,
            )
        )
