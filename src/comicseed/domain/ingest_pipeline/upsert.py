"""Idempotent writes of works and chapters keyed by their natural keys."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import uuid4

from comicseed.domain.model import Chapter, ChildSyncMode, UpsertOutcome, Work, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime
    from uuid import UUID

    from comicseed.domain.ports.unit_of_work import SeedRepositories
    from comicseed.domain.records import ValidatedSubUnitRecord, ValidatedWorkRecord


@dataclass(slots=True, frozen=True)
class UpsertResult:
    entity_id: UUID
    outcome: UpsertOutcome


@dataclass(slots=True, frozen=True, kw_only=True)
class WorkReferences:
    """Reference ids resolved through the metadata cache for one work."""

    author_id: UUID
    artist_id: UUID
    type_id: UUID
    genre_ids: tuple[UUID, ...] = ()


@dataclass(slots=True, frozen=True, kw_only=True)
class StoredImages:
    """Local paths to persist for one record, in source order."""

    cover: str | None = None
    pages: tuple[str, ...] = ()


def upsert_work(
    repositories: SeedRepositories,
    record: ValidatedWorkRecord,
    *,
    references: WorkReferences,
    images: StoredImages,
    child_sync: ChildSyncMode = ChildSyncMode.REPLACE,
    dry_run: bool = False,
    now: datetime | None = None,
) -> UpsertResult:
    """Insert or update the work identified by ``record.slug``.

    Genre links and the image list are replaced wholesale. With ``dry_run``
    the store is only read, and the outcome is what a real run would report.
    """

    works = repositories.works
    existing = works.get_by_slug(record.slug)
    if dry_run:
        if existing is None:
            return UpsertResult(entity_id=uuid4(), outcome=UpsertOutcome.CREATED)
        return UpsertResult(entity_id=existing.id, outcome=UpsertOutcome.UPDATED)

    if existing is None:
        work = Work(title=record.title, slug=record.slug)
        _apply_work_fields(work, record, references, images)
        works.add(work)
        outcome = UpsertOutcome.CREATED
    else:
        work = existing
        _apply_work_fields(work, record, references, images)
        work.touch(now or utcnow())
        outcome = UpsertOutcome.UPDATED

    _sync_children(
        replace=lambda values: works.replace_genres(work.id, values),
        incoming=references.genre_ids,
        mode=child_sync,
    )
    _sync_children(
        replace=lambda values: works.replace_images(work.id, values),
        incoming=images.pages,
        mode=child_sync,
    )
    return UpsertResult(entity_id=work.id, outcome=outcome)


def upsert_chapter(
    repositories: SeedRepositories,
    record: ValidatedSubUnitRecord,
    *,
    work_id: UUID,
    images: StoredImages,
    child_sync: ChildSyncMode = ChildSyncMode.REPLACE,
    dry_run: bool = False,
    now: datetime | None = None,
) -> UpsertResult:
    """Insert or update the chapter identified by ``(work_id, chapter_number)``."""

    chapters = repositories.chapters
    existing = chapters.get_by_natural_key(work_id, record.chapter_number)
    if dry_run:
        if existing is None:
            return UpsertResult(entity_id=uuid4(), outcome=UpsertOutcome.CREATED)
        return UpsertResult(entity_id=existing.id, outcome=UpsertOutcome.UPDATED)

    if existing is None:
        chapter = Chapter(work_id=work_id, chapter_number=record.chapter_number, slug=record.slug)
        _apply_chapter_fields(chapter, record)
        chapters.add(chapter)
        outcome = UpsertOutcome.CREATED
    else:
        chapter = existing
        _apply_chapter_fields(chapter, record)
        chapter.touch(now or utcnow())
        outcome = UpsertOutcome.UPDATED

    _sync_children(
        replace=lambda values: chapters.replace_images(chapter.id, values),
        incoming=images.pages,
        mode=child_sync,
    )
    return UpsertResult(entity_id=chapter.id, outcome=outcome)


def _apply_work_fields(
    work: Work,
    record: ValidatedWorkRecord,
    references: WorkReferences,
    images: StoredImages,
) -> None:
    work.title = record.title
    work.description = record.description
    work.cover_image = images.cover
    work.status = record.status
    work.publication_date = record.publication_date
    work.rating = record.rating
    work.views = record.views
    work.url = record.url
    work.serialization = record.serialization
    work.author_id = references.author_id
    work.artist_id = references.artist_id
    work.type_id = references.type_id


def _apply_chapter_fields(chapter: Chapter, record: ValidatedSubUnitRecord) -> None:
    chapter.slug = record.slug
    chapter.title = record.title
    chapter.release_date = record.release_date
    chapter.url = record.url
    chapter.content = record.content


def _sync_children[T](
    *,
    replace: Callable[[Sequence[T]], None],
    incoming: Sequence[T],
    mode: ChildSyncMode,
) -> None:
    if not incoming and mode is ChildSyncMode.PRESERVE_ON_EMPTY:
        return
    replace(incoming)
