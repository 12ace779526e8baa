"""Ports for persisting catalog aggregates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from comicseed.domain.model import Chapter, ReferenceEntity, Work

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID


@dataclass(slots=True, frozen=True)
class ParentKey:
    """Identifying fields of a stored work, as needed by parent resolution."""

    id: UUID
    slug: str | None
    title: str | None


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def count(self) -> int: ...


@runtime_checkable
class ReferenceRepository(Repository[ReferenceEntity], Protocol):
    """Repository contract for one reference vocabulary (authors, genres, ...)."""

    def get_by_name(self, name: str) -> ReferenceEntity | None: ...

    def list_all(self) -> Sequence[ReferenceEntity]: ...


@runtime_checkable
class WorkRepository(Repository[Work], Protocol):
    """Repository contract for works and their child collections."""

    def get_by_slug(self, slug: str) -> Work | None: ...

    def list_parent_keys(self) -> Sequence[ParentKey]: ...

    def genre_ids(self, work_id: UUID) -> Sequence[UUID]: ...

    def replace_genres(self, work_id: UUID, genre_ids: Sequence[UUID]) -> None: ...

    def image_urls(self, work_id: UUID) -> Sequence[str]: ...

    def replace_images(self, work_id: UUID, image_urls: Sequence[str]) -> None: ...


@runtime_checkable
class ChapterRepository(Repository[Chapter], Protocol):
    """Repository contract for chapters keyed by (work, chapter number)."""

    def get_by_natural_key(self, work_id: UUID, chapter_number: int) -> Chapter | None: ...

    def image_urls(self, chapter_id: UUID) -> Sequence[str]: ...

    def replace_images(self, chapter_id: UUID, image_urls: Sequence[str]) -> None: ...
