"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from comicseed.domain.model import ReferenceKind

if TYPE_CHECKING:
    from types import TracebackType

    from comicseed.domain.ports.persistence import (
        ChapterRepository,
        ReferenceRepository,
        WorkRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...  # the repo list itself should be immutable

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class SeedRepositories(RepositoryCollection):
    """Repositories required by a seeding run."""

    authors: ReferenceRepository
    artists: ReferenceRepository
    genres: ReferenceRepository
    work_types: ReferenceRepository
    works: WorkRepository
    chapters: ChapterRepository

    def references(self, kind: ReferenceKind) -> ReferenceRepository:
        match kind:
            case ReferenceKind.AUTHOR:
                return self.authors
            case ReferenceKind.ARTIST:
                return self.artists
            case ReferenceKind.GENRE:
                return self.genres
            case ReferenceKind.WORK_TYPE:
                return self.work_types


type SeedUnitOfWork = UnitOfWork[SeedRepositories]
