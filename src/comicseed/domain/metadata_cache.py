"""Get-or-create cache for author, artist, genre and work-type references."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol
from uuid import UUID, uuid4

from comicseed.domain.errors import PersistenceConflict
from comicseed.domain.model import REFERENCE_CLASS_BY_KIND, UNKNOWN_NAME, ReferenceKind

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from comicseed.domain.ports.unit_of_work import SeedUnitOfWork

log = getLogger(__name__)

PLACEHOLDER_NAMES = frozenset({"", "_", "unknown"})


def canonical_reference_name(name: str | None) -> str:
    """Fold blank and placeholder names into the single ``Unknown`` bucket."""

    if name is None:
        return UNKNOWN_NAME
    collapsed = " ".join(name.split())
    if collapsed.casefold() in PLACEHOLDER_NAMES:
        return UNKNOWN_NAME
    return collapsed


class ReferenceStore(Protocol):
    def find(self, kind: ReferenceKind, name: str) -> UUID | None: ...

    def create(self, kind: ReferenceKind, name: str, description: str | None = None) -> UUID: ...

    def existing(self) -> Iterable[tuple[ReferenceKind, str, UUID]]: ...


class UnitOfWorkReferenceStore:
    """Reference store committing every creation in its own unit of work.

    Cached ids therefore always point at committed rows, even when the record
    that triggered the creation later fails and rolls back.
    """

    def __init__(self, unit_of_work_factory: Callable[[], SeedUnitOfWork]) -> None:
        self._unit_of_work_factory = unit_of_work_factory

    def find(self, kind: ReferenceKind, name: str) -> UUID | None:
        with self._unit_of_work_factory() as uow:
            entity = uow.repositories.references(kind).get_by_name(name)
            return None if entity is None else entity.id

    def create(self, kind: ReferenceKind, name: str, description: str | None = None) -> UUID:
        entity = REFERENCE_CLASS_BY_KIND[kind](name=name, description=description)
        with self._unit_of_work_factory() as uow:
            uow.repositories.references(kind).add(entity)
            uow.commit()
        return entity.id

    def existing(self) -> Iterable[tuple[ReferenceKind, str, UUID]]:
        rows: list[tuple[ReferenceKind, str, UUID]] = []
        with self._unit_of_work_factory() as uow:
            for kind in ReferenceKind:
                rows.extend(
                    (kind, entity.name, entity.id)
                    for entity in uow.repositories.references(kind).list_all()
                )
        return rows


@dataclass(slots=True)
class CacheStats:
    hits: int = 0
    misses: int = 0
    created: int = 0
    warmed: int = 0


@dataclass(slots=True)
class MetadataCache:
    """Per-run map of ``(kind, name)`` to reference ids.

    Resolution is serialised with one lock per cache so the check-then-create
    sequence never runs twice for the same new name. In dry-run mode lookups
    still read the store, but misses produce synthetic ids instead of rows.
    """

    store: ReferenceStore
    dry_run: bool = False
    stats: CacheStats = field(default_factory=CacheStats)
    _ids: dict[tuple[ReferenceKind, str], UUID] = field(
        default_factory=dict[tuple[ReferenceKind, str], UUID]
    )
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def warm(self) -> int:
        """Preload every stored reference row; returns the number cached."""

        with self._lock:
            before = len(self._ids)
            for kind, name, reference_id in self.store.existing():
                self._ids.setdefault((kind, canonical_reference_name(name)), reference_id)
            self.stats.warmed = len(self._ids) - before
        log.info("Metadata cache warmed with %s reference(s)", self.stats.warmed)
        return self.stats.warmed

    def resolve(
        self,
        kind: ReferenceKind,
        name: str | None,
        description: str | None = None,
    ) -> UUID:
        canonical = canonical_reference_name(name)
        key = (kind, canonical)
        with self._lock:
            cached = self._ids.get(key)
            if cached is not None:
                self.stats.hits += 1
                return cached

            self.stats.misses += 1
            reference_id = self.store.find(kind, canonical)
            if reference_id is None:
                if self.dry_run:
                    reference_id = uuid4()
                    log.debug("Dry run: would create %s %r", kind.value, canonical)
                else:
                    reference_id = self._create(kind, canonical, description)
                self.stats.created += 1
            self._ids[key] = reference_id
            return reference_id

    def _create(self, kind: ReferenceKind, name: str, description: str | None) -> UUID:
        try:
            reference_id = self.store.create(kind, name, description)
        except PersistenceConflict:
            # another writer inserted the same name between our lookup and insert
            existing = self.store.find(kind, name)
            if existing is None:
                raise
            return existing
        log.debug("Created %s %r", kind.value, name)
        return reference_id

    def resolve_many(self, kind: ReferenceKind, names: Iterable[str]) -> list[UUID]:
        """Resolve ``names`` in order, dropping duplicate ids."""

        resolved: list[UUID] = []
        for name in names:
            reference_id = self.resolve(kind, name)
            if reference_id not in resolved:
                resolved.append(reference_id)
        return resolved

    def __len__(self) -> int:
        return len(self._ids)
