from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

import pytest

from comicseed.domain.metadata_cache import (
    MetadataCache,
    UnitOfWorkReferenceStore,
    canonical_reference_name,
)
from comicseed.domain.model import ReferenceKind
from tests.helpers.records import InMemoryReferenceStore

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from comicseed.adapters.sqlalchemy.unit_of_work import SqlAlchemySeedUnitOfWork


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, "Unknown"),
        ("", "Unknown"),
        ("   ", "Unknown"),
        ("_", "Unknown"),
        ("unknown", "Unknown"),
        ("UNKNOWN", "Unknown"),
        ("  Eiichiro   Oda ", "Eiichiro Oda"),
    ],
)
def test_canonical_reference_name_folds_placeholders(raw: str | None, expected: str) -> None:
    assert canonical_reference_name(raw) == expected


def test_placeholders_share_one_unknown_row() -> None:
    store = InMemoryReferenceStore()
    cache = MetadataCache(store)

    ids = {cache.resolve(ReferenceKind.AUTHOR, name) for name in (None, "", "_", "Unknown")}

    assert len(ids) == 1
    assert store.creates == 1
    assert cache.stats.created == 1
    assert cache.stats.hits == 3


def test_same_name_in_different_kinds_are_distinct() -> None:
    cache = MetadataCache(InMemoryReferenceStore())

    author = cache.resolve(ReferenceKind.AUTHOR, "Oda")
    artist = cache.resolve(ReferenceKind.ARTIST, "Oda")

    assert author != artist


def test_warm_preloads_existing_rows() -> None:
    store = InMemoryReferenceStore()
    existing = store.create(ReferenceKind.GENRE, "Action")
    cache = MetadataCache(store)

    assert cache.warm() == 1
    assert cache.resolve(ReferenceKind.GENRE, "Action") == existing
    assert store.finds == 0
    assert cache.stats.hits == 1


def test_dry_run_never_creates_rows() -> None:
    store = InMemoryReferenceStore()
    cache = MetadataCache(store, dry_run=True)

    first = cache.resolve(ReferenceKind.WORK_TYPE, "Manhwa")
    second = cache.resolve(ReferenceKind.WORK_TYPE, "Manhwa")

    assert first == second
    assert store.creates == 0
    assert store.rows == {}
    assert cache.stats.created == 1


def test_conflicting_create_reuses_winner() -> None:
    store = InMemoryReferenceStore(conflict_on_create=True)
    cache = MetadataCache(store)

    resolved = cache.resolve(ReferenceKind.GENRE, "Drama")

    assert resolved == store.rows[(ReferenceKind.GENRE, "Drama")]


class _SlowReferenceStore(InMemoryReferenceStore):
    def find(self, kind: ReferenceKind, name: str) -> UUID | None:
        time.sleep(0.005)
        return super().find(kind, name)


def test_concurrent_resolution_of_new_name_creates_one_row() -> None:
    store = _SlowReferenceStore()
    cache = MetadataCache(store)
    workers = 8
    barrier = threading.Barrier(workers)

    def resolve() -> UUID:
        barrier.wait()
        return cache.resolve(ReferenceKind.GENRE, "Isekai")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        ids = list(pool.map(lambda _: resolve(), range(workers)))

    assert len(set(ids)) == 1
    assert store.creates == 1
    assert list(store.rows) == [(ReferenceKind.GENRE, "Isekai")]
    assert cache.stats.hits == workers - 1


def test_resolve_many_keeps_order_and_drops_duplicates() -> None:
    cache = MetadataCache(InMemoryReferenceStore())

    ids = cache.resolve_many(ReferenceKind.GENRE, ["Action", "Drama", "action ", "Action"])

    assert len(ids) == 3
    assert ids[0] == cache.resolve(ReferenceKind.GENRE, "Action")


def test_unit_of_work_store_commits_each_creation(
    sqlite_unit_of_work: Callable[[], SqlAlchemySeedUnitOfWork],
) -> None:
    cache = MetadataCache(UnitOfWorkReferenceStore(sqlite_unit_of_work))

    created = cache.resolve(ReferenceKind.AUTHOR, "Oda", "Mangaka")

    fresh = MetadataCache(UnitOfWorkReferenceStore(sqlite_unit_of_work))
    assert fresh.warm() == 1
    assert fresh.resolve(ReferenceKind.AUTHOR, "Oda") == created
    with sqlite_unit_of_work() as uow:
        author = uow.repositories.authors.get_by_name("Oda")
        assert author is not None
        assert author.description == "Mangaka"
