from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, inspect

from comicseed.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemySeedUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)
from comicseed.domain.errors import PersistenceConflict
from comicseed.domain.model import Author, ReferenceKind, Work

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemySeedUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    with SqlAlchemySeedUnitOfWork() as uow:
        assert uow.session.get_bind() is engine_b


def test_startup_migrates_schema_to_head() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine)

    tables = set(inspect(engine).get_table_names())
    assert {
        "author",
        "artist",
        "genre",
        "work_type",
        "work",
        "work_genre",
        "work_image",
        "chapter",
        "chapter_image",
        "alembic_version",
    } <= tables


def test_unit_of_work_commits_and_rolls_back(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemySeedUnitOfWork() as uow:
        uow.repositories.references(ReferenceKind.AUTHOR).add(Author(name="Oda"))
        uow.commit()

    with pytest.raises(RuntimeError), SqlAlchemySeedUnitOfWork() as uow:
        uow.repositories.works.add(Work(title="Discarded", slug="discarded"))
        raise RuntimeError("boom")

    with SqlAlchemySeedUnitOfWork() as uow:
        assert uow.repositories.authors.get_by_name("Oda") is not None
        assert uow.repositories.works.get_by_slug("discarded") is None


def test_unit_of_work_translates_conflicts(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(PersistenceConflict), SqlAlchemySeedUnitOfWork() as uow:
        uow.repositories.authors.add(Author(name="Oda"))
        uow.repositories.authors.add(Author(name="Oda"))


def test_repositories_require_an_open_session(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemySeedUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories
