from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from comicseed.adapters.sqlalchemy.repositories import (
    SqlAlchemyChapterRepository,
    SqlAlchemyGenreRepository,
    SqlAlchemyWorkRepository,
)
from comicseed.domain.errors import ConflictKind, PersistenceConflict
from comicseed.domain.model import Chapter, Genre, Work, WorkStatus

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def _work(slug: str = "one-piece", title: str = "One Piece") -> Work:
    return Work(title=title, slug=slug, status=WorkStatus.COMPLETED)


def test_reference_repository_round_trip(sqlite_session: Session) -> None:
    repository = SqlAlchemyGenreRepository(sqlite_session)
    action = Genre(name="Action")
    repository.add(action)
    repository.add(Genre(name="Drama"))
    sqlite_session.commit()

    fetched = repository.get_by_name("Action")

    assert fetched is not None
    assert fetched.id == action.id
    assert repository.get_by_name("Horror") is None
    assert {genre.name for genre in repository.list_all()} == {"Action", "Drama"}
    assert repository.count() == 2


def test_work_repository_persists_scalar_fields(sqlite_session: Session) -> None:
    repository = SqlAlchemyWorkRepository(sqlite_session)
    work = _work()
    repository.add(work)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    fetched = repository.get_by_slug("one-piece")

    assert fetched is not None
    assert fetched is not work
    assert fetched.title == "One Piece"
    assert fetched.status is WorkStatus.COMPLETED
    assert fetched.created_at.tzinfo is not None
    (key,) = repository.list_parent_keys()
    assert (key.id, key.slug, key.title) == (work.id, "one-piece", "One Piece")


def test_replace_images_keeps_source_order(sqlite_session: Session) -> None:
    repository = SqlAlchemyWorkRepository(sqlite_session)
    work = _work()
    repository.add(work)

    repository.replace_images(work.id, ["comics/op/3.jpg", "comics/op/1.jpg", "comics/op/2.jpg"])
    assert repository.image_urls(work.id) == [
        "comics/op/3.jpg",
        "comics/op/1.jpg",
        "comics/op/2.jpg",
    ]

    repository.replace_images(work.id, ["comics/op/9.jpg"])
    assert repository.image_urls(work.id) == ["comics/op/9.jpg"]

    repository.replace_images(work.id, [])
    assert repository.image_urls(work.id) == []


def test_replace_genres_drops_duplicates(sqlite_session: Session) -> None:
    genres = SqlAlchemyGenreRepository(sqlite_session)
    works = SqlAlchemyWorkRepository(sqlite_session)
    action, drama = Genre(name="Action"), Genre(name="Drama")
    genres.add(action)
    genres.add(drama)
    work = _work()
    works.add(work)

    works.replace_genres(work.id, [action.id, drama.id, action.id])
    assert set(works.genre_ids(work.id)) == {action.id, drama.id}

    works.replace_genres(work.id, [drama.id])
    assert works.genre_ids(work.id) == [drama.id]


@pytest.mark.parametrize(
    ("second", "constraint"),
    [
        (("one-piece", "Another Title"), "uq_work_slug"),
        (("another-slug", "One Piece"), "uq_work_title"),
    ],
)
def test_duplicate_work_is_reported_as_conflict(
    sqlite_session: Session,
    second: tuple[str, str],
    constraint: str,
) -> None:
    repository = SqlAlchemyWorkRepository(sqlite_session)
    repository.add(_work())
    sqlite_session.commit()

    with pytest.raises(PersistenceConflict) as excinfo:
        repository.add(_work(*second))

    assert excinfo.value.kind is ConflictKind.DUPLICATE
    assert excinfo.value.constraint == constraint
    sqlite_session.rollback()
    assert repository.count() == 1


def test_chapter_for_unknown_work_violates_foreign_key(sqlite_session: Session) -> None:
    repository = SqlAlchemyChapterRepository(sqlite_session)

    with pytest.raises(PersistenceConflict) as excinfo:
        repository.add(Chapter(work_id=uuid4(), chapter_number=1, slug="chapter-1"))

    assert excinfo.value.kind is ConflictKind.CONSTRAINT
    assert excinfo.value.constraint == "foreign_key"
    assert "Constraint violation" in str(excinfo.value)


def test_chapter_natural_key_is_unique_per_work(sqlite_session: Session) -> None:
    works = SqlAlchemyWorkRepository(sqlite_session)
    chapters = SqlAlchemyChapterRepository(sqlite_session)
    work = _work()
    works.add(work)
    chapter = Chapter(work_id=work.id, chapter_number=1050, slug="chapter-1050")
    chapters.add(chapter)
    chapters.replace_images(chapter.id, ["comics/op/chapter-1050/01.jpg"])
    sqlite_session.commit()

    assert chapters.get_by_natural_key(work.id, 1050) is chapter
    assert chapters.get_by_natural_key(work.id, 1051) is None
    assert chapters.image_urls(chapter.id) == ["comics/op/chapter-1050/01.jpg"]

    with pytest.raises(PersistenceConflict) as excinfo:
        chapters.add(Chapter(work_id=work.id, chapter_number=1050, slug="other"))

    assert excinfo.value.constraint == "uq_chapter_work_chapter_number"
