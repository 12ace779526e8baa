"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, func, insert, select

from comicseed.adapters.sqlalchemy.errors import translate_errors
from comicseed.adapters.sqlalchemy.mappings import (
    REFERENCE_TABLE_BY_KIND,
    chapter_image_table,
    chapter_table,
    work_genre_table,
    work_image_table,
    work_table,
)
from comicseed.domain.model import Artist, Author, Chapter, Genre, ReferenceEntity, Work, WorkType
from comicseed.domain.ports.persistence import ParentKey

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy import Table
    from sqlalchemy.orm import Session


class _SqlAlchemyRepository[TEntity]:
    """Shared add/count behaviour; ``add`` flushes so conflicts surface per call."""

    def __init__(self, session: Session, table: Table) -> None:
        self.session = session
        self._table = table

    def add(self, entity: TEntity) -> None:
        with translate_errors():
            self.session.add(entity)
            self.session.flush()

    def count(self) -> int:
        stmt = select(func.count()).select_from(self._table)
        with translate_errors():
            return int(self.session.execute(stmt).scalar_one())


class SqlAlchemyReferenceRepository[TEntity: ReferenceEntity](_SqlAlchemyRepository[TEntity]):
    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        super().__init__(session, REFERENCE_TABLE_BY_KIND[entity_cls.KIND])
        self._entity_cls = entity_cls

    def get_by_name(self, name: str) -> TEntity | None:
        stmt = select(self._entity_cls).where(self._table.c.name == name).limit(1)
        with translate_errors():
            return self.session.execute(stmt).scalar_one_or_none()

    def list_all(self) -> list[TEntity]:
        with translate_errors():
            return list(self.session.execute(select(self._entity_cls)).scalars())


class SqlAlchemyAuthorRepository(SqlAlchemyReferenceRepository[Author]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Author)


class SqlAlchemyArtistRepository(SqlAlchemyReferenceRepository[Artist]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Artist)


class SqlAlchemyGenreRepository(SqlAlchemyReferenceRepository[Genre]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Genre)


class SqlAlchemyWorkTypeRepository(SqlAlchemyReferenceRepository[WorkType]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, WorkType)


class SqlAlchemyWorkRepository(_SqlAlchemyRepository[Work]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, work_table)

    def get_by_slug(self, slug: str) -> Work | None:
        stmt = select(Work).where(work_table.c.slug == slug).limit(1)
        with translate_errors():
            return self.session.execute(stmt).scalar_one_or_none()

    def list_parent_keys(self) -> list[ParentKey]:
        stmt = select(work_table.c.id, work_table.c.slug, work_table.c.title)
        with translate_errors():
            rows = self.session.execute(stmt).all()
        return [ParentKey(id=row.id, slug=row.slug, title=row.title) for row in rows]

    def genre_ids(self, work_id: UUID) -> list[UUID]:
        stmt = select(work_genre_table.c.genre_id).where(work_genre_table.c.work_id == work_id)
        with translate_errors():
            return list(self.session.execute(stmt).scalars())

    def replace_genres(self, work_id: UUID, genre_ids: Sequence[UUID]) -> None:
        unique_ids = list(dict.fromkeys(genre_ids))
        with translate_errors():
            self.session.flush()
            self.session.execute(
                delete(work_genre_table).where(work_genre_table.c.work_id == work_id)
            )
            if unique_ids:
                self.session.execute(
                    insert(work_genre_table),
                    [{"work_id": work_id, "genre_id": genre_id} for genre_id in unique_ids],
                )

    def image_urls(self, work_id: UUID) -> list[str]:
        stmt = (
            select(work_image_table.c.image_url)
            .where(work_image_table.c.work_id == work_id)
            .order_by(work_image_table.c.image_order)
        )
        with translate_errors():
            return list(self.session.execute(stmt).scalars())

    def replace_images(self, work_id: UUID, image_urls: Sequence[str]) -> None:
        with translate_errors():
            self.session.flush()
            self.session.execute(
                delete(work_image_table).where(work_image_table.c.work_id == work_id)
            )
            if image_urls:
                self.session.execute(
                    insert(work_image_table),
                    [
                        {"work_id": work_id, "image_url": url, "image_order": order}
                        for order, url in enumerate(image_urls, start=1)
                    ],
                )


class SqlAlchemyChapterRepository(_SqlAlchemyRepository[Chapter]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, chapter_table)

    def get_by_natural_key(self, work_id: UUID, chapter_number: int) -> Chapter | None:
        stmt = (
            select(Chapter)
            .where(chapter_table.c.work_id == work_id)
            .where(chapter_table.c.chapter_number == chapter_number)
            .limit(1)
        )
        with translate_errors():
            return self.session.execute(stmt).scalar_one_or_none()

    def image_urls(self, chapter_id: UUID) -> list[str]:
        stmt = (
            select(chapter_image_table.c.image_url)
            .where(chapter_image_table.c.chapter_id == chapter_id)
            .order_by(chapter_image_table.c.page_number)
        )
        with translate_errors():
            return list(self.session.execute(stmt).scalars())

    def replace_images(self, chapter_id: UUID, image_urls: Sequence[str]) -> None:
        with translate_errors():
            self.session.flush()
            self.session.execute(
                delete(chapter_image_table).where(chapter_image_table.c.chapter_id == chapter_id)
            )
            if image_urls:
                self.session.execute(
                    insert(chapter_image_table),
                    [
                        {"chapter_id": chapter_id, "image_url": url, "page_number": page}
                        for page, url in enumerate(image_urls, start=1)
                    ],
                )
