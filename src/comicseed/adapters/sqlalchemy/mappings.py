"""SQLAlchemy mapping metadata for the comicseed catalog."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Final

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from comicseed.domain.model import (
    Artist,
    Author,
    Chapter,
    Genre,
    ReferenceEntity,
    ReferenceKind,
    Work,
    WorkStatus,
    WorkType,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Reference vocabulary ---------------------------------------------------------


def _reference_table(name: str) -> Table:
    return Table(
        name,
        mapper_registry.metadata,
        Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
        Column("name", String(255), nullable=False),
        Column("description", Text, nullable=True),
        Column("created_at", UTCDateTime(), nullable=False),
        UniqueConstraint("name"),
    )


author_table = _reference_table("author")
artist_table = _reference_table("artist")
genre_table = _reference_table("genre")
work_type_table = _reference_table("work_type")

REFERENCE_TABLE_BY_KIND: Final[dict[ReferenceKind, Table]] = {
    ReferenceKind.AUTHOR: author_table,
    ReferenceKind.ARTIST: artist_table,
    ReferenceKind.GENRE: genre_table,
    ReferenceKind.WORK_TYPE: work_type_table,
}

# Catalog ---------------------------------------------------------------------

work_table = Table(
    "work",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("title", String(500), nullable=False),
    Column("slug", String(500), nullable=False),
    Column("description", Text, nullable=True),
    Column("cover_image", String(1000), nullable=True),
    Column("status", Enum(WorkStatus, native_enum=False), nullable=False),
    Column("publication_date", String(100), nullable=True),
    Column("rating", Float, nullable=False, default=0.0),
    Column("views", Integer, nullable=False, default=0),
    Column("url", String(1000), nullable=True),
    Column("serialization", String(255), nullable=True),
    Column("author_id", UUIDColumnType, ForeignKey("author.id"), nullable=True),
    Column("artist_id", UUIDColumnType, ForeignKey("artist.id"), nullable=True),
    Column("type_id", UUIDColumnType, ForeignKey("work_type.id"), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint("title"),
    UniqueConstraint("slug"),
)

work_genre_table = Table(
    "work_genre",
    mapper_registry.metadata,
    Column("work_id", UUIDColumnType, ForeignKey("work.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "genre_id", UUIDColumnType, ForeignKey("genre.id", ondelete="CASCADE"), primary_key=True
    ),
)

work_image_table = Table(
    "work_image",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "work_id", UUIDColumnType, ForeignKey("work.id", ondelete="CASCADE"), nullable=False
    ),
    Column("image_url", String(1000), nullable=False),
    Column("image_order", Integer, nullable=False),
)

chapter_table = Table(
    "chapter",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "work_id", UUIDColumnType, ForeignKey("work.id", ondelete="CASCADE"), nullable=False
    ),
    Column("slug", String(500), nullable=False),
    Column("title", String(500), nullable=True),
    Column("chapter_number", Integer, nullable=False),
    Column("release_date", String(100), nullable=True),
    Column("url", String(1000), nullable=True),
    Column("content", Text, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint("work_id", "chapter_number", name="uq_chapter_work_chapter_number"),
)

chapter_image_table = Table(
    "chapter_image",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "chapter_id",
        UUIDColumnType,
        ForeignKey("chapter.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("image_url", String(1000), nullable=False),
    Column("page_number", Integer, nullable=False),
)

REFERENCE_CLASSES: Final[tuple[type[ReferenceEntity], ...]] = (Author, Artist, Genre, WorkType)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    for reference_cls in REFERENCE_CLASSES:
        mapper_registry.map_imperatively(
            reference_cls,
            REFERENCE_TABLE_BY_KIND[reference_cls.KIND],
        )

    mapper_registry.map_imperatively(Work, work_table)
    mapper_registry.map_imperatively(Chapter, chapter_table)

    configure_mappers()
    return mapper_registry

