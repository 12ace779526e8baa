"""SQLAlchemy adapter package for comicseed."""

from __future__ import annotations

from .errors import translate_errors, translate_integrity_error
from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyArtistRepository,
    SqlAlchemyAuthorRepository,
    SqlAlchemyChapterRepository,
    SqlAlchemyGenreRepository,
    SqlAlchemyWorkRepository,
    SqlAlchemyWorkTypeRepository,
)
from .unit_of_work import SqlAlchemySeedUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyArtistRepository",
    "SqlAlchemyAuthorRepository",
    "SqlAlchemyChapterRepository",
    "SqlAlchemyGenreRepository",
    "SqlAlchemySeedUnitOfWork",
    "SqlAlchemyWorkRepository",
    "SqlAlchemyWorkTypeRepository",
    "StartupError",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
    "translate_errors",
    "translate_integrity_error",
]
