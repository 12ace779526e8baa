"""Domain ports."""

from __future__ import annotations

from .images import CachedImage, ImageAcquirerPort, ImageRequest
from .persistence import (
    ChapterRepository,
    ParentKey,
    ReferenceRepository,
    Repository,
    WorkRepository,
)
from .unit_of_work import RepositoryCollection, SeedRepositories, SeedUnitOfWork, UnitOfWork

__all__ = [
    "CachedImage",
    "ChapterRepository",
    "ImageAcquirerPort",
    "ImageRequest",
    "ParentKey",
    "ReferenceRepository",
    "Repository",
    "RepositoryCollection",
    "SeedRepositories",
    "SeedUnitOfWork",
    "UnitOfWork",
    "WorkRepository",
]
