"""Pydantic models describing the scraped record variants.

Each variant's ``before`` validator performs the shape normalisation (string
collapsing, genre splitting, image collection) so the typed fields below only
ever see plain strings, lists and numbers.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Final, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from comicseed.domain.model import ReferenceKind, WorkStatus
from comicseed.domain.resolution import normalize_slug

from .shapes import (
    chapter_number_from_text,
    collapse_to_string,
    collect_image_urls,
    first_present,
    leading_int,
    normalize_genres,
    pick_cover,
)

FLAT_CHAPTER_KEYS: Final[frozenset[str]] = frozenset(
    {"comicslug", "comictitle", "chaptername", "chapterslug", "chaptertitle"}
)
NESTED_CHAPTER_KEYS: Final[frozenset[str]] = frozenset(
    {"comic", "comicSlug", "comic_slug", "chapterNumber", "chapter_number"}
)
WORK_KEYS: Final[frozenset[str]] = frozenset({"title", "slug"})
REFERENCE_KINDS: Final[frozenset[str]] = frozenset(kind.value for kind in ReferenceKind)
# signed 64-bit ceiling of the store's integer columns
MAX_STORED_INT: Final[int] = 2**63 - 1


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _text(value: object) -> str | None:
    return collapse_to_string(value)


class SeedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ReferencePayload(SeedBaseModel):
    kind: ReferenceKind
    name: str
    description: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        data = cast(Mapping[str, object], value)
        kind = data.get("kind")
        return {
            "kind": kind.strip().lower() if isinstance(kind, str) else kind,
            "name": _text(data) or "",
            "description": _text(first_present(data, "description", "bio")),
        }

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("reference name is blank")
        return value.strip()


class WorkPayload(SeedBaseModel):
    title: str
    slug: str
    description: str | None = None
    cover_image: str | None = None
    status: WorkStatus = WorkStatus.ONGOING
    publication_date: str | None = None
    rating: float = 0.0
    views: int = Field(default=0, ge=0, le=MAX_STORED_INT)
    url: str | None = None
    serialization: str | None = None
    author: str | None = None
    artist: str | None = None
    work_type: str | None = None
    genres: list[str] = Field(default_factory=list[str])
    image_urls: list[str] = Field(default_factory=list[str])

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        data = cast(Mapping[str, object], value)
        title = _text(first_present(data, "title", "name")) or ""
        image_urls = collect_image_urls(data)
        return {
            "title": title,
            "slug": normalize_slug(_text(data.get("slug")) or title),
            "description": _text(first_present(data, "description", "synopsis", "summary")),
            "cover_image": pick_cover(data, image_urls),
            "status": WorkStatus.parse(_text(data.get("status"))),
            "publication_date": _text(
                first_present(data, "publicationDate", "publication_date", "released")
            ),
            "rating": data.get("rating"),
            "views": data.get("views"),
            "url": _text(data.get("url")),
            "serialization": _text(data.get("serialization")),
            "author": _text(first_present(data, "author", "authors")),
            "artist": _text(first_present(data, "artist", "artists")),
            "work_type": _text(first_present(data, "type", "comicType", "work_type")),
            "genres": normalize_genres(first_present(data, "genres", "genre")),
            "image_urls": image_urls,
        }

    @field_validator("title")
    @classmethod
    def _require_title(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("work title is blank")
        return value.strip()

    @field_validator("slug")
    @classmethod
    def _require_slug(cls, value: str) -> str:
        if not value:
            raise ValueError("work slug cannot be derived")
        return value

    @field_validator("rating", mode="before")
    @classmethod
    def _clamp_rating(cls, value: object) -> float:
        try:
            rating = float(cast(str, value)) if value is not None else 0.0
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(rating):
            return 0.0
        return min(max(rating, 0.0), 10.0)

    @field_validator("views", mode="before")
    @classmethod
    def _coerce_views(cls, value: object) -> int:
        return leading_int(value) or 0


class ChapterPayload(SeedBaseModel):
    """Fields shared by both chapter variants once their shapes are normalised."""

    parent_slug: str | None = None
    parent_title: str | None = None
    chapter_number: int = Field(ge=0, le=MAX_STORED_INT)
    slug: str
    title: str | None = None
    url: str | None = None
    release_date: str | None = None
    content: str | None = None
    image_urls: list[str] = Field(default_factory=list[str])

    _normalize_parent = field_validator("parent_slug", "parent_title", mode="before")(
        _blank_to_none
    )

    @field_validator("chapter_number", mode="before")
    @classmethod
    def _require_number(cls, value: object) -> object:
        if value is None:
            raise ValueError("chapter number not found in record")
        return value

    @field_validator("slug")
    @classmethod
    def _require_slug(cls, value: str) -> str:
        if not value:
            raise ValueError("chapter slug cannot be derived")
        return value

    @model_validator(mode="after")
    def _require_parent_reference(self) -> ChapterPayload:
        if not (self.parent_slug or self.parent_title or self.url):
            raise ValueError("chapter has no parent reference")
        return self

    @staticmethod
    def _shared_fields(
        data: Mapping[str, object],
        *,
        parent_slug: str | None,
        parent_title: str | None,
        name: str | None,
    ) -> dict[str, object]:
        title = _text(first_present(data, "title", "chaptertitle")) or name
        url = _text(data.get("url"))
        explicit_slug = _text(first_present(data, "chapterslug", "slug"))
        number = leading_int(first_present(data, "chapterNumber", "chapter_number", "number"))
        if number is None:
            number = chapter_number_from_text(name, title, explicit_slug, url)
        if number is None:
            number = leading_int(name)
        slug = normalize_slug(explicit_slug) or normalize_slug(name or title)
        if not slug and number is not None:
            slug = f"chapter-{number}"
        return {
            "parent_slug": parent_slug,
            "parent_title": parent_title,
            "chapter_number": number,
            "slug": slug,
            "title": title,
            "url": url,
            "release_date": _text(
                first_present(data, "releaseDate", "release_date", "updated_at", "updatedAt")
            ),
            "content": _text(data.get("content")),
            "image_urls": collect_image_urls(data),
        }


class FlatChapterPayload(ChapterPayload):
    """``{"comicslug": ..., "comictitle": ..., "chaptername": ...}`` records."""

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        data = cast(Mapping[str, object], value)
        return cls._shared_fields(
            data,
            parent_slug=_text(first_present(data, "comicslug", "comicSlug", "comic")),
            parent_title=_text(data.get("comictitle")),
            name=_text(first_present(data, "chaptername", "name")),
        )


class NestedChapterPayload(ChapterPayload):
    """``{"comic": {"title": ..., "slug": ...}, "chapterNumber": ...}`` records."""

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        data = cast(Mapping[str, object], value)
        comic = data.get("comic")
        parent_slug: str | None
        parent_title: str | None = None
        if isinstance(comic, Mapping):
            comic_map = cast(Mapping[str, object], comic)
            parent_slug = _text(comic_map.get("slug"))
            parent_title = _text(comic_map.get("title")) or _text(comic_map)
        else:
            parent_slug = _text(comic)
        parent_slug = parent_slug or _text(first_present(data, "comicSlug", "comic_slug"))
        return cls._shared_fields(
            data,
            parent_slug=parent_slug,
            parent_title=parent_title or _text(first_present(data, "comicTitle", "comic_title")),
            name=_text(first_present(data, "name", "chapterName")),
        )


type RecordPayload = WorkPayload | FlatChapterPayload | NestedChapterPayload | ReferencePayload


def detect_variant(record: Mapping[str, object]) -> type[RecordPayload] | None:
    """Pick the payload variant from the record's characteristic keys."""

    keys = set(record)
    if keys & FLAT_CHAPTER_KEYS:
        return FlatChapterPayload
    if keys & NESTED_CHAPTER_KEYS:
        return NestedChapterPayload
    kind = record.get("kind")
    if isinstance(kind, str) and kind.strip().lower() in REFERENCE_KINDS and "title" not in keys:
        return ReferencePayload
    if keys & WORK_KEYS:
        return WorkPayload
    return None
