"""Translate validated payloads into domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from comicseed.domain.records import (
    ValidatedReferenceRecord,
    ValidatedSubUnitRecord,
    ValidatedWorkRecord,
)

from .schema import ChapterPayload, ReferencePayload, WorkPayload

if TYPE_CHECKING:
    from comicseed.domain.records import RecordOrigin, ValidatedRecord

    from .schema import RecordPayload


def translate_work(payload: WorkPayload, *, origin: RecordOrigin) -> ValidatedWorkRecord:
    return ValidatedWorkRecord(
        origin=origin,
        title=payload.title,
        slug=payload.slug,
        description=payload.description,
        cover_image=payload.cover_image,
        status=payload.status,
        publication_date=payload.publication_date,
        rating=payload.rating,
        views=payload.views,
        url=payload.url,
        serialization=payload.serialization,
        author=payload.author,
        artist=payload.artist,
        work_type=payload.work_type,
        genres=tuple(payload.genres),
        image_urls=tuple(payload.image_urls),
    )


def translate_chapter(payload: ChapterPayload, *, origin: RecordOrigin) -> ValidatedSubUnitRecord:
    return ValidatedSubUnitRecord(
        origin=origin,
        chapter_number=payload.chapter_number,
        slug=payload.slug,
        parent_slug=payload.parent_slug,
        parent_title=payload.parent_title,
        title=payload.title,
        url=payload.url,
        release_date=payload.release_date,
        content=payload.content,
        image_urls=tuple(payload.image_urls),
    )


def translate_reference(
    payload: ReferencePayload, *, origin: RecordOrigin
) -> ValidatedReferenceRecord:
    return ValidatedReferenceRecord(
        origin=origin,
        kind=payload.kind,
        name=payload.name,
        description=payload.description,
    )


def translate_payload(payload: RecordPayload, *, origin: RecordOrigin) -> ValidatedRecord:
    if isinstance(payload, WorkPayload):
        return translate_work(payload, origin=origin)
    if isinstance(payload, ChapterPayload):
        return translate_chapter(payload, origin=origin)
    return translate_reference(payload, origin=origin)
