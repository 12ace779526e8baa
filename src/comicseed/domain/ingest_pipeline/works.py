"""Work phase: resolve references, cache images and upsert each work."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from comicseed.domain.errors import PersistenceConflict, PersistenceError
from comicseed.domain.ingest_pipeline.context import IssueCategory, RecordKind
from comicseed.domain.ingest_pipeline.images import (
    acquire_images,
    requests_for,
    stored_images,
    work_namespace,
)
from comicseed.domain.ingest_pipeline.orchestrator import PipelinePhase
from comicseed.domain.ingest_pipeline.upsert import WorkReferences, upsert_work
from comicseed.domain.model import ReferenceKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from comicseed.domain.ingest_pipeline.context import PipelineContext, SeedBatch
    from comicseed.domain.ports.images import CachedImage, ImageRequest
    from comicseed.domain.records import ValidatedWorkRecord

log = getLogger(__name__)


class WorksPhase(PipelinePhase):
    name: str = "works"

    def run(self, batch: SeedBatch, *, context: PipelineContext) -> None:
        requests: list[ImageRequest] = []
        for record in batch.works:
            requests.extend(
                requests_for(work_namespace(record.slug), record.cover_image, *record.image_urls)
            )
        acquired = acquire_images(requests, context=context)

        for record in batch.works:
            self._process(record, context, acquired)

        stats = context.stats.works
        log.info(
            "Works: %s processed, %s created, %s updated, %s skipped, %s errored",
            stats.processed,
            stats.created,
            stats.updated,
            stats.skipped,
            stats.errored,
        )

    def _process(
        self,
        record: ValidatedWorkRecord,
        context: PipelineContext,
        acquired: Mapping[tuple[str, str], CachedImage],
    ) -> None:
        stats = context.stats.works
        stats.processed += 1
        images = stored_images(
            work_namespace(record.slug),
            record.image_urls,
            acquired,
            cover_url=record.cover_image,
            placeholder=context.options.placeholder_image,
        )
        try:
            references = _resolve_references(record, context)
            with context.unit_of_work_factory() as uow:
                result = upsert_work(
                    uow.repositories,
                    record,
                    references=references,
                    images=images,
                    child_sync=context.options.child_sync,
                    dry_run=context.dry_run,
                )
                if not context.dry_run:
                    uow.commit()
        except PersistenceConflict as exc:
            log.warning("Skipped work %s (%s): %s", record.origin.describe(), record.slug, exc)
            context.record_issue(
                RecordKind.WORK,
                IssueCategory.SKIPPED,
                record.origin,
                natural_key=record.slug,
                reason=str(exc),
            )
            return
        except PersistenceError as exc:
            log.error("Failed work %s (%s): %s", record.origin.describe(), record.slug, exc)
            context.record_issue(
                RecordKind.WORK,
                IssueCategory.ERRORED,
                record.origin,
                natural_key=record.slug,
                reason=str(exc),
            )
            return
        except Exception as exc:  # noqa: BLE001
            log.exception("Failed work %s (%s)", record.origin.describe(), record.slug)
            context.record_issue(
                RecordKind.WORK,
                IssueCategory.ERRORED,
                record.origin,
                natural_key=record.slug,
                reason=f"{type(exc).__name__}: {exc}",
            )
            return

        stats.record(result.outcome)
        context.register_parent(result.entity_id, slug=record.slug, title=record.title)


def _resolve_references(record: ValidatedWorkRecord, context: PipelineContext) -> WorkReferences:
    cache = context.metadata_cache
    return WorkReferences(
        author_id=cache.resolve(ReferenceKind.AUTHOR, record.author),
        artist_id=cache.resolve(ReferenceKind.ARTIST, record.artist),
        type_id=cache.resolve(ReferenceKind.WORK_TYPE, record.work_type),
        genre_ids=tuple(cache.resolve_many(ReferenceKind.GENRE, record.genres)),
    )
