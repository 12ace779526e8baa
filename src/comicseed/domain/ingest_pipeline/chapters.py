"""Chapter phase: resolve each chapter's parent work, cache pages, upsert."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from comicseed.domain.errors import PersistenceConflict, PersistenceError, ResolutionFailure
from comicseed.domain.ingest_pipeline.context import IssueCategory, RecordKind
from comicseed.domain.ingest_pipeline.images import (
    acquire_images,
    chapter_namespace,
    requests_for,
    stored_images,
)
from comicseed.domain.ingest_pipeline.orchestrator import PipelinePhase
from comicseed.domain.ingest_pipeline.upsert import upsert_chapter
from comicseed.domain.resolution import ParentIndex, ParentReference, ResolutionEngine

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID

    from comicseed.domain.ingest_pipeline.context import PipelineContext, SeedBatch
    from comicseed.domain.ports.images import CachedImage, ImageRequest
    from comicseed.domain.records import ValidatedSubUnitRecord

log = getLogger(__name__)

type ResolvedChapter = tuple[ValidatedSubUnitRecord, UUID, str]


class ChaptersPhase(PipelinePhase):
    """Persist chapters whose parent resolves; report the rest as unmatched.

    Parents are looked up among stored works plus the works handled earlier in
    this run. An unmatched chapter is never written.
    """

    name: str = "chapters"

    def run(self, batch: SeedBatch, *, context: PipelineContext) -> None:
        if not batch.chapters:
            return

        engine = ResolutionEngine(
            self._build_index(context),
            matchers=context.matchers,
            settings=context.options.match_settings,
        )
        resolved = self._resolve_all(batch, engine, context)
        for name, hits in engine.strategy_hits.items():
            context.strategy_hits[name] = context.strategy_hits.get(name, 0) + hits

        requests: list[ImageRequest] = []
        for record, _, work_slug in resolved:
            requests.extend(
                requests_for(chapter_namespace(work_slug, record.slug), *record.image_urls)
            )
        acquired = acquire_images(requests, context=context)

        for record, work_id, work_slug in resolved:
            self._process(record, work_id, work_slug, context, acquired)

        stats = context.stats.chapters
        log.info(
            "Chapters: %s processed, %s created, %s updated, %s skipped, %s errored, "
            "%s unmatched",
            stats.processed,
            stats.created,
            stats.updated,
            stats.skipped,
            stats.errored,
            stats.unmatched,
        )

    def _build_index(self, context: PipelineContext) -> ParentIndex:
        with context.unit_of_work_factory() as uow:
            index = ParentIndex.from_keys(uow.repositories.works.list_parent_keys())
        for key in context.known_parents.values():
            index.add(key.id, slug=key.slug, title=key.title)
        log.debug("Parent index holds %s work(s)", len(index))
        return index

    def _resolve_all(
        self,
        batch: SeedBatch,
        engine: ResolutionEngine,
        context: PipelineContext,
    ) -> list[ResolvedChapter]:
        resolved: list[ResolvedChapter] = []
        for record in batch.chapters:
            context.stats.chapters.processed += 1
            try:
                candidate = engine.require(ParentReference.from_record(record))
            except ResolutionFailure as exc:
                log.warning(
                    "Unmatched chapter %s (parent %r)",
                    record.origin.describe(),
                    exc.raw_identifier,
                )
                context.record_unmatched(
                    record.origin,
                    raw_identifier=exc.raw_identifier,
                    attempted_value=exc.attempted_value,
                )
                continue
            parent = engine.index.get(candidate.parent_id)
            work_slug = (parent.slug if parent else None) or str(candidate.parent_id)
            resolved.append((record, candidate.parent_id, work_slug))
        return resolved

    def _process(
        self,
        record: ValidatedSubUnitRecord,
        work_id: UUID,
        work_slug: str,
        context: PipelineContext,
        acquired: Mapping[tuple[str, str], CachedImage],
    ) -> None:
        natural_key = f"{work_slug}#{record.chapter_number}"
        images = stored_images(
            chapter_namespace(work_slug, record.slug),
            record.image_urls,
            acquired,
        )
        try:
            with context.unit_of_work_factory() as uow:
                result = upsert_chapter(
                    uow.repositories,
                    record,
                    work_id=work_id,
                    images=images,
                    child_sync=context.options.child_sync,
                    dry_run=context.dry_run,
                )
                if not context.dry_run:
                    uow.commit()
        except PersistenceConflict as exc:
            log.warning("Skipped chapter %s (%s): %s", record.origin.describe(), natural_key, exc)
            context.record_issue(
                RecordKind.CHAPTER,
                IssueCategory.SKIPPED,
                record.origin,
                natural_key=natural_key,
                reason=str(exc),
            )
            return
        except PersistenceError as exc:
            log.error("Failed chapter %s (%s): %s", record.origin.describe(), natural_key, exc)
            context.record_issue(
                RecordKind.CHAPTER,
                IssueCategory.ERRORED,
                record.origin,
                natural_key=natural_key,
                reason=str(exc),
            )
            return
        except Exception as exc:  # noqa: BLE001
            log.exception("Failed chapter %s (%s)", record.origin.describe(), natural_key)
            context.record_issue(
                RecordKind.CHAPTER,
                IssueCategory.ERRORED,
                record.origin,
                natural_key=natural_key,
                reason=f"{type(exc).__name__}: {exc}",
            )
            return

        context.stats.chapters.record(result.outcome)
