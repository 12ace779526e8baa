"""Reference vocabulary phase: authors, artists, genres and types named explicitly."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from comicseed.domain.errors import PersistenceConflict, PersistenceError
from comicseed.domain.ingest_pipeline.context import IssueCategory, RecordKind
from comicseed.domain.ingest_pipeline.orchestrator import PipelinePhase
from comicseed.domain.metadata_cache import canonical_reference_name
from comicseed.domain.model import UpsertOutcome

if TYPE_CHECKING:
    from comicseed.domain.ingest_pipeline.context import PipelineContext, SeedBatch
    from comicseed.domain.records import ValidatedReferenceRecord

log = getLogger(__name__)


class ReferencesPhase(PipelinePhase):
    """Resolve standalone reference records through the metadata cache.

    A reference is "created" when the cache had to insert it and "updated"
    when the name already existed, so a repeated run reports no creations.
    """

    name: str = "references"

    def run(self, batch: SeedBatch, *, context: PipelineContext) -> None:
        for record in batch.references:
            self._process(record, context)

        stats = context.stats.references
        log.info(
            "References: %s processed, %s created, %s existing",
            stats.processed,
            stats.created,
            stats.updated,
        )

    def _process(self, record: ValidatedReferenceRecord, context: PipelineContext) -> None:
        stats = context.stats.references
        stats.processed += 1
        cache = context.metadata_cache
        natural_key = f"{record.kind.value}:{canonical_reference_name(record.name)}"
        created_before = cache.stats.created
        try:
            cache.resolve(record.kind, record.name, record.description)
        except PersistenceConflict as exc:
            log.warning("Skipped reference %s (%s): %s", record.origin.describe(), natural_key, exc)
            context.record_issue(
                RecordKind.REFERENCE,
                IssueCategory.SKIPPED,
                record.origin,
                natural_key=natural_key,
                reason=str(exc),
            )
            return
        except PersistenceError as exc:
            log.error("Failed reference %s (%s): %s", record.origin.describe(), natural_key, exc)
            context.record_issue(
                RecordKind.REFERENCE,
                IssueCategory.ERRORED,
                record.origin,
                natural_key=natural_key,
                reason=str(exc),
            )
            return
        except Exception as exc:  # noqa: BLE001
            log.exception("Failed reference %s (%s)", record.origin.describe(), natural_key)
            context.record_issue(
                RecordKind.REFERENCE,
                IssueCategory.ERRORED,
                record.origin,
                natural_key=natural_key,
                reason=f"{type(exc).__name__}: {exc}",
            )
            return

        created = cache.stats.created > created_before
        stats.record(UpsertOutcome.CREATED if created else UpsertOutcome.UPDATED)
