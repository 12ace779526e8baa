from __future__ import annotations

from dataclasses import dataclass

from comicseed.domain.ingest_pipeline import (
    ChaptersPhase,
    ReferencesPhase,
    WorksPhase,
    default_pipeline,
)
from comicseed.domain.ingest_pipeline.context import PipelineContext, SeedBatch
from comicseed.domain.ingest_pipeline.orchestrator import IngestionPipeline, PipelinePhase
from comicseed.domain.metadata_cache import MetadataCache
from tests.helpers.records import InMemoryReferenceStore


@dataclass(slots=True)
class _RecordingPhase(PipelinePhase):
    name: str
    calls: list[str]

    def run(self, batch: SeedBatch, *, context: PipelineContext) -> None:
        _ = (batch, context)
        self.calls.append(self.name)


def _context() -> PipelineContext:
    def no_store() -> object:
        raise AssertionError("phase should not open a unit of work")

    return PipelineContext(
        unit_of_work_factory=no_store,  # type: ignore[arg-type]
        metadata_cache=MetadataCache(InMemoryReferenceStore()),
    )


def test_pipeline_runs_phases_in_order() -> None:
    calls: list[str] = []
    first = _RecordingPhase(name="first", calls=calls)
    second = _RecordingPhase(name="second", calls=calls)
    pipeline = IngestionPipeline(phases=(first,)).with_phase(second)

    context = _context()
    returned = pipeline.run(SeedBatch(), context=context)

    assert calls == ["first", "second"]
    assert returned is context


def test_extend_returns_new_pipeline() -> None:
    calls: list[str] = []
    base = IngestionPipeline()
    extended = base.extend([_RecordingPhase(name="only", calls=calls)])

    assert len(base.phases) == 0
    assert [phase.name for phase in extended.phases] == ["only"]


def test_default_pipeline_orders_references_works_chapters() -> None:
    phases = default_pipeline().phases

    assert [type(phase) for phase in phases] == [ReferencesPhase, WorksPhase, ChaptersPhase]


def test_empty_batch_touches_nothing() -> None:
    context = _context()

    default_pipeline().run(SeedBatch(), context=context)

    assert context.stats.errored == 0
    assert context.stats.works.processed == 0
