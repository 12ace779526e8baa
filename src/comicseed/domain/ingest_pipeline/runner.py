"""Entry point for running the default seeding pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .chapters import ChaptersPhase
from .orchestrator import IngestionPipeline
from .references import ReferencesPhase
from .works import WorksPhase

if TYPE_CHECKING:
    from .context import PipelineContext, RunStats, SeedBatch


def default_pipeline() -> IngestionPipeline:
    return IngestionPipeline(phases=(ReferencesPhase(), WorksPhase(), ChaptersPhase()))


def run_seed_pipeline(
    *,
    batch: SeedBatch,
    context: PipelineContext,
    pipeline: IngestionPipeline | None = None,
) -> RunStats:
    """Run the default seeding pipeline for ``batch`` and return its counters."""

    (pipeline or default_pipeline()).run(batch, context=context)
    return context.stats
