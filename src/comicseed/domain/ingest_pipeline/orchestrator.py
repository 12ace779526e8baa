"""Phase-based orchestrator for the seeding pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from comicseed.domain.ingest_pipeline.context import PipelineContext, SeedBatch

log = getLogger(__name__)


class PipelinePhase(Protocol):
    """Contract implemented by each seeding phase."""

    name: str

    def run(self, batch: SeedBatch, *, context: PipelineContext) -> None: ...


@dataclass(slots=True)
class IngestionPipeline:
    """Compose and execute the ordered pipeline phases.

    Phases run strictly in order: reference data, then works, then chapters,
    since every later kind points at rows the earlier ones produce.
    """

    phases: Sequence[PipelinePhase] = field(default_factory=tuple)

    def with_phase(self, phase: PipelinePhase) -> IngestionPipeline:
        """Return a new pipeline appending ``phase`` at the end."""

        return IngestionPipeline(phases=(*self.phases, phase))

    def extend(self, phases: Iterable[PipelinePhase]) -> IngestionPipeline:
        """Return a new pipeline with the provided ``phases`` concatenated."""

        return IngestionPipeline(phases=(*self.phases, *tuple(phases)))

    def run(self, batch: SeedBatch, *, context: PipelineContext) -> PipelineContext:
        """Execute the configured phases in-order against ``batch``."""

        for phase in self.phases:
            log.info("Running %s phase", phase.name)
            phase.run(batch, context=context)
        return context
