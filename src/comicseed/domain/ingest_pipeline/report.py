"""Per-run diagnostic report: counts, samples for triage, cache statistics."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING

from comicseed.domain.metadata_cache import CacheStats

from .context import RecordIssue, RunStats, UnmatchedEntry

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from comicseed.domain.records import LoadResult, SourceFailure

    from .context import PipelineContext

DEFAULT_QUARANTINE_SAMPLE_SIZE = 100


@dataclass(slots=True, frozen=True)
class QuarantineEntry:
    source_name: str
    source_index: int
    reason: str


@dataclass(slots=True, kw_only=True)
class RunReport:
    started_at: datetime
    finished_at: datetime
    dry_run: bool = False
    sources_loaded: list[str] = field(default_factory=list[str])
    sources_failed: list[SourceFailure] = field(default_factory=list["SourceFailure"])
    stats: RunStats = field(default_factory=RunStats)
    quarantined: int = 0
    quarantine_sample: list[QuarantineEntry] = field(default_factory=list[QuarantineEntry])
    unmatched_sample: list[UnmatchedEntry] = field(default_factory=list[UnmatchedEntry])
    issue_sample: list[RecordIssue] = field(default_factory=list[RecordIssue])
    strategy_hits: dict[str, int] = field(default_factory=dict[str, int])
    metadata_cache: CacheStats = field(default_factory=CacheStats)
    images: dict[str, float] | None = None

    @property
    def has_hard_errors(self) -> bool:
        """Only unexpected store failures fail a run; skips and quarantines do not."""

        return self.stats.errored > 0

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, object]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration_seconds": round(self.duration_seconds, 3),
            "dry_run": self.dry_run,
            "sources": {
                "loaded": list(self.sources_loaded),
                "failed": [asdict(failure) for failure in self.sources_failed],
            },
            "counts": {kind.value: asdict(stats) for kind, stats in self.stats.items()},
            "quarantined": self.quarantined,
            "quarantine_sample": [asdict(entry) for entry in self.quarantine_sample],
            "unmatched_sample": [asdict(entry) for entry in self.unmatched_sample],
            "issue_sample": [asdict(issue) for issue in self.issue_sample],
            "strategy_hits": dict(self.strategy_hits),
            "metadata_cache": asdict(self.metadata_cache),
            "images": dict(self.images) if self.images is not None else None,
        }

    def summary_lines(self) -> list[str]:
        mode = " (dry run)" if self.dry_run else ""
        lines = [f"Seed run finished in {self.duration_seconds:.1f}s{mode}"]
        lines.append(
            f"  sources: {len(self.sources_loaded)} loaded, {len(self.sources_failed)} failed"
        )
        for kind, stats in self.stats.items():
            line = (
                f"  {kind.value}: {stats.processed} processed, {stats.created} created, "
                f"{stats.updated} updated, {stats.skipped} skipped, {stats.errored} errored"
            )
            if stats.unmatched:
                line += f", {stats.unmatched} unmatched"
            lines.append(line)
        lines.append(f"  quarantined: {self.quarantined}")
        cache = self.metadata_cache
        lines.append(
            f"  metadata cache: {cache.hits} hits, {cache.misses} misses, {cache.created} created"
        )
        if self.images is not None:
            lines.append(
                "  images: {downloads:.0f} downloaded, {hits:.0f} cached, "
                "{failures:.0f} failed".format(**self.images)
            )
        return lines


def build_report(
    *,
    load_result: LoadResult,
    context: PipelineContext,
    started_at: datetime,
    finished_at: datetime,
    image_stats: Mapping[str, float] | None = None,
    quarantine_sample_size: int = DEFAULT_QUARANTINE_SAMPLE_SIZE,
) -> RunReport:
    return RunReport(
        started_at=started_at,
        finished_at=finished_at,
        dry_run=context.dry_run,
        sources_loaded=list(load_result.loaded_sources),
        sources_failed=list(load_result.failed_sources),
        stats=context.stats,
        quarantined=len(load_result.invalid),
        quarantine_sample=[
            QuarantineEntry(
                source_name=entry.origin.source_name,
                source_index=entry.origin.source_index,
                reason=entry.reason,
            )
            for entry in load_result.invalid[:quarantine_sample_size]
        ],
        unmatched_sample=list(context.unmatched),
        issue_sample=list(context.issues),
        strategy_hits=dict(context.strategy_hits),
        metadata_cache=context.metadata_cache.stats,
        images=dict(image_stats) if image_stats is not None else None,
    )
