"""Seeding pipeline for comicseed.

The pipeline is split into explicit phases (references, works, chapters) that
share one ``PipelineContext`` per run. Each phase persists its records one at
a time, each in its own unit of work, so a failing record never takes the
rest of the batch with it.
"""

from __future__ import annotations

from .chapters import ChaptersPhase
from .context import (
    IssueCategory,
    KindStats,
    PipelineContext,
    PipelineOptions,
    RecordIssue,
    RecordKind,
    RunStats,
    SeedBatch,
    UnmatchedEntry,
)
from .orchestrator import IngestionPipeline, PipelinePhase
from .references import ReferencesPhase
from .report import QuarantineEntry, RunReport, build_report
from .runner import default_pipeline, run_seed_pipeline
from .upsert import StoredImages, UpsertResult, WorkReferences, upsert_chapter, upsert_work
from .works import WorksPhase

__all__ = [
    "ChaptersPhase",
    "IngestionPipeline",
    "IssueCategory",
    "KindStats",
    "PipelineContext",
    "PipelineOptions",
    "PipelinePhase",
    "QuarantineEntry",
    "RecordIssue",
    "RecordKind",
    "ReferencesPhase",
    "RunReport",
    "RunStats",
    "SeedBatch",
    "StoredImages",
    "UnmatchedEntry",
    "UpsertResult",
    "WorkReferences",
    "WorksPhase",
    "build_report",
    "default_pipeline",
    "run_seed_pipeline",
    "upsert_chapter",
    "upsert_work",
]
