"""Application orchestration entry points."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import asdict
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from comicseed.adapters.images import AcquireOptions, ImageAcquirer
from comicseed.adapters.json_source import load
from comicseed.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemySeedUnitOfWork,
    is_started,
    startup,
)
from comicseed.config import get_seed_config
from comicseed.domain.errors import PersistenceError, RunAborted
from comicseed.domain.ingest_pipeline import (
    PipelineContext,
    PipelineOptions,
    RunReport,
    SeedBatch,
    build_report,
    run_seed_pipeline,
)
from comicseed.domain.metadata_cache import MetadataCache, UnitOfWorkReferenceStore
from comicseed.domain.model import ChildSyncMode, utcnow
from comicseed.domain.ports.unit_of_work import SeedUnitOfWork
from comicseed.domain.resolution import FuzzyThresholds, MatchSettings

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from comicseed.config import SeedConfig

UnitOfWorkFactory = Callable[[], SeedUnitOfWork]


log = getLogger(__name__)


def run_seed(
    sources: Sequence[str | Path],
    *,
    config: SeedConfig | None = None,
    database_uri: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    acquirer: ImageAcquirer | None = None,
    write_report: bool = True,
) -> RunReport:
    """Load ``sources`` and seed them into the canonical store.

    Raises ``RunAborted`` when no source can be read or the store cannot be
    reached; every other failure is counted in the returned report.
    """

    started_at = utcnow()
    effective_config = config or get_seed_config()
    log.info(
        "Starting seed run: sources=%s, dry_run=%s, concurrency=%s",
        len(sources),
        effective_config.dry_run,
        effective_config.concurrency,
    )

    load_result = load(sources)
    if not load_result.loaded_sources:
        raise RunAborted(f"No readable input source among {len(sources)} given")

    effective_uow = unit_of_work_factory or _start_store(database_uri)
    cache = MetadataCache(
        UnitOfWorkReferenceStore(effective_uow),
        dry_run=effective_config.dry_run,
    )
    try:
        cache.warm()
    except (PersistenceError, SQLAlchemyError) as exc:
        raise RunAborted(f"Store unreachable: {exc}") from exc

    effective_acquirer = acquirer
    if effective_acquirer is None and not effective_config.dry_run:
        effective_acquirer = build_image_acquirer(effective_config)

    context = PipelineContext(
        unit_of_work_factory=effective_uow,
        metadata_cache=cache,
        image_acquirer=effective_acquirer,
        options=pipeline_options(effective_config),
    )
    run_seed_pipeline(batch=SeedBatch.from_load_result(load_result), context=context)

    report = build_report(
        load_result=load_result,
        context=context,
        started_at=started_at,
        finished_at=utcnow(),
        image_stats=asdict(effective_acquirer.stats) if effective_acquirer else None,
        quarantine_sample_size=effective_config.unmatched_sample_size,
    )
    if write_report:
        _write_report(report, effective_config.report_path)
    return report


def pipeline_options(config: SeedConfig) -> PipelineOptions:
    return PipelineOptions(
        dry_run=config.dry_run,
        placeholder_image=config.placeholder_image,
        child_sync=(
            ChildSyncMode.PRESERVE_ON_EMPTY
            if config.preserve_children_on_empty
            else ChildSyncMode.REPLACE
        ),
        image_concurrency=config.concurrency,
        unmatched_sample_size=config.unmatched_sample_size,
        match_settings=MatchSettings(
            thresholds=FuzzyThresholds(
                strict_ratio=config.fuzzy.strict_ratio,
                strict_floor=config.fuzzy.strict_floor,
                loose_ratio=config.fuzzy.loose_ratio,
                loose_floor=config.fuzzy.loose_floor,
            ),
            url_markers=config.url_markers,
        ),
    )


def build_image_acquirer(config: SeedConfig) -> ImageAcquirer:
    return ImageAcquirer(
        config.image_dir,
        options=AcquireOptions(
            max_retries=config.max_retries,
            timeout_seconds=config.timeout_seconds,
            skip_if_exists=config.skip_if_exists,
        ),
        resilience=config.image_resilience(),
        concurrency=config.concurrency,
    )


def _start_store(database_uri: str | None) -> UnitOfWorkFactory:
    if not is_started():
        try:
            startup(database_uri=database_uri)
        except (SQLAlchemyError, OSError) as exc:
            raise RunAborted(f"Store unreachable: {exc}") from exc
    return SqlAlchemySeedUnitOfWork


def _write_report(report: RunReport, path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(report.to_dict(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
    except OSError:
        log.exception("Could not write run report to %s", path)
        return
    log.info("Run report written to %s", path)
