from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
import pytest

from comicseed.adapters.http_resilience import ResilientClient
from comicseed.adapters.images import ImageAcquirer
from comicseed.app import pipeline_options, run_seed
from comicseed.config import FuzzyThresholdConfig, SeedConfig
from comicseed.domain.errors import RunAborted
from comicseed.domain.model import ChildSyncMode

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from comicseed.adapters.sqlalchemy.unit_of_work import SqlAlchemySeedUnitOfWork
    from comicseed.config.http_resilience import ResilienceConfig

    UowFactory = Callable[[], SqlAlchemySeedUnitOfWork]

WORKS = {
    "comics": [
        {
            "title": "One Piece",
            "slug": "one-piece",
            "author": "Eiichiro Oda",
            "genres": "Action, Adventure",
            "coverImage": "https://cdn.example/op/cover.jpg",
        },
        {"title": "", "slug": ""},
    ]
}
CHAPTERS = [
    {
        "comicslug": "one-piece",
        "chaptername": "Chapter 1",
        "images": ["https://cdn.example/1.jpg"],
    },
    {"comicslug": "bleach", "chaptername": "Chapter 1"},
]


@pytest.fixture
def sources(tmp_path: Path) -> list[Path]:
    works = tmp_path / "works.json"
    works.write_text(json.dumps(WORKS), encoding="utf-8")
    chapters = tmp_path / "chapters.json"
    chapters.write_text(json.dumps(CHAPTERS), encoding="utf-8")
    return [works, chapters]


@pytest.fixture
def config(tmp_path: Path) -> SeedConfig:
    return SeedConfig(image_dir=tmp_path / "images", report_path=tmp_path / "out" / "report.json")


def _acquirer(root: Path) -> ImageAcquirer:
    def handler(request: httpx.Request) -> httpx.Response:
        _ = request
        return httpx.Response(200, headers={"content-type": "image/jpeg"}, content=b"jpeg")

    def client_factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return ImageAcquirer(root, client_factory=client_factory)


def test_run_seed_persists_and_writes_report(
    sources: list[Path],
    config: SeedConfig,
    sqlite_unit_of_work: UowFactory,
) -> None:
    report = run_seed(
        sources,
        config=config,
        unit_of_work_factory=sqlite_unit_of_work,
        acquirer=_acquirer(config.image_dir),
    )

    assert report.stats.works.created == 1
    assert report.stats.chapters.created == 1
    assert report.stats.chapters.unmatched == 1
    assert report.quarantined == 1
    assert not report.has_hard_errors
    assert (config.image_dir / "comics" / "one-piece" / "cover.jpg").read_bytes() == b"jpeg"

    written = json.loads(config.report_path.read_text(encoding="utf-8"))
    assert written["counts"]["works"]["created"] == 1
    assert written["unmatched_sample"][0]["raw_identifier"] == "bleach"
    assert written["images"]["downloads"] == 2
    with sqlite_unit_of_work() as uow:
        work = uow.repositories.works.get_by_slug("one-piece")
        assert work is not None
        assert work.cover_image == "comics/one-piece/cover.jpg"


def test_dry_run_still_writes_report(
    sources: list[Path],
    config: SeedConfig,
    sqlite_unit_of_work: UowFactory,
) -> None:
    dry = config.with_overrides(dry_run=True)

    report = run_seed(sources, config=dry, unit_of_work_factory=sqlite_unit_of_work)

    assert report.dry_run
    assert report.images is None
    assert report.stats.works.created == 1
    assert json.loads(dry.report_path.read_text(encoding="utf-8"))["dry_run"] is True
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.works.count() == 0
    assert not dry.image_dir.exists()


def test_run_aborts_without_readable_sources(tmp_path: Path, config: SeedConfig) -> None:
    with pytest.raises(RunAborted):
        run_seed([tmp_path / "missing.json"], config=config, write_report=False)


def test_pipeline_options_follow_config(config: SeedConfig) -> None:
    tuned = config.with_overrides(
        preserve_children_on_empty=True,
        concurrency=2,
        fuzzy=FuzzyThresholdConfig(strict_floor=1),
        url_markers=("manga", "series"),
    )

    options = pipeline_options(tuned)

    assert options.child_sync is ChildSyncMode.PRESERVE_ON_EMPTY
    assert options.image_concurrency == 2
    assert options.match_settings.thresholds.strict_floor == 1
    assert options.match_settings.url_markers == ("manga", "series")
