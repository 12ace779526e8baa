from __future__ import annotations

from pathlib import Path

import pytest

from comicseed.config import (
    ConfigurationError,
    SeedConfig,
    StorageConfig,
    get_database_config,
    get_seed_config,
)
from comicseed.config.env import env_bool, env_float, env_int, optional_env


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("COMICSEED_DATA_DIR", str(tmp_path))
    for name in (
        "DATABASE_URI",
        "COMICSEED_IMAGE_DIR",
        "COMICSEED_REPORT_PATH",
        "COMICSEED_CONCURRENCY",
        "COMICSEED_URL_MARKERS",
        "COMICSEED_IMAGES_PER_SECOND",
        "COMICSEED_DRY_RUN",
    ):
        monkeypatch.delenv(name, raising=False)


def test_optional_env_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COMICSEED_TEST_VALUE", "   ")
    assert optional_env("COMICSEED_TEST_VALUE") is None
    monkeypatch.setenv("COMICSEED_TEST_VALUE", " value ")
    assert optional_env("COMICSEED_TEST_VALUE") == "value"


@pytest.mark.parametrize(
    ("raw", "message"),
    [("many", "must be an integer"), ("0", "must be >= 1")],
)
def test_env_int_rejects_bad_values(
    monkeypatch: pytest.MonkeyPatch, raw: str, message: str
) -> None:
    monkeypatch.setenv("COMICSEED_TEST_VALUE", raw)

    with pytest.raises(ConfigurationError, match=message):
        env_int("COMICSEED_TEST_VALUE", 5, minimum=1)


def test_env_float_and_bool(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COMICSEED_TEST_FLOAT", "2.5")
    monkeypatch.setenv("COMICSEED_TEST_BOOL", "Yes")

    assert env_float("COMICSEED_TEST_FLOAT", 1.0) == 2.5
    assert env_bool("COMICSEED_TEST_BOOL", False) is True
    assert env_bool("COMICSEED_TEST_MISSING", True) is True

    monkeypatch.setenv("COMICSEED_TEST_BOOL", "maybe")
    with pytest.raises(ConfigurationError, match="boolean flag"):
        env_bool("COMICSEED_TEST_BOOL", False)
    monkeypatch.setenv("COMICSEED_TEST_FLOAT", "fast")
    with pytest.raises(ConfigurationError, match="must be a number"):
        env_float("COMICSEED_TEST_FLOAT", 1.0)


def test_seed_config_defaults_live_under_data_dir(tmp_path: Path) -> None:
    config = get_seed_config()

    assert config.image_dir == tmp_path.resolve() / "images"
    assert config.report_path == tmp_path.resolve() / "reports" / "seed-report.json"
    assert config.concurrency == 5
    assert config.max_retries == 3
    assert config.url_markers == ("series",)
    assert config.images_per_second is None


def test_seed_config_reads_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("COMICSEED_IMAGE_DIR", str(tmp_path / "covers"))
    monkeypatch.setenv("COMICSEED_CONCURRENCY", "9")
    monkeypatch.setenv("COMICSEED_URL_MARKERS", "series, manga ,")
    monkeypatch.setenv("COMICSEED_DRY_RUN", "true")

    config = get_seed_config()

    assert config.image_dir == tmp_path / "covers"
    assert config.concurrency == 9
    assert config.url_markers == ("series", "manga")
    assert config.dry_run is True


def test_with_overrides_ignores_none_and_validates(tmp_path: Path) -> None:
    config = SeedConfig(image_dir=tmp_path, report_path=tmp_path / "report.json")

    updated = config.with_overrides(concurrency=None, dry_run=True)

    assert updated.concurrency == config.concurrency
    assert updated.dry_run is True
    with pytest.raises(ConfigurationError, match="concurrency"):
        config.with_overrides(concurrency=0)
    with pytest.raises(ConfigurationError, match="timeout"):
        config.with_overrides(timeout_seconds=0.0)


def test_image_resilience_maps_retries_and_rate(tmp_path: Path) -> None:
    config = SeedConfig(
        image_dir=tmp_path,
        report_path=tmp_path / "report.json",
        max_retries=4,
        timeout_seconds=10.0,
        images_per_second=4.0,
    )

    resilience = config.image_resilience()

    assert resilience.retry.total == 3
    assert resilience.timeout_seconds == 10.0
    assert resilience.ratelimit is not None
    assert resilience.ratelimit.max_calls == 1
    assert resilience.ratelimit.per_seconds == 0.25
    assert resilience.default_headers == {"User-Agent": config.user_agent}


def test_image_resilience_without_rate(tmp_path: Path) -> None:
    config = SeedConfig(image_dir=tmp_path, report_path=tmp_path / "report.json")

    assert config.image_resilience().ratelimit is None


def test_database_config_prefers_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    assert get_database_config().uri == f"sqlite+pysqlite:///{tmp_path.resolve() / 'comicseed.db'}"

    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://seed@localhost/comics")

    assert get_database_config().uri == "postgresql+psycopg://seed@localhost/comics"


def test_storage_paths(tmp_path: Path) -> None:
    storage = StorageConfig(data_dir=tmp_path / "nested")

    assert storage.database_path() == (tmp_path / "nested").resolve() / "comicseed.db"
    assert (tmp_path / "nested").is_dir()
    assert storage.image_dir().name == "images"
