"""Seeding run configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Final

from .env import env_bool, env_float, env_int, optional_env
from .errors import ConfigurationError
from .http_resilience import DEFAULT_USER_AGENT, RateLimit, ResilienceConfig, RetryPolicy
from .storage import StorageConfig, get_storage_config

DEFAULT_CONCURRENCY: Final[int] = 5
DEFAULT_MAX_RETRIES: Final[int] = 3
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0
DEFAULT_PLACEHOLDER_IMAGE: Final[str] = "/images/placeholder.jpg"
DEFAULT_UNMATCHED_SAMPLE_SIZE: Final[int] = 100
DEFAULT_URL_MARKERS: Final[tuple[str, ...]] = ("series",)


@dataclass(frozen=True, slots=True)
class FuzzyThresholdConfig:
    strict_ratio: float = 0.2
    strict_floor: int = 2
    loose_ratio: float = 0.25
    loose_floor: int = 3


@dataclass(frozen=True, slots=True)
class SeedConfig:
    """Everything a seeding run needs before it touches the first record."""

    image_dir: Path
    report_path: Path
    placeholder_image: str = DEFAULT_PLACEHOLDER_IMAGE
    concurrency: int = DEFAULT_CONCURRENCY
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    skip_if_exists: bool = True
    dry_run: bool = False
    preserve_children_on_empty: bool = False
    unmatched_sample_size: int = DEFAULT_UNMATCHED_SAMPLE_SIZE
    url_markers: tuple[str, ...] = DEFAULT_URL_MARKERS
    fuzzy: FuzzyThresholdConfig = field(default_factory=FuzzyThresholdConfig)
    user_agent: str = DEFAULT_USER_AGENT
    images_per_second: float | None = None

    def with_overrides(self, **changes: object) -> SeedConfig:
        """Return a copy with non-``None`` overrides applied."""

        applied = {key: value for key, value in changes.items() if value is not None}
        updated = replace(self, **applied)  # type: ignore[arg-type]
        _validate(updated)
        return updated

    def image_resilience(self) -> ResilienceConfig:
        ratelimit = (
            RateLimit(max_calls=1, per_seconds=1.0 / self.images_per_second)
            if self.images_per_second
            else None
        )
        return ResilienceConfig(
            name="images",
            timeout_seconds=self.timeout_seconds,
            retry=RetryPolicy.for_attempts(self.max_retries),
            ratelimit=ratelimit,
            default_headers={"User-Agent": self.user_agent},
        )


def _validate(config: SeedConfig) -> None:
    if config.concurrency < 1:
        raise ConfigurationError("Download concurrency must be at least 1")
    if config.max_retries < 1:
        raise ConfigurationError("Retry count must be at least 1")
    if config.timeout_seconds <= 0:
        raise ConfigurationError("Download timeout must be positive")
    if config.unmatched_sample_size < 0:
        raise ConfigurationError("Unmatched sample size must be non-negative")


def get_seed_config(*, storage: StorageConfig | None = None) -> SeedConfig:
    storage_config = storage or get_storage_config()
    image_dir = optional_env("COMICSEED_IMAGE_DIR")
    report_path = optional_env("COMICSEED_REPORT_PATH")
    markers = optional_env("COMICSEED_URL_MARKERS")

    config = SeedConfig(
        image_dir=Path(image_dir) if image_dir else storage_config.image_dir(),
        report_path=Path(report_path) if report_path else storage_config.report_path(),
        placeholder_image=optional_env("COMICSEED_PLACEHOLDER_IMAGE") or DEFAULT_PLACEHOLDER_IMAGE,
        concurrency=env_int("COMICSEED_CONCURRENCY", DEFAULT_CONCURRENCY, minimum=1),
        max_retries=env_int("COMICSEED_MAX_RETRIES", DEFAULT_MAX_RETRIES, minimum=1),
        timeout_seconds=env_float("COMICSEED_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        skip_if_exists=env_bool("COMICSEED_SKIP_IF_EXISTS", True),
        dry_run=env_bool("COMICSEED_DRY_RUN", False),
        preserve_children_on_empty=env_bool("COMICSEED_PRESERVE_CHILDREN_ON_EMPTY", False),
        unmatched_sample_size=env_int(
            "COMICSEED_UNMATCHED_SAMPLE_SIZE", DEFAULT_UNMATCHED_SAMPLE_SIZE, minimum=0
        ),
        url_markers=(
            tuple(part.strip() for part in markers.split(",") if part.strip())
            if markers
            else DEFAULT_URL_MARKERS
        ),
        fuzzy=FuzzyThresholdConfig(
            strict_ratio=env_float("COMICSEED_FUZZY_STRICT_RATIO", 0.2, minimum=0.0),
            strict_floor=env_int("COMICSEED_FUZZY_STRICT_FLOOR", 2, minimum=0),
            loose_ratio=env_float("COMICSEED_FUZZY_LOOSE_RATIO", 0.25, minimum=0.0),
            loose_floor=env_int("COMICSEED_FUZZY_LOOSE_FLOOR", 3, minimum=0),
        ),
        images_per_second=env_float("COMICSEED_IMAGES_PER_SECOND", 0.0, minimum=0.0) or None,
    )
    _validate(config)
    return config
