"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .seeding import FuzzyThresholdConfig, SeedConfig, get_seed_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "FuzzyThresholdConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SeedConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_seed_config",
    "get_storage_config",
]
