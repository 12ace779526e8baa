"""Error taxonomy for seeding runs.

Every per-record failure maps onto one of these classes so the pipeline can
classify, count and log it without halting the batch. Only ``RunAborted``
is meant to escape a run.
"""

from __future__ import annotations

from enum import StrEnum


class SeedError(Exception):
    """Base class for all seeding errors."""


class ParseError(SeedError):
    """Raised when an input document cannot be read or decoded."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class RecordValidationError(SeedError):
    """Raised when a record does not satisfy its schema."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ResolutionFailure(SeedError):
    """Raised when no cascade stage maps a parent reference to a work."""

    def __init__(self, raw_identifier: str | None, attempted_value: str | None) -> None:
        super().__init__(f"Unable to resolve parent reference {raw_identifier!r}")
        self.raw_identifier = raw_identifier
        self.attempted_value = attempted_value


class DownloadFailure(SeedError):
    """Raised when an image download exhausts its attempts."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.message = message


class PersistenceError(SeedError):
    """Raised for unexpected store failures."""


class ConflictKind(StrEnum):
    DUPLICATE = "duplicate"
    CONSTRAINT = "constraint"


class PersistenceConflict(PersistenceError):
    """Raised when a write violates a unique or foreign-key constraint."""

    def __init__(self, kind: ConflictKind, constraint: str | None = None) -> None:
        if kind is ConflictKind.DUPLICATE:
            message = "Duplicate entry (unique constraint violation). Skipping."
        else:
            message = f"Constraint violation - {constraint or 'unknown'}"
        super().__init__(message)
        self.kind = kind
        self.constraint = constraint


class RunAborted(SeedError):
    """Raised when a run cannot produce anything meaningful."""
