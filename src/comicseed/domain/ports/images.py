"""Ports for acquiring durable local copies of remote images."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from comicseed.domain.model import ImageOrigin


@dataclass(slots=True, frozen=True)
class ImageRequest:
    url: str
    namespace: str


@dataclass(slots=True, frozen=True)
class CachedImage:
    """Outcome of acquiring one source URL."""

    source_url: str
    success: bool
    local_path: str | None = None
    size_bytes: int = 0
    origin: ImageOrigin | None = None
    error: str | None = None


class ImageAcquirerPort(Protocol):
    def acquire_batch(
        self,
        requests: Sequence[ImageRequest],
        *,
        concurrency: int | None = None,
    ) -> list[CachedImage]: ...
