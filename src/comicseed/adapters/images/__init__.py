"""Local image cache backed by HTTP downloads."""

from __future__ import annotations

from .downloader import AcquireOptions, ImageAcquirer, ImageCacheStats, default_image_resilience
from .naming import filename_from_url, namespace_path

__all__ = [
    "AcquireOptions",
    "ImageAcquirer",
    "ImageCacheStats",
    "default_image_resilience",
    "filename_from_url",
    "namespace_path",
]
