"""Image acquisition helpers shared by the work and chapter phases."""

from __future__ import annotations

from typing import TYPE_CHECKING

from comicseed.domain.ingest_pipeline.upsert import StoredImages
from comicseed.domain.ports.images import ImageRequest

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from comicseed.domain.ingest_pipeline.context import PipelineContext
    from comicseed.domain.ports.images import CachedImage

WORK_NAMESPACE = "comics/{work_slug}"
CHAPTER_NAMESPACE = "comics/{work_slug}/{chapter_slug}"


def work_namespace(work_slug: str) -> str:
    return WORK_NAMESPACE.format(work_slug=work_slug)


def chapter_namespace(work_slug: str, chapter_slug: str) -> str:
    return CHAPTER_NAMESPACE.format(work_slug=work_slug, chapter_slug=chapter_slug)


def acquire_images(
    requests: Sequence[ImageRequest],
    *,
    context: PipelineContext,
) -> dict[tuple[str, str], CachedImage]:
    """Acquire every request in one bounded batch; nothing is fetched on a dry run."""

    acquirer = context.image_acquirer
    if context.dry_run or acquirer is None or not requests:
        return {}
    results = acquirer.acquire_batch(requests, concurrency=context.options.image_concurrency)
    return {
        (request.namespace, request.url): result
        for request, result in zip(requests, results, strict=True)
    }


def stored_images(
    namespace: str,
    urls: Sequence[str],
    acquired: Mapping[tuple[str, str], CachedImage],
    *,
    cover_url: str | None = None,
    placeholder: str | None = None,
) -> StoredImages:
    """Map source URLs to the local paths that were acquired successfully.

    Failed downloads are dropped; a missing cover falls back to ``placeholder``.
    """

    pages: list[str] = []
    for url in urls:
        local = _local_path(acquired.get((namespace, url)))
        if local is not None and local not in pages:
            pages.append(local)

    cover = _local_path(acquired.get((namespace, cover_url))) if cover_url else None
    return StoredImages(cover=cover or placeholder, pages=tuple(pages))


def requests_for(namespace: str, *urls: str | None) -> list[ImageRequest]:
    seen: set[str] = set()
    requests: list[ImageRequest] = []
    for url in urls:
        if not url or url in seen:
            continue
        seen.add(url)
        requests.append(ImageRequest(url=url, namespace=namespace))
    return requests


def _local_path(image: CachedImage | None) -> str | None:
    if image is None or not image.success:
        return None
    return image.local_path
