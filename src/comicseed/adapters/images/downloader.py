"""Image acquisition with on-disk caching and bounded concurrent batches."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from comicseed.adapters.http_resilience import ResilientClient
from comicseed.config.http_resilience import DEFAULT_USER_AGENT, ResilienceConfig, RetryPolicy
from comicseed.domain.errors import DownloadFailure
from comicseed.domain.model import ImageOrigin
from comicseed.domain.ports.images import CachedImage, ImageRequest

from .naming import filename_from_url, namespace_path

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

log = getLogger(__name__)

DEFAULT_CONCURRENCY = 5


@dataclass(slots=True, frozen=True)
class AcquireOptions:
    max_retries: int = 3
    timeout_seconds: float = 30.0
    skip_if_exists: bool = True


@dataclass(slots=True)
class ImageCacheStats:
    hits: int = 0
    downloads: int = 0
    failures: int = 0
    bytes_downloaded: int = 0


def default_image_resilience(options: AcquireOptions) -> ResilienceConfig:
    return ResilienceConfig(
        name="images",
        timeout_seconds=options.timeout_seconds,
        retry=RetryPolicy.for_attempts(options.max_retries),
        default_headers={"User-Agent": DEFAULT_USER_AGENT},
    )


class ImageAcquirer:
    """Guarantee one durable local copy per remote image URL.

    Completed results are remembered per source URL for the lifetime of the
    acquirer, so one run never downloads the same URL twice. Across runs the
    non-empty file already sitting at the destination is the cache.
    """

    def __init__(
        self,
        root: Path,
        *,
        options: AcquireOptions | None = None,
        resilience: ResilienceConfig | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self._root = root
        self._options = options or AcquireOptions()
        self._resilience = resilience or default_image_resilience(self._options)
        self._client_factory = client_factory or ResilientClient
        self._concurrency = max(concurrency, 1)
        self._results: dict[str, CachedImage] = {}
        self.stats = ImageCacheStats()

    def acquire(
        self,
        url: str,
        namespace: str,
        options: AcquireOptions | None = None,
    ) -> CachedImage:
        """Acquire a single image; see ``acquire_batch`` for the batch variant."""

        return self.acquire_batch([ImageRequest(url=url, namespace=namespace)], options=options)[0]

    def acquire_batch(
        self,
        requests: Sequence[ImageRequest],
        *,
        concurrency: int | None = None,
        options: AcquireOptions | None = None,
    ) -> list[CachedImage]:
        """Acquire ``requests`` in chunks of ``concurrency``, preserving request order.

        Every chunk is awaited in full before the next one starts.
        """

        if not requests:
            return []
        width = max(concurrency or self._concurrency, 1)
        return asyncio.run(self._acquire_batch(requests, width, options or self._options))

    async def _acquire_batch(
        self,
        requests: Sequence[ImageRequest],
        width: int,
        options: AcquireOptions,
    ) -> list[CachedImage]:
        before = replace(self.stats)
        results: list[CachedImage] = []
        async with self._client_factory(self._resilience_for(options)) as client:
            for start in range(0, len(requests), width):
                chunk = requests[start : start + width]
                results.extend(await self._acquire_chunk(client, chunk, options))

        log.info(
            "Image batch finished: %s downloaded, %s cached, %s failed",
            self.stats.downloads - before.downloads,
            self.stats.hits - before.hits,
            self.stats.failures - before.failures,
        )
        return results

    async def _acquire_chunk(
        self,
        client: ResilientClient,
        chunk: Sequence[ImageRequest],
        options: AcquireOptions,
    ) -> list[CachedImage]:
        in_flight: dict[str, asyncio.Task[CachedImage]] = {}
        for request in chunk:
            if request.url not in in_flight:
                in_flight[request.url] = asyncio.ensure_future(
                    self._acquire_one(client, request, options)
                )
        outcomes = await asyncio.gather(*in_flight.values(), return_exceptions=True)

        settled: dict[str, CachedImage] = {}
        for url, outcome in zip(in_flight, outcomes, strict=True):
            if isinstance(outcome, Exception):
                log.error("Image acquisition crashed for %s", url, exc_info=outcome)
                outcome = self._failed(url, f"{type(outcome).__name__}: {outcome}")
            elif isinstance(outcome, BaseException):
                raise outcome
            settled[url] = outcome

        results: list[CachedImage] = []
        seen: set[str] = set()
        for request in chunk:
            result = settled[request.url]
            if request.url in seen and result.success:
                self.stats.hits += 1
                result = replace(result, origin=ImageOrigin.CACHE)
            seen.add(request.url)
            results.append(result)
        return results

    async def _acquire_one(
        self,
        client: ResilientClient,
        request: ImageRequest,
        options: AcquireOptions,
    ) -> CachedImage:
        remembered = self._results.get(request.url)
        if remembered is not None:
            if remembered.success:
                self.stats.hits += 1
                return replace(remembered, origin=ImageOrigin.CACHE)
            return remembered

        destination = namespace_path(self._root, request.namespace) / filename_from_url(
            request.url
        )
        local_path = destination.relative_to(self._root).as_posix()

        existing_size = _existing_size(destination) if options.skip_if_exists else 0
        if existing_size > 0:
            self.stats.hits += 1
            result = CachedImage(
                source_url=request.url,
                success=True,
                local_path=local_path,
                size_bytes=existing_size,
                origin=ImageOrigin.CACHE,
            )
        else:
            try:
                size = await self._download(client, request.url, destination, options)
            except DownloadFailure as exc:
                log.warning("Image download failed for %s: %s", request.url, exc.message)
                return self._failed(request.url, exc.message)
            else:
                self.stats.downloads += 1
                self.stats.bytes_downloaded += size
                result = CachedImage(
                    source_url=request.url,
                    success=True,
                    local_path=local_path,
                    size_bytes=size,
                    origin=ImageOrigin.FRESH,
                )

        self._results[request.url] = result
        return result

    def _failed(self, url: str, error: str) -> CachedImage:
        self.stats.failures += 1
        result = CachedImage(source_url=url, success=False, error=error)
        self._results[url] = result
        return result

    async def _download(
        self,
        client: ResilientClient,
        url: str,
        destination: Path,
        options: AcquireOptions,
    ) -> int:
        try:
            response = await client.get(url, timeout=options.timeout_seconds)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DownloadFailure(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise DownloadFailure(url, str(exc) or type(exc).__name__) from exc
        except (httpx.InvalidURL, ValueError) as exc:
            raise DownloadFailure(url, f"invalid URL: {exc}") from exc

        content_type = response.headers.get("content-type")
        if content_type and content_type.lower().startswith("text/"):
            raise DownloadFailure(url, f"unexpected content type {content_type}")

        body = response.content
        if not body:
            raise DownloadFailure(url, "empty response body")

        partial = destination.with_name(destination.name + ".part")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            partial.write_bytes(body)
            partial.replace(destination)
        except OSError as exc:
            raise DownloadFailure(url, f"write failed: {exc}") from exc
        return len(body)

    def _resilience_for(self, options: AcquireOptions) -> ResilienceConfig:
        return replace(
            self._resilience,
            timeout_seconds=options.timeout_seconds,
            retry=replace(self._resilience.retry, total=max(options.max_retries - 1, 0)),
        )


def _existing_size(path: Path) -> int:
    try:
        return path.stat().st_size if path.is_file() else 0
    except OSError:
        return 0
