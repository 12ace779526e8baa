"""Destination path derivation for cached images."""

from __future__ import annotations

import re
import time
from pathlib import Path, PurePosixPath
from typing import Final
from urllib.parse import unquote, urlsplit

DEFAULT_EXTENSION: Final[str] = ".jpg"

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(name: str) -> str:
    cleaned = _UNSAFE.sub("_", name).strip("._")
    return cleaned[:200]


def filename_from_url(url: str, *, now_ms: int | None = None) -> str:
    """Last path segment of ``url``, sanitised, with an extension guaranteed."""

    try:
        path = urlsplit(url).path
    except ValueError:
        path = ""
    segment = unquote(PurePosixPath(path).name) if path else ""
    name = sanitize_filename(segment)
    if not name:
        stamp = now_ms if now_ms is not None else int(time.time() * 1000)
        name = f"image_{stamp}"
    if not Path(name).suffix:
        name += DEFAULT_EXTENSION
    return name


def namespace_path(root: Path, namespace: str) -> Path:
    """Resolve ``namespace`` (``"comics/one-piece"``) below ``root`` without escaping it."""

    parts = [sanitize_filename(part) for part in namespace.replace("\\", "/").split("/")]
    safe_parts = [part for part in parts if part and part not in {".", ".."}]
    return root.joinpath(*safe_parts)

