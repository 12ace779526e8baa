from __future__ import annotations

from pathlib import Path

from comicseed.adapters.images import filename_from_url, namespace_path


def test_filename_from_url_keeps_last_segment() -> None:
    assert filename_from_url("https://cdn.example/a/b/page%2001.png?x=1") == "page_01.png"


def test_filename_from_url_adds_default_extension() -> None:
    assert filename_from_url("https://cdn.example/pages/17") == "17.jpg"


def test_filename_from_url_falls_back_to_timestamp() -> None:
    assert filename_from_url("https://cdn.example/", now_ms=1700000000000) == (
        "image_1700000000000.jpg"
    )


def test_namespace_path_cannot_escape_root() -> None:
    root = Path("/srv/images")

    assert namespace_path(root, "comics/one-piece") == root / "comics" / "one-piece"
    assert namespace_path(root, "../../etc") == root / "etc"
    assert namespace_path(root, "comics\\solo leveling") == root / "comics" / "solo_leveling"
