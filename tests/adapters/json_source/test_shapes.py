from __future__ import annotations

import pytest

from comicseed.adapters.json_source import (
    FlatChapterPayload,
    NestedChapterPayload,
    ReferencePayload,
    WorkPayload,
    collapse_to_string,
    collect_image_urls,
    detect_variant,
    normalize_genres,
)
from comicseed.adapters.json_source.shapes import chapter_number_from_text, leading_int


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("  Oda ", "Oda"),
        ({"name": "Oda"}, "Oda"),
        ({"fullName": "Eiichiro Oda"}, "Eiichiro Oda"),
        ([{"person": {"fullName": "Oda"}}], "Oda"),
        ({"attributes": {"title": "Shonen"}}, "Shonen"),
        ([None, "", {"id": 7}], "7"),
        (12.0, "12"),
        (True, None),
        ({"unrelated": "x"}, None),
        ([], None),
    ],
)
def test_collapse_to_string(value: object, expected: str | None) -> None:
    assert collapse_to_string(value) == expected


def test_normalize_genres_accepts_strings_and_objects() -> None:
    assert normalize_genres("Action,  Drama ,,") == ["Action", "Drama"]
    assert normalize_genres([{"name": "Action"}, "drama", "Drama"]) == ["Action", "drama"]
    assert normalize_genres(None) == []


def test_collect_image_urls_merges_keys_in_order() -> None:
    record = {
        "images": [{"url": "https://cdn.example/1.jpg"}, "https://cdn.example/2.jpg"],
        "image_urls": ["https://cdn.example/2.jpg", "https://cdn.example/3.jpg"],
        "image": "https://cdn.example/4.jpg",
    }

    assert collect_image_urls(record) == [
        "https://cdn.example/1.jpg",
        "https://cdn.example/2.jpg",
        "https://cdn.example/3.jpg",
        "https://cdn.example/4.jpg",
    ]


def test_leading_int_and_chapter_number_from_text() -> None:
    assert leading_int(" 42abc") == 42
    assert leading_int("abc") is None
    assert leading_int(-3) is None
    assert chapter_number_from_text(None, "Read Chapter-105 now") == 105
    assert chapter_number_from_text("https://x.example/series/op/chapter_7") == 7
    assert chapter_number_from_text("Prologue") is None


@pytest.mark.parametrize(
    ("record", "expected"),
    [
        ({"comicslug": "op", "chaptername": "Chapter 1"}, FlatChapterPayload),
        ({"comic": "op", "chapterNumber": 1}, NestedChapterPayload),
        ({"kind": "author", "name": "Oda"}, ReferencePayload),
        ({"kind": "author", "title": "A work about authors"}, WorkPayload),
        ({"title": "One Piece"}, WorkPayload),
        ({"name": "orphan"}, None),
    ],
)
def test_detect_variant(record: dict[str, object], expected: type | None) -> None:
    assert detect_variant(record) is expected
