from __future__ import annotations

import pytest

from comicseed.domain.resolution import (
    compact_title,
    fuzzy_normalize,
    levenshtein,
    normalize_slug,
    replace_roman_numerals,
    roman_to_int,
    strip_stopwords,
)


@pytest.mark.parametrize(
    ("left", "right"),
    [
        ("kitten", "sitting"),
        ("one-piece", "one-piece-1050"),
        ("", "naruto"),
        ("abc", "abc"),
    ],
)
def test_levenshtein_is_symmetric(left: str, right: str) -> None:
    assert levenshtein(left, right) == levenshtein(right, left)


def test_levenshtein_is_zero_only_for_equal_strings() -> None:
    assert levenshtein("naruto", "naruto") == 0
    assert levenshtein("naruto", "Naruto") == 1
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "") == 0


def test_levenshtein_counts_substitution_as_one_edit() -> None:
    assert levenshtein("series-2", "series-3") == 1
    assert levenshtein("one-piece", "") == len("one-piece")


@pytest.mark.parametrize(
    ("token", "expected"),
    [("I", 1), ("IV", 4), ("IX", 9), ("XIV", 14), ("MCMXCIV", 1994), ("ii", 2)],
)
def test_roman_to_int_uses_subtractive_notation(token: str, expected: int) -> None:
    assert roman_to_int(token) == expected


def test_roman_to_int_rejects_other_tokens() -> None:
    assert roman_to_int("") is None
    assert roman_to_int("series") is None
    assert roman_to_int("12") is None


def test_replace_roman_numerals_leaves_plain_words_alone() -> None:
    assert replace_roman_numerals("Series II") == "Series 2"
    assert replace_roman_numerals("Did it") == "Did it"


def test_strip_stopwords_removes_filler_tokens() -> None:
    assert strip_stopwords("The Tower of God Chapter 12") == "tower god 12"


def test_fuzzy_normalize_combines_steps() -> None:
    assert fuzzy_normalize("Series II") == "series-2"
    assert fuzzy_normalize("One Piece Chapter 1050") == "one-piece-1050"


def test_normalize_slug_and_compact_title() -> None:
    assert normalize_slug("  Solo Leveling: Ragnarok! ") == "solo-leveling-ragnarok"
    assert normalize_slug(None) == ""
    assert compact_title("Solo Leveling: Ragnarok") == "sololevelingragnarok"
