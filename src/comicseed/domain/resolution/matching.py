"""String normalisation and distance primitives used by parent resolution."""

from __future__ import annotations

import re
from typing import Final

from rapidfuzz.distance import Levenshtein

STOPWORDS: Final[frozenset[str]] = frozenset(
    {
        "the",
        "a",
        "an",
        "of",
        "and",
        "to",
        "in",
        "on",
        "for",
        "with",
        "by",
        "from",
        "chapter",
        "chap",
        "ch",
        "vol",
        "volume",
        "part",
        "pt",
    }
)

ROMAN_VALUES: Final[dict[str, int]] = {
    "I": 1,
    "V": 5,
    "X": 10,
    "L": 50,
    "C": 100,
    "D": 500,
    "M": 1000,
}

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")
_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+", re.IGNORECASE)
_WORD = re.compile(r"[A-Za-z]+")
# well-formed numerals only, so "mix" -> 1009 but "did" stays a word
_WELL_FORMED_ROMAN = re.compile(
    r"M{0,4}(CM|CD|D?C{0,3})(XC|XL|L?X{0,3})(IX|IV|V?I{0,3})",
    re.IGNORECASE,
)


def normalize_slug(value: object) -> str:
    """Lowercase, collapse non-alphanumeric runs to ``-`` and trim hyphens."""

    if value is None:
        return ""
    text = str(value).strip().lower()
    return _NON_ALNUM_RUN.sub("-", text).strip("-")


def compact_title(value: object) -> str:
    """Strip every non-alphanumeric character and fold case."""

    if value is None:
        return ""
    return _NON_ALNUM_RUN.sub("", str(value).lower())


def lower_trimmed(value: object) -> str:
    if value is None:
        return ""
    return str(value).lower().strip()


def roman_to_int(token: str) -> int | None:
    """Parse ``token`` as a roman numeral using subtractive notation.

    Symbols are scanned left to right; a symbol is subtracted when a larger one
    follows it and added otherwise. Returns ``None`` for anything that is not a
    non-empty run of roman symbols.
    """

    symbols = token.strip().upper()
    if not symbols or any(symbol not in ROMAN_VALUES for symbol in symbols):
        return None
    total = 0
    for index, symbol in enumerate(symbols):
        value = ROMAN_VALUES[symbol]
        following = ROMAN_VALUES[symbols[index + 1]] if index + 1 < len(symbols) else 0
        total += -value if following > value else value
    return total


def replace_roman_numerals(text: str) -> str:
    """Replace every well-formed roman numeral word in ``text`` by its arabic value."""

    def _convert(match: re.Match[str]) -> str:
        word = match.group(0)
        if not _WELL_FORMED_ROMAN.fullmatch(word):
            return word
        number = roman_to_int(word)
        return word if number is None else str(number)

    return _WORD.sub(_convert, text)


def strip_stopwords(text: str, stopwords: frozenset[str] = STOPWORDS) -> str:
    tokens = (token.lower() for token in _TOKEN_SPLIT.split(text) if token)
    return " ".join(token for token in tokens if token not in stopwords)


def fuzzy_normalize(text: str, stopwords: frozenset[str] = STOPWORDS) -> str:
    """Roman numerals to digits, stopwords removed, then slug form."""

    converted = replace_roman_numerals(text)
    stripped = strip_stopwords(converted, stopwords)
    return normalize_slug(stripped or converted or text)


def levenshtein(left: str, right: str) -> int:
    """Unit-cost insert/delete/substitute edit distance."""

    return Levenshtein.distance(left, right)


def overlaps(candidate: str, known: str) -> bool:
    """Prefix, suffix or containment in either direction."""

    if not candidate or not known:
        return False
    return candidate in known or known in candidate
