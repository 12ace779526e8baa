"""Resolution of chapter parent references to canonical works."""

from __future__ import annotations

from .cascade import (
    DEFAULT_MATCHERS,
    FuzzyThresholds,
    MatchCandidate,
    Matcher,
    MatchSettings,
    ParentIndex,
    ParentReference,
    ResolutionEngine,
    extract_slug_from_url,
    strategy_name,
)
from .matching import (
    compact_title,
    fuzzy_normalize,
    levenshtein,
    normalize_slug,
    replace_roman_numerals,
    roman_to_int,
    strip_stopwords,
)

__all__ = [
    "DEFAULT_MATCHERS",
    "FuzzyThresholds",
    "MatchCandidate",
    "MatchSettings",
    "Matcher",
    "ParentIndex",
    "ParentReference",
    "ResolutionEngine",
    "compact_title",
    "extract_slug_from_url",
    "fuzzy_normalize",
    "levenshtein",
    "normalize_slug",
    "replace_roman_numerals",
    "roman_to_int",
    "strategy_name",
    "strip_stopwords",
]
