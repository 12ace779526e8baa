from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from comicseed.domain.errors import ResolutionFailure
from comicseed.domain.ports.persistence import ParentKey
from comicseed.domain.resolution import (
    DEFAULT_MATCHERS,
    FuzzyThresholds,
    Matcher,
    MatchSettings,
    ParentIndex,
    ParentReference,
    ResolutionEngine,
    extract_slug_from_url,
)
from comicseed.domain.resolution.cascade import match_fuzzy

if TYPE_CHECKING:
    from uuid import UUID

ONE_PIECE = uuid4()
NARUTO = uuid4()
SERIES_TWO = uuid4()


@pytest.fixture
def index() -> ParentIndex:
    return ParentIndex.from_keys(
        [
            ParentKey(id=ONE_PIECE, slug="one-piece", title="One Piece"),
            ParentKey(id=NARUTO, slug="naruto", title="Naruto"),
        ]
    )


def _spy_matchers(calls: list[ParentReference]) -> tuple[Matcher, ...]:
    def match_fuzzy_spy(
        reference: ParentReference, index: ParentIndex, settings: MatchSettings
    ) -> UUID | None:
        calls.append(reference)
        return match_fuzzy(reference, index, settings)

    return (*DEFAULT_MATCHERS[:-1], match_fuzzy_spy)


def test_exact_slug_resolves_at_first_stage_without_fuzzy(index: ParentIndex) -> None:
    fuzzy_calls: list[ParentReference] = []
    engine = ResolutionEngine(index, matchers=_spy_matchers(fuzzy_calls))

    candidate = engine.resolve(ParentReference(slug="naruto"))

    assert candidate is not None
    assert candidate.parent_id == NARUTO
    assert candidate.strategy_index == 1
    assert candidate.strategy_name == "exact_slug"
    assert fuzzy_calls == []
    assert engine.strategy_hits == {"exact_slug": 1}


def test_differently_cased_title_resolves_before_fuzzy(index: ParentIndex) -> None:
    fuzzy_calls: list[ParentReference] = []
    engine = ResolutionEngine(index, matchers=_spy_matchers(fuzzy_calls))

    candidate = engine.resolve(ParentReference(title="  NARUTO "))

    assert candidate is not None
    assert candidate.parent_id == NARUTO
    assert candidate.strategy_index < 7
    assert fuzzy_calls == []


def test_roman_numeral_variant_resolves_via_fuzzy_stage() -> None:
    index = ParentIndex.from_keys(
        [
            ParentKey(id=SERIES_TWO, slug="series-2", title="Series 2"),
            ParentKey(id=NARUTO, slug="naruto", title="Naruto"),
        ]
    )
    engine = ResolutionEngine(index)

    candidate = engine.resolve(ParentReference(title="Series II"))

    assert candidate is not None
    assert candidate.parent_id == SERIES_TWO
    assert candidate.strategy_name == "fuzzy"
    assert candidate.strategy_index == 7


def test_noisy_chapter_title_resolves_to_parent(index: ParentIndex) -> None:
    engine = ResolutionEngine(index)

    candidate = engine.resolve(ParentReference(title="One Piece Chapter 1050"))

    assert candidate is not None
    assert candidate.parent_id == ONE_PIECE
    assert candidate.strategy_index == 3


def test_url_marker_segment_yields_slug(index: ParentIndex) -> None:
    engine = ResolutionEngine(index)

    candidate = engine.resolve(
        ParentReference(url="https://scans.example/series/naruto/chapter-700")
    )

    assert candidate is not None
    assert candidate.parent_id == NARUTO
    assert candidate.strategy_name == "url_slug"


def test_unmatched_reference_raises_resolution_failure(index: ParentIndex) -> None:
    engine = ResolutionEngine(index)
    reference = ParentReference(title="Completely Different Saga")

    assert engine.resolve(reference) is None
    with pytest.raises(ResolutionFailure) as excinfo:
        engine.require(reference)

    assert excinfo.value.raw_identifier == "Completely Different Saga"
    assert excinfo.value.attempted_value == "completely-different-saga"


def test_reference_without_any_identifier_is_unmatched(index: ParentIndex) -> None:
    engine = ResolutionEngine(index)

    assert engine.resolve(ParentReference()) is None


def test_fuzzy_uses_loose_threshold_when_strict_fails() -> None:
    solo = uuid4()
    index = ParentIndex.from_keys([ParentKey(id=solo, slug="solo-leveling", title=None)])
    reference = ParentReference(slug="solo-levelingxyz")
    tighter = MatchSettings(thresholds=FuzzyThresholds(loose_ratio=0.1))

    assert match_fuzzy(reference, index, MatchSettings()) == solo
    assert match_fuzzy(reference, index, tighter) is None


def test_extract_slug_from_url() -> None:
    markers = ("series",)

    assert extract_slug_from_url("https://x.example/series/solo/12", markers) == "solo"
    assert extract_slug_from_url("https://x.example/series", markers) is None
    assert extract_slug_from_url("https://x.example/manga/solo", markers) is None
    assert extract_slug_from_url(None, markers) is None
