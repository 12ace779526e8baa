"""Parent resolution cascade for chapter records.

A chapter names its work in many ways: an exact slug, a title in another case,
a URL containing the slug, or free text with roman numerals and filler words.
``ResolutionEngine`` folds over an ordered tuple of matcher functions, cheapest
and most precise first, and stops at the first one that returns a parent id.
Only records that survive every exact stage pay for the fuzzy scan.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from comicseed.domain.errors import ResolutionFailure

from .matching import (
    STOPWORDS,
    compact_title,
    fuzzy_normalize,
    levenshtein,
    lower_trimmed,
    normalize_slug,
    overlaps,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence
    from uuid import UUID

    from comicseed.domain.ports.persistence import ParentKey
    from comicseed.domain.records import ValidatedSubUnitRecord

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class FuzzyThresholds:
    strict_ratio: float = 0.2
    strict_floor: int = 2
    loose_ratio: float = 0.25
    loose_floor: int = 3

    def strict_limit(self, candidate_length: int, known_length: int) -> int:
        scaled = math.floor(min(candidate_length, known_length) * self.strict_ratio)
        return max(self.strict_floor, scaled)

    def loose_limit(self, candidate_length: int) -> int:
        return max(self.loose_floor, math.floor(candidate_length * self.loose_ratio))


@dataclass(slots=True, frozen=True)
class MatchSettings:
    thresholds: FuzzyThresholds = field(default_factory=FuzzyThresholds)
    url_markers: tuple[str, ...] = ("series",)
    stopwords: frozenset[str] = STOPWORDS


@dataclass(slots=True, frozen=True)
class ParentReference:
    slug: str | None = None
    title: str | None = None
    url: str | None = None

    @property
    def raw_identifier(self) -> str | None:
        return self.slug or self.title

    @classmethod
    def from_record(cls, record: ValidatedSubUnitRecord) -> ParentReference:
        return cls(slug=record.parent_slug, title=record.parent_title, url=record.url)


@dataclass(slots=True, frozen=True)
class MatchCandidate:
    parent_id: UUID
    strategy_index: int
    strategy_name: str


@dataclass(slots=True, frozen=True)
class IndexedParent:
    id: UUID
    slug: str | None
    title: str | None
    normalized_slug: str
    compact_title: str

    @property
    def fuzzy_key(self) -> str:
        return self.normalized_slug or normalize_slug(self.title)


class ParentIndex:
    """Lookup tables over every work a chapter may point at."""

    def __init__(self) -> None:
        self._parents: dict[UUID, IndexedParent] = {}
        self._slugs: dict[str, UUID] = {}
        self._normalized_slugs: dict[str, UUID] = {}
        self._titles: dict[str, UUID] = {}

    @classmethod
    def from_keys(cls, keys: Iterable[ParentKey]) -> ParentIndex:
        index = cls()
        for key in keys:
            index.add(key.id, slug=key.slug, title=key.title)
        return index

    def __len__(self) -> int:
        return len(self._parents)

    def add(self, parent_id: UUID, *, slug: str | None, title: str | None) -> None:
        normalized = normalize_slug(slug)
        compact = compact_title(title)
        self._parents[parent_id] = IndexedParent(
            id=parent_id,
            slug=slug,
            title=title,
            normalized_slug=normalized,
            compact_title=compact,
        )
        if slug:
            self._slugs[slug] = parent_id
        if normalized:
            self._slugs[normalized] = parent_id
            self._normalized_slugs[normalized] = parent_id
        if title:
            lowered = lower_trimmed(title)
            if lowered:
                self._titles[lowered] = parent_id
        if compact:
            self._titles[compact] = parent_id

    def get(self, parent_id: UUID) -> IndexedParent | None:
        return self._parents.get(parent_id)

    def lookup_slug(self, slug: str | None) -> UUID | None:
        if not slug:
            return None
        return self._slugs.get(slug)

    def lookup_title(self, key: str | None) -> UUID | None:
        if not key:
            return None
        return self._titles.get(key)

    def normalized_slugs(self) -> Iterator[tuple[str, UUID]]:
        yield from self._normalized_slugs.items()

    def parents(self) -> Iterator[IndexedParent]:
        yield from self._parents.values()


type Matcher = Callable[[ParentReference, ParentIndex, MatchSettings], UUID | None]


def match_exact_slug(
    reference: ParentReference, index: ParentIndex, settings: MatchSettings
) -> UUID | None:
    _ = settings
    return index.lookup_slug(reference.raw_identifier)


def match_normalized_slug(
    reference: ParentReference, index: ParentIndex, settings: MatchSettings
) -> UUID | None:
    _ = settings
    return index.lookup_slug(normalize_slug(reference.raw_identifier))


def match_slug_overlap(
    reference: ParentReference, index: ParentIndex, settings: MatchSettings
) -> UUID | None:
    _ = settings
    candidate = normalize_slug(reference.raw_identifier)
    if not candidate:
        return None
    for known, parent_id in index.normalized_slugs():
        if overlaps(candidate, known):
            return parent_id
    return None


def match_title(
    reference: ParentReference, index: ParentIndex, settings: MatchSettings
) -> UUID | None:
    _ = settings
    for value in _distinct(reference.title, reference.slug):
        parent_id = index.lookup_title(compact_title(value)) or index.lookup_title(
            lower_trimmed(value)
        )
        if parent_id is not None:
            return parent_id
    return None


def match_url_slug(
    reference: ParentReference, index: ParentIndex, settings: MatchSettings
) -> UUID | None:
    extracted = extract_slug_from_url(reference.url, settings.url_markers)
    if extracted is None:
        return None
    return index.lookup_slug(extracted) or index.lookup_slug(normalize_slug(extracted))


def match_aggressive_scan(
    reference: ParentReference, index: ParentIndex, settings: MatchSettings
) -> UUID | None:
    _ = settings
    candidate = normalize_slug(reference.raw_identifier)
    if not candidate:
        return None
    candidate_compact = compact_title(reference.raw_identifier)
    for parent in index.parents():
        if overlaps(candidate, parent.normalized_slug):
            return parent.id
        if overlaps(candidate_compact, parent.compact_title):
            return parent.id
    return None


def match_fuzzy(
    reference: ParentReference, index: ParentIndex, settings: MatchSettings
) -> UUID | None:
    raw = reference.raw_identifier
    if not raw:
        return None
    candidate = fuzzy_normalize(raw, settings.stopwords)
    if not candidate:
        return None

    thresholds = settings.thresholds
    best: tuple[int, UUID, int] | None = None
    for parent in index.parents():
        known = parent.fuzzy_key
        if not known:
            continue
        distance = levenshtein(candidate, known)
        if best is None or distance < best[0]:
            best = (distance, parent.id, len(known))

    if best is None:
        return None
    distance, parent_id, known_length = best
    if distance <= thresholds.strict_limit(len(candidate), known_length):
        return parent_id
    if distance < thresholds.loose_limit(len(candidate)):
        return parent_id
    return None


DEFAULT_MATCHERS: tuple[Matcher, ...] = (
    match_exact_slug,
    match_normalized_slug,
    match_slug_overlap,
    match_title,
    match_url_slug,
    match_aggressive_scan,
    match_fuzzy,
)


def strategy_name(matcher: Matcher) -> str:
    name = getattr(matcher, "__name__", type(matcher).__name__)
    return name.removeprefix("match_")


def extract_slug_from_url(url: str | None, markers: Sequence[str]) -> str | None:
    """Return the path segment following the first marker segment, if any."""

    if not url:
        return None
    try:
        path = urlsplit(url).path
    except ValueError:
        return None
    segments = [segment for segment in path.split("/") if segment]
    for position, segment in enumerate(segments):
        if segment in markers and position + 1 < len(segments):
            return segments[position + 1]
    return None


class ResolutionEngine:
    """Resolve parent references to exactly one work id, or report none."""

    def __init__(
        self,
        index: ParentIndex,
        *,
        matchers: Sequence[Matcher] = DEFAULT_MATCHERS,
        settings: MatchSettings | None = None,
    ) -> None:
        self._index = index
        self._matchers = tuple(matchers)
        self._settings = settings or MatchSettings()
        self.strategy_hits: Counter[str] = Counter()

    @property
    def index(self) -> ParentIndex:
        return self._index

    def resolve(self, reference: ParentReference) -> MatchCandidate | None:
        for position, matcher in enumerate(self._matchers, start=1):
            parent_id = matcher(reference, self._index, self._settings)
            if parent_id is None:
                continue
            name = strategy_name(matcher)
            self.strategy_hits[name] += 1
            log.debug(
                "Resolved %r via stage %s (%s)", reference.raw_identifier, position, name
            )
            return MatchCandidate(parent_id=parent_id, strategy_index=position, strategy_name=name)
        return None

    def require(self, reference: ParentReference) -> MatchCandidate:
        candidate = self.resolve(reference)
        if candidate is None:
            raise ResolutionFailure(reference.raw_identifier, self.attempted_value(reference))
        return candidate

    def attempted_value(self, reference: ParentReference) -> str | None:
        raw = reference.raw_identifier
        if not raw:
            return extract_slug_from_url(reference.url, self._settings.url_markers)
        return fuzzy_normalize(raw, self._settings.stopwords) or None


def _distinct(*values: str | None) -> Iterator[str]:
    seen: set[str] = set()
    for value in values:
        if value and value not in seen:
            seen.add(value)
            yield value
