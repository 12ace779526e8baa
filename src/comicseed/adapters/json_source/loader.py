"""Read scraped JSON documents and partition their records into valid and quarantined."""

from __future__ import annotations

import glob
import json
from collections.abc import Mapping
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final, cast

from pydantic import ValidationError

from comicseed.domain.errors import ParseError, RecordValidationError
from comicseed.domain.records import LoadResult, QuarantinedRecord, RecordOrigin, SourceFailure

from .schema import detect_variant
from .translator import translate_payload

if TYPE_CHECKING:
    from collections.abc import Iterable

    from comicseed.domain.records import ValidatedRecord

log = getLogger(__name__)

CONTAINER_KEYS: Final[tuple[str, ...]] = (
    "data",
    "items",
    "comics",
    "chapters",
    "users",
    "results",
)


def expand_sources(patterns: Iterable[str | Path]) -> list[Path]:
    """Expand glob patterns, keeping plain paths as given and dropping duplicates."""

    paths: list[Path] = []
    for pattern in patterns:
        text = str(pattern)
        if glob.has_magic(text):
            matches = sorted(Path(match) for match in glob.glob(text))
            if not matches:
                log.warning("Source pattern %s matched no files", text)
            candidates = matches
        else:
            candidates = [Path(text)]
        for candidate in candidates:
            if candidate not in paths:
                paths.append(candidate)
    return paths


def read_document(path: Path) -> object:
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError as exc:
        raise ParseError(str(path), "file not found") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(str(path), f"unreadable: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ParseError(str(path), f"invalid JSON: {exc}") from exc


def extract_items(document: object, *, source_name: str = "<memory>") -> list[object]:
    """Locate the record list inside a decoded document.

    Recognised container keys win in ``CONTAINER_KEYS`` order; otherwise the
    largest list-valued property is used, and an object without any list is
    treated as a single record.
    """

    if isinstance(document, list):
        return cast(list[object], document)
    if not isinstance(document, Mapping):
        raise ParseError(source_name, "document is neither a list nor an object")

    mapping = cast(Mapping[str, object], document)
    for key in CONTAINER_KEYS:
        value = mapping.get(key)
        if isinstance(value, list):
            return cast(list[object], value)

    largest: list[object] = []
    for value in mapping.values():
        if isinstance(value, list) and len(cast(list[object], value)) > len(largest):
            largest = cast(list[object], value)
    if largest:
        return largest
    return [mapping]


def validate_record(raw: object, *, origin: RecordOrigin) -> ValidatedRecord:
    if not isinstance(raw, Mapping):
        raise RecordValidationError("record is not an object")
    record = cast(Mapping[str, object], raw)
    variant = detect_variant(record)
    if variant is None:
        raise RecordValidationError("unrecognized record shape")
    try:
        payload = variant.model_validate(record)
    except ValidationError as exc:
        raise RecordValidationError(_format_validation_error(variant.__name__, exc)) from exc
    return translate_payload(payload, origin=origin)


def load_document(document: object, *, source_name: str) -> LoadResult:
    result = LoadResult(loaded_sources=[source_name])
    for index, raw in enumerate(extract_items(document, source_name=source_name)):
        origin = RecordOrigin(source_name=source_name, source_index=index)
        try:
            result.valid.append(validate_record(raw, origin=origin))
        except RecordValidationError as exc:
            log.debug("Quarantined %s: %s", origin.describe(), exc.reason)
            result.invalid.append(QuarantinedRecord(origin=origin, record=raw, reason=exc.reason))
    return result


def load(sources: Iterable[str | Path]) -> LoadResult:
    """Load every source, skipping documents that cannot be parsed."""

    result = LoadResult()
    for path in expand_sources(sources):
        source_name = str(path)
        try:
            document = read_document(path)
            loaded = load_document(document, source_name=source_name)
        except ParseError as exc:
            log.warning("Skipping source %s: %s", source_name, exc.message)
            result.failed_sources.append(SourceFailure(source_name=source_name, reason=exc.message))
            continue
        log.info(
            "Loaded %s: %s valid, %s quarantined",
            source_name,
            len(loaded.valid),
            len(loaded.invalid),
        )
        result.extend(loaded)
    return result


def _format_validation_error(variant: str, exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "record"
        message = str(error["msg"]).removeprefix("Value error, ")
        parts.append(f"{location}: {message}")
    return f"{variant}: " + "; ".join(parts)
