"""Translate SQLAlchemy failures into the domain persistence errors."""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import PrimaryKeyConstraint, UniqueConstraint
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from comicseed.adapters.sqlalchemy.mappings import mapper_registry
from comicseed.domain.errors import ConflictKind, PersistenceConflict, PersistenceError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import MetaData

POSTGRES_UNIQUE_VIOLATION = "23505"

_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<columns>[\w., ]+)")
_SQLITE_NOT_NULL = re.compile(r"NOT NULL constraint failed: (?P<column>[\w.]+)")


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise SQLAlchemy errors raised inside the block as domain errors."""

    try:
        yield
    except IntegrityError as exc:
        raise translate_integrity_error(exc) from exc
    except SQLAlchemyError as exc:
        raise PersistenceError(str(exc.orig) if exc.orig is not None else str(exc)) from exc


def translate_integrity_error(exc: IntegrityError) -> PersistenceConflict:
    original = exc.orig
    message = str(original)
    sqlstate = getattr(original, "pgcode", None) or getattr(original, "sqlstate", None)
    diag = getattr(original, "diag", None)
    named = getattr(diag, "constraint_name", None)

    if sqlstate == POSTGRES_UNIQUE_VIOLATION or _SQLITE_UNIQUE.search(message):
        return PersistenceConflict(
            ConflictKind.DUPLICATE,
            named or constraint_name_from_message(message),
        )
    return PersistenceConflict(
        ConflictKind.CONSTRAINT,
        named or constraint_name_from_message(message),
    )


def constraint_name_from_message(
    message: str,
    metadata: MetaData | None = None,
) -> str | None:
    """Recover a constraint name from a SQLite integrity error message.

    SQLite reports the offending columns rather than the constraint, so unique
    and primary-key names are looked up in the mapped metadata.
    """

    metadata = metadata if metadata is not None else mapper_registry.metadata

    unique = _SQLITE_UNIQUE.search(message)
    if unique is not None:
        qualified = [part.strip() for part in unique.group("columns").split(",")]
        table_name = qualified[0].split(".")[0]
        columns = {part.split(".")[-1] for part in qualified}
        return _unique_constraint_name(metadata, table_name, columns)

    not_null = _SQLITE_NOT_NULL.search(message)
    if not_null is not None:
        return "not_null_" + not_null.group("column").replace(".", "_")

    if "FOREIGN KEY constraint failed" in message:
        return "foreign_key"
    return None


def _unique_constraint_name(metadata: MetaData, table_name: str, columns: set[str]) -> str:
    fallback = f"uq_{table_name}_{'_'.join(sorted(columns))}"
    table = metadata.tables.get(table_name)
    if table is None:
        return fallback
    for constraint in table.constraints:
        if not isinstance(constraint, UniqueConstraint | PrimaryKeyConstraint):
            continue
        if {column.name for column in constraint.columns} != columns:
            continue
        if isinstance(constraint.name, str) and constraint.name:
            return constraint.name
        return f"pk_{table_name}" if isinstance(constraint, PrimaryKeyConstraint) else fallback
    return fallback
