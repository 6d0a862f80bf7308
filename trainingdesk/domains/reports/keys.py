# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Row key computation.

A row key identifies one (user, group) enrollment across pages and
re-fetches. The format is shared with the web client and must stay
byte-identical:

    "{id_user}-{id_group}"          when both ids are present
    "{dni or ''}-{moodle_id or ''}"  otherwise
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, TypeVar

from trainingdesk.domains.reports.exceptions import InvalidRowKeyError

T = TypeVar("T")


def _field(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def row_key(row: Any) -> str:
    """Compute the row key of a report row.

    Args:
        row: ReportRow, ORM-like object or mapping.

    Returns:
        The row key string.
    """
    id_user = _field(row, "id_user")
    id_group = _field(row, "id_group")
    if id_user is not None and id_group is not None:
        return f"{id_user}-{id_group}"

    return fallback_key(row)


def fallback_key(row: Any) -> str:
    """Key of a row built from its DNI and Moodle id only."""
    dni = _field(row, "dni")
    moodle_id = _field(row, "moodle_id")
    return f"{'' if dni is None else dni}-{'' if moodle_id is None else moodle_id}"


@dataclass(frozen=True)
class ParsedKey:
    """A row key split into its lookup components.

    Either the (id_user, id_group) pair or the (dni, moodle_id) pair is
    populated; the empty key "-" populates neither.
    """

    raw: str
    id_user: int | None = None
    id_group: int | None = None
    dni: str | None = None
    moodle_id: int | None = None

    @property
    def is_numeric(self) -> bool:
        return self.id_user is not None and self.id_group is not None


def parse_row_key(key: str) -> ParsedKey:
    """Split a row key for server-side lookup.

    Keys made of two integers are read as (id_user, id_group). Anything
    else is a fallback key: the text after the last dash is the Moodle id
    (possibly empty) and the rest is the DNI, which may itself contain
    dashes. A bare "-" is the key of a row with neither DNI nor Moodle
    id; it parses to an empty key that matches no row.

    Args:
        key: Row key received from the client.

    Returns:
        ParsedKey with the lookup components.

    Raises:
        InvalidRowKeyError: If the key has no separator or a non-numeric
            Moodle id.
    """
    if not isinstance(key, str) or "-" not in key:
        raise InvalidRowKeyError(str(key))

    left, _, right = key.rpartition("-")
    if left.isdigit() and right.isdigit():
        return ParsedKey(raw=key, id_user=int(left), id_group=int(right))

    if right and not right.isdigit():
        raise InvalidRowKeyError(key)

    return ParsedKey(
        raw=key,
        dni=left or None,
        moodle_id=int(right) if right else None,
    )


def dedupe_by_key(rows: Iterable[T]) -> list[T]:
    """Drop repeated rows, keeping the first occurrence of each key."""
    seen: set[str] = set()
    unique: list[T] = []
    for row in rows:
        key = row_key(row)
        if key in seen:
            continue
        seen.add(key)
        unique.append(row)
    return unique
