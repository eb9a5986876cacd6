"""Sort keys for ordering record sequences.

A ``SortKey`` pairs a value getter with a direction. ``sort_records`` applies
several keys as primary/secondary/... ordering; missing (None) values always
go last regardless of direction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .dates import as_local
from .predicates import Accessor, getter


@dataclass(frozen=True)
class SortKey:
    key: Callable[[Any], Any]
    descending: bool = False

    def value(self, record: Any) -> Any:
        return self.key(record)


def _skip_none(convert: Callable[[Any], Any], get: Callable[[Any], Any]) -> Callable[[Any], Any]:
    def key(record: Any) -> Any:
        value = get(record)
        return None if value is None else convert(value)

    return key


def by_date(field: Accessor, descending: bool = False) -> SortKey:
    return SortKey(_skip_none(as_local, getter(field)), descending)


def by_text(field: Accessor, descending: bool = False) -> SortKey:
    """Case-insensitive lexicographic order (``casefold`` comparison)."""
    return SortKey(_skip_none(lambda v: str(v).casefold(), getter(field)), descending)


def by_number(field: Accessor, descending: bool = False) -> SortKey:
    return SortKey(getter(field), descending)


def by_bool(field: Accessor, true_first: bool = True) -> SortKey:
    """Order flagged records (favorites, priorities) ahead of the rest."""
    return SortKey(_skip_none(bool, getter(field)), descending=true_first)
