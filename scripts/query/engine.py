"""Stateless transformations of record snapshots.

Everything here takes a sequence and returns a new list or value; the input
is never mutated. ``run`` is the one pipeline callers should use for
presentation lists: filter, then search, then sort.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, Iterable, Mapping, Sequence, TypeVar

from .comparators import SortKey
from .predicates import Accessor, Predicate, getter

R = TypeVar("R")
K = TypeVar("K", bound=Hashable)


# -- Pipeline stages --


def filter_records(records: Iterable[R], predicates: Sequence[Predicate] = ()) -> list[R]:
    """Keep records matching every predicate; no predicates keeps everything."""
    return [r for r in records if all(p(r) for p in predicates)]


def _matches(value: Any, needle: str) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, tuple, set, frozenset)):
        return any(_matches(item, needle) for item in value)
    return needle in str(value).casefold()


def search(records: Iterable[R], text: str, fields: Sequence[Accessor]) -> list[R]:
    """Case-insensitive substring match against any of ``fields``.

    Blank ``text`` returns the input unchanged rather than matching nothing.
    """
    needle = (text or "").strip().casefold()
    if not needle:
        return list(records)
    getters = [getter(f) for f in fields]
    return [r for r in records if any(_matches(get(r), needle) for get in getters)]


def sort_records(records: Iterable[R], *keys: SortKey) -> list[R]:
    """Stable multi-key sort; the first key is the primary ordering.

    Records with equal keys keep their input order. None values sort last
    for every key, ascending or descending.
    """
    result = list(records)
    for sort_key in reversed(keys):
        present = [r for r in result if sort_key.value(r) is not None]
        missing = [r for r in result if sort_key.value(r) is None]
        present.sort(key=sort_key.value, reverse=sort_key.descending)
        result = present + missing
    return result


def run(
    records: Iterable[R],
    predicates: Sequence[Predicate] = (),
    text: str = "",
    fields: Sequence[Accessor] = (),
    sort: Sequence[SortKey] = (),
) -> list[R]:
    """Filter, then search, then sort."""
    filtered = filter_records(records, predicates)
    found = search(filtered, text, fields)
    return sort_records(found, *sort)


# -- Grouping --


def group_and_count(records: Iterable[R], key_fn: Accessor) -> dict[Any, int]:
    """Count records per key. Only observed keys appear, in first-seen order."""
    get = getter(key_fn)
    counts: dict[Any, int] = {}
    for record in records:
        key = get(record)
        counts[key] = counts.get(key, 0) + 1
    return counts


def group_by(records: Iterable[R], key_fn: Accessor) -> dict[Any, list[R]]:
    get = getter(key_fn)
    groups: dict[Any, list[R]] = {}
    for record in records:
        groups.setdefault(get(record), []).append(record)
    return groups


def zero_fill(counts: Mapping[K, int], keys: Iterable[K]) -> dict[K, int]:
    """Counts for every key in ``keys`` (in that order), 0 where unobserved."""
    return {key: counts.get(key, 0) for key in keys}


def percentages(counts: Mapping[K, int], total: int | None = None) -> dict[K, float]:
    """Share of each count in percent; all zeros when the total is 0."""
    total = sum(counts.values()) if total is None else total
    if total <= 0:
        return {key: 0.0 for key in counts}
    return {key: count / total * 100 for key, count in counts.items()}


def most_common(records: Iterable[R], key_fn: Accessor) -> Any | None:
    """Key with the highest count; ties go to the key seen first."""
    counts = group_and_count(records, key_fn)
    best, best_count = None, 0
    for key, count in counts.items():
        if count > best_count:
            best, best_count = key, count
    return best


# -- Aggregates --


def _extreme(records: Iterable[R], key_fn: Accessor, better: Callable[[Any, Any], bool]) -> R | None:
    get = getter(key_fn)
    best: R | None = None
    best_value: Any = None
    for record in records:
        value = get(record)
        if value is None:
            continue
        if best is None or better(value, best_value):
            best, best_value = record, value
    return best


def max_by(records: Iterable[R], key_fn: Accessor) -> R | None:
    """Record with the largest value; first one wins ties, None when empty."""
    return _extreme(records, key_fn, lambda value, best: value > best)


def min_by(records: Iterable[R], key_fn: Accessor) -> R | None:
    return _extreme(records, key_fn, lambda value, best: value < best)


def sum_by(records: Iterable[R], key_fn: Accessor) -> int | float:
    get = getter(key_fn)
    return sum(get(r) or 0 for r in records)


def average_by(records: Iterable[R], key_fn: Accessor) -> float:
    items = list(records)
    if not items:
        return 0.0
    return sum_by(items, key_fn) / len(items)


def count_where(records: Iterable[R], predicate: Predicate) -> int:
    return sum(1 for r in records if predicate(r))


def distinct_count(records: Iterable[R], key_fn: Accessor) -> int:
    get = getter(key_fn)
    return len({get(r) for r in records})
