"""Predicate constructors for record filtering.

A predicate is any ``Callable[[record], bool]``. Fields are named by
attribute (``"country"``) or given as a callable accessor, so derived values
(``lambda t: t.duration``) work the same as stored ones.

Date predicates read the clock every time they are evaluated unless a fixed
``now`` is passed; a filter built before midnight answers for the new day
after it.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Callable, Iterable

from .dates import (
    as_local,
    local_now,
    same_calendar_day,
    same_calendar_month,
    same_calendar_year,
)

Predicate = Callable[[Any], bool]
Accessor = str | Callable[[Any], Any]


def getter(accessor: Accessor) -> Callable[[Any], Any]:
    """Normalize a field name or callable into a value getter."""
    if callable(accessor):
        return accessor
    return lambda record: getattr(record, accessor, None)


def _clock(now: datetime | None) -> Callable[[], datetime]:
    if now is None:
        return local_now
    return lambda: now


# -- Field predicates --


def field_equals(field: Accessor, value: Any) -> Predicate:
    get = getter(field)
    return lambda record: get(record) == value


def field_in(field: Accessor, values: Iterable[Any]) -> Predicate:
    allowed = frozenset(values)
    get = getter(field)
    return lambda record: get(record) in allowed


def is_true(field: Accessor) -> Predicate:
    get = getter(field)
    return lambda record: bool(get(record))


def is_false(field: Accessor) -> Predicate:
    get = getter(field)
    return lambda record: not get(record)


def not_archived(field: Accessor = "is_archived") -> Predicate:
    return is_false(field)


def is_null(field: Accessor) -> Predicate:
    get = getter(field)
    return lambda record: get(record) is None


def not_null(field: Accessor) -> Predicate:
    get = getter(field)
    return lambda record: get(record) is not None


def contains_tag(field: Accessor, tag: str) -> Predicate:
    """Case-insensitive membership test on a list-of-strings field."""
    get = getter(field)
    wanted = tag.casefold()
    return lambda record: any(str(item).casefold() == wanted for item in (get(record) or ()))


# -- Date predicates --


def _date_predicate(field: Accessor, test: Callable[[datetime], bool]) -> Predicate:
    get = getter(field)

    def predicate(record: Any) -> bool:
        value = get(record)
        if value is None:
            return False
        return test(as_local(value))

    return predicate


def date_between(field: Accessor, start: date | datetime, end: date | datetime) -> Predicate:
    """Inclusive ``start <= value <= end``.

    A plain ``date`` as ``end`` covers that whole day.
    """
    lower = as_local(start)
    if isinstance(end, datetime):
        upper = as_local(end)
        return _date_predicate(field, lambda value: lower <= value <= upper)
    next_day = as_local(end + timedelta(days=1))
    return _date_predicate(field, lambda value: lower <= value < next_day)


def same_day(field: Accessor, now: datetime | None = None) -> Predicate:
    clock = _clock(now)
    return _date_predicate(field, lambda value: same_calendar_day(value, clock()))


def within_last(field: Accessor, days: int = 0, weeks: int = 0, now: datetime | None = None) -> Predicate:
    """Value at or after ``now`` minus the window."""
    clock = _clock(now)
    window = timedelta(days=days, weeks=weeks)
    return _date_predicate(field, lambda value: value >= as_local(clock()) - window)


def in_current_month(field: Accessor, now: datetime | None = None) -> Predicate:
    clock = _clock(now)
    return _date_predicate(field, lambda value: same_calendar_month(value, clock()))


def in_current_year(field: Accessor, now: datetime | None = None) -> Predicate:
    clock = _clock(now)
    return _date_predicate(field, lambda value: same_calendar_year(value, clock()))


def upcoming(field: Accessor, now: datetime | None = None) -> Predicate:
    """Strictly after now."""
    clock = _clock(now)
    return _date_predicate(field, lambda value: value > as_local(clock()))


def past(field: Accessor, now: datetime | None = None) -> Predicate:
    """Strictly before now."""
    clock = _clock(now)
    return _date_predicate(field, lambda value: value < as_local(clock()))


def overlaps_current_month(start: Accessor, end: Accessor, now: datetime | None = None) -> Predicate:
    """Span whose start or end falls in the current month."""
    return any_of(in_current_month(start, now), in_current_month(end, now))


def overlaps_current_year(start: Accessor, end: Accessor, now: datetime | None = None) -> Predicate:
    return any_of(in_current_year(start, now), in_current_year(end, now))


# -- Combinators --


def all_of(*predicates: Predicate) -> Predicate:
    return lambda record: all(p(record) for p in predicates)


def any_of(*predicates: Predicate) -> Predicate:
    return lambda record: any(p(record) for p in predicates)


def negate(predicate: Predicate) -> Predicate:
    return lambda record: not predicate(record)
