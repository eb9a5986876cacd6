"""Calendar helpers shared by date predicates, sort keys and aggregates.

Naive datetimes are read as local wall-clock time; aware ones are converted
to the local zone, so records written by the store (UTC) and values typed by
a user (naive) compare on the same calendar.
"""

from __future__ import annotations

from datetime import date, datetime, time


def as_local(value: date | datetime) -> datetime:
    """Aware local datetime for a date, naive datetime or aware datetime."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    return value.astimezone()


def local_now() -> datetime:
    return datetime.now().astimezone()


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Signed number of calendar days from ``start`` to ``end``."""
    return (as_local(end).date() - as_local(start).date()).days


def duration_days(start: date | datetime, end: date | datetime) -> int:
    """Length of a span in days, never less than 1.

    Same-day and inverted ranges both count as one day.
    """
    return max(1, days_between(start, end))


def same_calendar_day(a: date | datetime, b: date | datetime) -> bool:
    return as_local(a).date() == as_local(b).date()


def same_calendar_month(a: date | datetime, b: date | datetime) -> bool:
    a, b = as_local(a), as_local(b)
    return (a.year, a.month) == (b.year, b.month)


def same_calendar_year(a: date | datetime, b: date | datetime) -> bool:
    return as_local(a).year == as_local(b).year
