"""A caller's active list selection: search text, categories, period and sort."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Sequence

from . import predicates as p
from .comparators import SortKey
from .engine import run
from .predicates import Accessor, Predicate


class Period(StrEnum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    CUSTOM = "custom"


@dataclass
class QueryState:
    """Filter/sort selection that turns a snapshot into a display list.

    ``date_field`` drives ``period``; ``category_field`` drives
    ``categories`` (an empty set means "any category"). ``default_sort`` is
    restored by ``clear``.
    """

    date_field: Accessor = "created_at"
    category_field: Accessor = "category"
    search_fields: Sequence[Accessor] = ()
    default_sort: tuple[SortKey, ...] = ()
    hide_archived: bool = False

    text: str = ""
    categories: set[Any] = field(default_factory=set)
    period: Period = Period.ALL
    custom_start: datetime | None = None
    custom_end: datetime | None = None
    sort: tuple[SortKey, ...] | None = None

    def has_active_filters(self) -> bool:
        return bool(self.text.strip()) or bool(self.categories) or self.period != Period.ALL

    def clear(self) -> None:
        self.text = ""
        self.categories = set()
        self.period = Period.ALL
        self.custom_start = None
        self.custom_end = None
        self.sort = None

    def period_predicate(self, now: datetime | None = None) -> Predicate | None:
        if self.period == Period.TODAY:
            return p.same_day(self.date_field, now)
        if self.period == Period.WEEK:
            return p.within_last(self.date_field, weeks=1, now=now)
        if self.period == Period.MONTH:
            return p.in_current_month(self.date_field, now)
        if self.period == Period.YEAR:
            return p.in_current_year(self.date_field, now)
        if self.period == Period.CUSTOM:
            if self.custom_start is None or self.custom_end is None:
                return None
            return p.date_between(self.date_field, self.custom_start, self.custom_end)
        return None

    def predicates(self, now: datetime | None = None) -> list[Predicate]:
        active: list[Predicate] = []
        if self.hide_archived:
            active.append(p.not_archived())
        if self.categories:
            active.append(p.field_in(self.category_field, self.categories))
        period = self.period_predicate(now)
        if period is not None:
            active.append(period)
        return active

    def sort_keys(self) -> tuple[SortKey, ...]:
        return self.default_sort if self.sort is None else self.sort

    def apply(self, records: Sequence[Any], now: datetime | None = None) -> list[Any]:
        return run(
            records,
            predicates=self.predicates(now),
            text=self.text,
            fields=self.search_fields,
            sort=self.sort_keys(),
        )
