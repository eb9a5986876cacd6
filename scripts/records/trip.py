"""Trip diary records: trips, travel wishlist, and their statistics."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Sequence

from pydantic import Field

from query import predicates as p
from query.comparators import SortKey, by_date, by_text
from query.dates import as_local, duration_days, local_now
from query.engine import count_where, distinct_count, max_by, min_by, most_common, sort_records, sum_by
from record_store import Record, RecordType


class Trip(Record):
    record_type = RecordType.TRIP
    search_fields = ("title", "country", "city", "notes")

    title: str = Field(min_length=1)
    country: str = Field(min_length=1)
    city: str | None = None
    start_date: datetime
    end_date: datetime
    notes: str = ""
    places: list[str] = Field(default_factory=list)
    impressions: str = ""
    is_archived: bool = False
    archived_at: datetime | None = None

    @property
    def duration(self) -> int:
        """Trip length in days; a same-day or inverted trip counts as 1."""
        return duration_days(self.start_date, self.end_date)

    @property
    def location(self) -> str:
        return f"{self.city}, {self.country}" if self.city else self.country

    def archived(self, now: datetime | None = None) -> Trip:
        """Copy flagged as archived, ready to pass to ``RecordStore.update``."""
        return self.model_copy(update={"is_archived": True, "archived_at": now or local_now()})

    def unarchived(self) -> Trip:
        return self.model_copy(update={"is_archived": False, "archived_at": None})


class WishlistItem(Record):
    record_type = RecordType.WISHLIST_ITEM
    search_fields = ("destination", "country", "notes")

    destination: str = Field(min_length=1)
    country: str = ""
    notes: str = ""
    is_priority: bool = False


class TripFilter(StrEnum):
    ALL = "all"
    UPCOMING = "upcoming"
    PAST = "past"
    THIS_MONTH = "this_month"
    THIS_YEAR = "this_year"

    def predicates(self, now: datetime | None = None, include_archived: bool = False) -> list[p.Predicate]:
        """Predicates for this filter; archived trips are left out unless asked for."""
        result = [] if include_archived else [p.not_archived()]
        if self == TripFilter.UPCOMING:
            result.append(p.upcoming("start_date", now))
        elif self == TripFilter.PAST:
            result.append(p.past("end_date", now))
        elif self == TripFilter.THIS_MONTH:
            result.append(p.overlaps_current_month("start_date", "end_date", now))
        elif self == TripFilter.THIS_YEAR:
            result.append(p.overlaps_current_year("start_date", "end_date", now))
        return result


class TripSort(StrEnum):
    DATE_DESCENDING = "date_descending"
    DATE_ASCENDING = "date_ascending"
    TITLE_ASCENDING = "title_ascending"
    TITLE_DESCENDING = "title_descending"
    COUNTRY_ASCENDING = "country_ascending"
    COUNTRY_DESCENDING = "country_descending"

    def sort_key(self) -> SortKey:
        return {
            TripSort.DATE_DESCENDING: by_date("start_date", descending=True),
            TripSort.DATE_ASCENDING: by_date("start_date"),
            TripSort.TITLE_ASCENDING: by_text("title"),
            TripSort.TITLE_DESCENDING: by_text("title", descending=True),
            TripSort.COUNTRY_ASCENDING: by_text("country"),
            TripSort.COUNTRY_DESCENDING: by_text("country", descending=True),
        }[self]


@dataclass
class TripStatistics:
    total_trips: int
    active_trips: int
    archived_trips: int
    unique_countries: int
    most_visited_country: str | None
    longest_trip: Trip | None
    next_upcoming_trip: Trip | None
    total_travel_days: int
    recent_trips: list[Trip]
    wishlist_items: int
    priority_wishlist_items: int


def trip_statistics(
    trips: Sequence[Trip],
    wishlist: Sequence[WishlistItem] = (),
    now: datetime | None = None,
    recent_limit: int = 5,
) -> TripStatistics:
    active = [t for t in trips if not t.is_archived]
    upcoming_trips = [t for t in active if p.upcoming("start_date", now)(t)]
    return TripStatistics(
        total_trips=len(trips),
        active_trips=len(active),
        archived_trips=len(trips) - len(active),
        unique_countries=distinct_count(trips, "country"),
        most_visited_country=most_common(trips, "country"),
        longest_trip=max_by(trips, "duration"),
        next_upcoming_trip=min_by(upcoming_trips, lambda t: as_local(t.start_date)),
        total_travel_days=sum_by(trips, "duration"),
        recent_trips=sort_records(trips, by_date("created_at", descending=True))[:recent_limit],
        wishlist_items=len(wishlist),
        priority_wishlist_items=count_where(wishlist, p.is_true("is_priority")),
    )
