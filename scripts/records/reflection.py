"""Daily-reflection journal records: free notes and dated mood moments."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Sequence

from pydantic import Field

from query import predicates as p
from query.comparators import by_date
from query.dates import as_local, local_now
from query.engine import count_where, group_and_count, most_common, run, sort_records, zero_fill
from record_store import Record, RecordType


class Mood(StrEnum):
    JOYFUL = "joyful"
    CALM = "calm"
    NEUTRAL = "neutral"
    SAD = "sad"
    ANXIOUS = "anxious"
    ANGRY = "angry"


class Note(Record):
    record_type = RecordType.NOTE
    search_fields = ("text",)

    text: str = Field(min_length=1)
    is_archived: bool = False


class Moment(Record):
    record_type = RecordType.MOMENT
    search_fields = ("text",)

    date: datetime = Field(default_factory=local_now)
    mood: Mood = Mood.NEUTRAL
    text: str = ""
    is_favorite: bool = False


def moments_in_range(
    moments: Sequence[Moment],
    text: str = "",
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Moment]:
    """History list: optional date window and search, newest first."""
    predicates = [] if start is None or end is None else [p.date_between("date", start, end)]
    return run(moments, predicates=predicates, text=text, fields=Moment.search_fields,
               sort=[by_date("date", descending=True)])


@dataclass
class MoodStatistics:
    total: int
    this_week: int
    favorites: int
    by_mood: dict[str, int]
    dominant_mood: str | None
    streak_days: int


def current_streak(moments: Sequence[Moment], now: datetime | None = None) -> int:
    """Consecutive days, ending today or yesterday, with at least one moment."""
    days = {as_local(m.date).date() for m in moments}
    day = as_local(now or local_now()).date()
    if day not in days:
        day -= timedelta(days=1)
    streak = 0
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def mood_statistics(moments: Sequence[Moment], now: datetime | None = None) -> MoodStatistics:
    return MoodStatistics(
        total=len(moments),
        this_week=count_where(moments, p.within_last("date", weeks=1, now=now)),
        favorites=count_where(moments, p.is_true("is_favorite")),
        by_mood=zero_fill(group_and_count(moments, "mood"), list(Mood)),
        dominant_mood=most_common(moments, "mood"),
        streak_days=current_streak(moments, now),
    )


def latest_moments(moments: Sequence[Moment], limit: int = 3) -> list[Moment]:
    return sort_records(moments, by_date("date", descending=True))[:limit]
