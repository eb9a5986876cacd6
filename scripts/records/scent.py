"""Scent-combination catalog records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from pydantic import Field, field_validator

from query import predicates as p
from query.engine import count_where, group_and_count, most_common
from record_store import Record, RecordType

ASSOCIATIONS_LIMIT = 500


class ScentCombination(Record):
    record_type = RecordType.SCENT_COMBINATION
    search_fields = ("name", "associations", "scents")

    name: str = Field(min_length=1)
    scents: list[str] = Field(default_factory=list)
    associations: str = Field(default="", max_length=ASSOCIATIONS_LIMIT)
    mood: str | None = None
    is_favorite: bool = False

    @field_validator("scents")
    @classmethod
    def _drop_blank_scents(cls, value: list[str]) -> list[str]:
        return [s.strip() for s in value if s and s.strip()]


@dataclass
class ScentStatistics:
    total: int
    favorites: int
    by_mood: dict[str | None, int]
    most_used_scent: str | None


def scent_statistics(combinations: Sequence[ScentCombination]) -> ScentStatistics:
    all_scents = [s.casefold() for c in combinations for s in c.scents]
    return ScentStatistics(
        total=len(combinations),
        favorites=count_where(combinations, p.is_true("is_favorite")),
        by_mood=group_and_count(combinations, "mood"),
        most_used_scent=most_common(all_scents, lambda scent: scent),
    )
