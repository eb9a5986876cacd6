"""Board-game rules library records.

Rule sections belong to a game by being nested inside it; there is no
separate section collection.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field

from query import predicates as p
from query.comparators import by_date
from query.engine import count_where, distinct_count, group_and_count, percentages, sort_records, sum_by, zero_fill
from record_store import Record, RecordType
from record_store.record import new_record_id

DESCRIPTION_LIMIT = 300


class GameCategory(StrEnum):
    STRATEGY = "strategy"
    PARTY = "party"
    FAMILY = "family"
    CARD = "card"
    COOPERATIVE = "cooperative"
    OTHER = "other"


class GameSection(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_record_id)
    title: str = Field(min_length=1)
    content: str = ""


class Game(Record):
    record_type = RecordType.GAME
    search_fields = ("name", "description")

    name: str = Field(min_length=1)
    category: GameCategory = GameCategory.OTHER
    description: str = Field(default="", max_length=DESCRIPTION_LIMIT)
    sections: list[GameSection] = Field(default_factory=list)
    is_favorite: bool = False

    @property
    def section_titles(self) -> list[str]:
        return [s.title for s in self.sections]


@dataclass
class CategoryShare:
    category: str
    count: int
    percentage: float


@dataclass
class GameStatistics:
    total_games: int
    favorite_games: int
    total_sections: int
    categories_used: int
    category_breakdown: list[CategoryShare]
    recently_modified: list[Game]


def game_statistics(games: Sequence[Game], recent_limit: int = 5) -> GameStatistics:
    """Library overview; the breakdown lists used categories, largest first."""
    counts = zero_fill(group_and_count(games, "category"), list(GameCategory))
    shares = percentages(counts, total=len(games))
    breakdown = [
        CategoryShare(category=str(category), count=count, percentage=shares[category])
        for category, count in counts.items()
        if count > 0
    ]
    breakdown.sort(key=lambda share: share.count, reverse=True)
    return GameStatistics(
        total_games=len(games),
        favorite_games=count_where(games, p.is_true("is_favorite")),
        total_sections=sum_by(games, lambda g: len(g.sections)),
        categories_used=distinct_count(games, "category"),
        category_breakdown=breakdown,
        recently_modified=sort_records(
            games,
            by_date(lambda g: g.updated_at or g.created_at, descending=True),
        )[:recent_limit],
    )
