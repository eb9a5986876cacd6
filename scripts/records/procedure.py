"""Beauty-procedure tracker records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Sequence

from pydantic import Field

from query import predicates as p
from query.engine import count_where, group_and_count, most_common, sum_by, zero_fill
from record_store import Record, RecordType


class ProcedureCategory(StrEnum):
    HAIR = "hair"
    NAILS = "nails"
    FACE = "face"
    BODY = "body"
    MAKEUP = "makeup"
    OTHER = "other"


class Procedure(Record):
    record_type = RecordType.PROCEDURE
    search_fields = ("name", "product", "notes")

    name: str = Field(min_length=1)
    category: ProcedureCategory = ProcedureCategory.OTHER
    product: str | None = None
    date: datetime
    cost: float | None = Field(default=None, ge=0)
    notes: str = ""
    is_favorite: bool = False


def procedure_filters(
    category: ProcedureCategory | None = None,
    product: str | None = None,
) -> list[p.Predicate]:
    """The salon screen's selection: a category chip or a single product."""
    if product is not None:
        return [p.field_equals("product", product)]
    if category is not None:
        return [p.field_equals("category", category)]
    return []


@dataclass
class ProcedureStatistics:
    total: int
    favorites: int
    this_month: int
    total_cost: float
    by_category: dict[str, int]
    favorite_product: str | None


def procedure_statistics(procedures: Sequence[Procedure], now: datetime | None = None) -> ProcedureStatistics:
    with_product = [proc for proc in procedures if proc.product]
    return ProcedureStatistics(
        total=len(procedures),
        favorites=count_where(procedures, p.is_true("is_favorite")),
        this_month=count_where(procedures, p.in_current_month("date", now)),
        total_cost=float(sum_by(procedures, "cost")),
        by_category=zero_fill(group_and_count(procedures, "category"), list(ProcedureCategory)),
        favorite_product=most_common(with_product, "product"),
    )
