"""Filter, search, sort and aggregate record snapshots."""

from .comparators import SortKey, by_bool, by_date, by_number, by_text
from .dates import days_between, duration_days
from .engine import (
    average_by,
    count_where,
    distinct_count,
    filter_records,
    group_and_count,
    group_by,
    max_by,
    min_by,
    most_common,
    percentages,
    run,
    search,
    sort_records,
    sum_by,
    zero_fill,
)
from .query_state import Period, QueryState
