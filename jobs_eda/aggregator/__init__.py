"""Per-agency aggregation stage."""

from .agency_summary import (
    count_by_agency,
    median_salary_by_agency,
    summarize_agencies,
    sum_positions_by_agency,
    top_n,
    bottom_n,
)

__all__ = [
    "count_by_agency",
    "median_salary_by_agency",
    "summarize_agencies",
    "sum_positions_by_agency",
    "top_n",
    "bottom_n",
]
