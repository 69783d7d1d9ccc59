"""
Agency Aggregation

Groups postings by agency and reduces them to ranked summaries: number of
postings, number of positions being hired for, and median annualized salary.

All rankings are descending and use a stable sort, so agencies with equal
values keep the order in which they first appear in the input.
"""

import logging

import pandas as pd

from jobs_eda.common.dataset import AGENCY, NUMBER_OF_POSITIONS
from jobs_eda.salary.normalize import NORMALIZED_SALARY

logger = logging.getLogger(__name__)


POSTING_COUNT = "posting_count"
TOTAL_POSITIONS = "total_positions"
MEDIAN_SALARY = "median_salary"

VALID_SORT_KEYS = {POSTING_COUNT, TOTAL_POSITIONS}


def _group_by_agency(postings: pd.DataFrame):
    # sort=False keeps first-encounter order; dropna=False keeps every row counted
    return postings.groupby(AGENCY, sort=False, dropna=False)


def _rank(series: pd.Series) -> pd.Series:
    return series.sort_values(ascending=False, kind="stable")


def count_by_agency(postings: pd.DataFrame) -> pd.Series:
    """
    Count postings per agency.

    Args:
        postings: Postings frame

    Returns:
        Series indexed by agency with posting counts, ranked descending
    """
    counts = _group_by_agency(postings).size()
    counts.name = POSTING_COUNT
    return _rank(counts)


def sum_positions_by_agency(postings: pd.DataFrame) -> pd.Series:
    """
    Sum ``# Of Positions`` per agency.

    Args:
        postings: Postings frame

    Returns:
        Series indexed by agency with total positions, ranked descending
    """
    totals = _group_by_agency(postings)[NUMBER_OF_POSITIONS].sum().astype("int64")
    totals.name = TOTAL_POSITIONS
    return _rank(totals)


def summarize_agencies(
    postings: pd.DataFrame,
    sort_by: str = POSTING_COUNT,
) -> pd.DataFrame:
    """
    Build one summary row per agency.

    Args:
        postings: Postings frame
        sort_by: Either "posting_count" or "total_positions"

    Returns:
        DataFrame with columns agency, posting_count, total_positions,
        sorted descending (stable) by ``sort_by``

    Raises:
        ValueError: If ``sort_by`` is not a known reduction

    Example:
        >>> summary = summarize_agencies(postings, sort_by="total_positions")
        >>> top_n(summary, 10)
    """
    if sort_by not in VALID_SORT_KEYS:
        raise ValueError(
            f"sort_by must be one of {sorted(VALID_SORT_KEYS)}, got {sort_by!r}"
        )

    grouped = _group_by_agency(postings)
    summary = pd.DataFrame(
        {
            POSTING_COUNT: grouped.size(),
            TOTAL_POSITIONS: grouped[NUMBER_OF_POSITIONS].sum().astype("int64"),
        }
    )
    summary.index.name = "agency"
    summary = summary.reset_index()
    summary = summary.sort_values(sort_by, ascending=False, kind="stable").reset_index(drop=True)

    logger.debug(
        "Agency summary built",
        extra={"agencies": len(summary), "sort_by": sort_by, "rows": len(postings)},
    )
    return summary


def median_salary_by_agency(postings: pd.DataFrame) -> pd.Series:
    """
    Median annualized salary per agency.

    Postings without a normalized salary are excluded.

    Args:
        postings: Frame carrying the ``normalized_salary`` column

    Returns:
        Series indexed by agency, ranked descending

    Raises:
        ValueError: If salaries have not been normalized yet
    """
    if NORMALIZED_SALARY not in postings.columns:
        raise ValueError(
            f"Column '{NORMALIZED_SALARY}' is required; run add_normalized_salary first"
        )

    salaried = postings[postings[NORMALIZED_SALARY].notna()]
    medians = _group_by_agency(salaried)[NORMALIZED_SALARY].median()
    medians.name = MEDIAN_SALARY
    return _rank(medians)


def top_n(ranked, n: int):
    """First ``n`` rows of a ranked Series or DataFrame."""
    return ranked.head(n)


def bottom_n(ranked, n: int):
    """Last ``n`` rows of a ranked Series or DataFrame."""
    return ranked.tail(n)
