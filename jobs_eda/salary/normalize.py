"""
Salary Normalization Logic

Postings quote pay per hour, per day, or per year. This module converts the
(from, to) range of each posting into one annual-equivalent value so postings
can be compared and bracketed.

Key Concepts:
- Midpoint of the range, rounded to cents
- Daily pay scaled by WORKING_DAYS_PER_YEAR
- Hourly (and any unrecognized frequency) scaled by working days and hours
- Missing range values exclude the posting from salary computations
"""

import logging
from typing import Any, Optional

import pandas as pd

from jobs_eda.common.dataset import SALARY_FREQUENCY, SALARY_FROM, SALARY_TO

logger = logging.getLogger(__name__)


# Fixed policy constants
WORKING_DAYS_PER_YEAR = 261
WORKING_HOURS_PER_DAY = 8.4

ANNUAL = "Annual"
DAILY = "Daily"
HOURLY = "Hourly"

NORMALIZED_SALARY = "normalized_salary"

DEFAULT_HIGH_THRESHOLD = 100000
DEFAULT_LOW_THRESHOLD = 50000


class MissingValueError(Exception):
    """Raised when a posting lacks the salary fields needed for normalization."""
    pass


def _is_missing(value: Any) -> bool:
    return value is None or bool(pd.isna(value))


def normalize_salary(
    salary_from: Optional[float],
    salary_to: Optional[float],
    frequency: Optional[str],
) -> float:
    """
    Convert a salary range to an annual-equivalent value.

    Formulas:
        Annual: round((from + to) / 2, 2)
        Daily:  round((from + to) * 261 / 2, 2)
        other:  round((from + to) * 261 * 8.4 / 2, 2)

    Examples:
        >>> normalize_salary(50000, 70000, "Annual")
        60000.0
        >>> normalize_salary(100, 200, "Daily")
        39150.0

    Args:
        salary_from: Lower bound of the quoted range
        salary_to: Upper bound of the quoted range
        frequency: "Annual", "Daily" or "Hourly" (anything else is hourly)

    Returns:
        Annualized salary rounded to two decimals

    Raises:
        MissingValueError: If either bound is missing
    """
    if _is_missing(salary_from) or _is_missing(salary_to):
        raise MissingValueError(
            f"Salary range is incomplete: from={salary_from!r}, to={salary_to!r}"
        )

    total = salary_from + salary_to
    label = str(frequency).strip() if frequency is not None else ""

    if label == ANNUAL:
        return round(total / 2, 2)
    if label == DAILY:
        return round(total * WORKING_DAYS_PER_YEAR / 2, 2)
    if label != HOURLY:
        logger.debug(
            "Unrecognized salary frequency; applying the hourly formula",
            extra={"salary_frequency": frequency},
        )
    return round(total * WORKING_DAYS_PER_YEAR * WORKING_HOURS_PER_DAY / 2, 2)


def add_normalized_salary(postings: pd.DataFrame) -> pd.DataFrame:
    """
    Append the ``normalized_salary`` column to a copy of the postings.

    Rows with missing salary bounds get NaN and are counted in a warning.

    Args:
        postings: Postings frame with the salary range and frequency columns

    Returns:
        New frame with ``normalized_salary`` appended
    """
    values: list[float] = []
    missing = 0

    for salary_from, salary_to, frequency in zip(
        postings[SALARY_FROM], postings[SALARY_TO], postings[SALARY_FREQUENCY]
    ):
        try:
            values.append(normalize_salary(salary_from, salary_to, frequency))
        except MissingValueError:
            missing += 1
            values.append(float("nan"))

    if missing:
        logger.warning(
            "Postings excluded from salary computations: %d",
            missing,
            extra={"missing_salary_rows": missing, "total_rows": len(postings)},
        )

    result = postings.copy()
    result[NORMALIZED_SALARY] = pd.Series(values, index=postings.index, dtype="float64")
    return result


def with_salary(postings: pd.DataFrame) -> pd.DataFrame:
    """Return only the postings that have a normalized salary."""
    return postings[postings[NORMALIZED_SALARY].notna()]


def salary_bracket(
    value: float,
    high_threshold: float = DEFAULT_HIGH_THRESHOLD,
    low_threshold: float = DEFAULT_LOW_THRESHOLD,
) -> Optional[str]:
    """
    Classify an annualized salary.

    Returns:
        "high" when value >= high_threshold, "low" when value <= low_threshold,
        "mid" in between, None when the value is missing
    """
    if _is_missing(value):
        return None
    if value >= high_threshold:
        return "high"
    if value <= low_threshold:
        return "low"
    return "mid"


def split_by_salary(
    postings: pd.DataFrame,
    high_threshold: float = DEFAULT_HIGH_THRESHOLD,
    low_threshold: float = DEFAULT_LOW_THRESHOLD,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split postings into the high and low paying subsets.

    Postings strictly between the thresholds belong to neither subset.

    Args:
        postings: Frame that already carries ``normalized_salary``
        high_threshold: Inclusive lower bound of the high subset
        low_threshold: Inclusive upper bound of the low subset

    Returns:
        Tuple (high_postings, low_postings)

    Raises:
        ValueError: If the thresholds overlap
    """
    if low_threshold >= high_threshold:
        raise ValueError(
            f"low_threshold ({low_threshold}) must be below high_threshold ({high_threshold})"
        )

    brackets = postings[NORMALIZED_SALARY].apply(
        salary_bracket, args=(high_threshold, low_threshold)
    )
    high = postings[brackets == "high"]
    low = postings[brackets == "low"]

    logger.info(
        "Postings split by salary",
        extra={
            "high_rows": len(high),
            "low_rows": len(low),
            "mid_rows": int((brackets == "mid").sum()),
            "high_threshold": high_threshold,
            "low_threshold": low_threshold,
        },
    )
    return high, low
