"""
Salary normalization stage.

Converts hourly, daily and annual salary ranges into one annual-equivalent
value and splits postings into high and low paying subsets.
"""

from .normalize import (
    NORMALIZED_SALARY,
    MissingValueError,
    add_normalized_salary,
    normalize_salary,
    split_by_salary,
    with_salary,
)

__all__ = [
    "NORMALIZED_SALARY",
    "MissingValueError",
    "add_normalized_salary",
    "normalize_salary",
    "split_by_salary",
    "with_salary",
]
