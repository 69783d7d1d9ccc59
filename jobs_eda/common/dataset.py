"""
Job Postings Dataset Loader

This module reads the NYC Jobs postings table into a pandas DataFrame and
checks that every column the analysis depends on is present.

Key Responsibilities:
- Expose the source column names as constants so stages don't repeat strings
- Fail fast with InputSchemaError when the file or a required column is missing
- Coerce the numeric columns so downstream arithmetic is well defined
"""

import logging
from pathlib import Path
from typing import Union

import pandas as pd

logger = logging.getLogger(__name__)


# Source column names (NYC Jobs export)
AGENCY = "Agency"
BUSINESS_TITLE = "Business Title"
NUMBER_OF_POSITIONS = "# Of Positions"
SALARY_FROM = "Salary Range From"
SALARY_TO = "Salary Range To"
SALARY_FREQUENCY = "Salary Frequency"
MINIMUM_QUALIFICATIONS = "Minimum Qual Requirements"
WORK_LOCATION = "Work Location"

REQUIRED_COLUMNS = (
    AGENCY,
    BUSINESS_TITLE,
    NUMBER_OF_POSITIONS,
    SALARY_FROM,
    SALARY_TO,
    SALARY_FREQUENCY,
    MINIMUM_QUALIFICATIONS,
    WORK_LOCATION,
)

NUMERIC_COLUMNS = (NUMBER_OF_POSITIONS, SALARY_FROM, SALARY_TO)


class InputSchemaError(Exception):
    """Raised when the input table cannot be read or lacks a required column."""
    pass


def validate_columns(df: pd.DataFrame) -> None:
    """
    Ensure all required columns exist in the frame.

    Args:
        df: Postings frame as read from disk

    Raises:
        InputSchemaError: If one or more required columns are absent
    """
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        logger.error(
            "Input table is missing required columns",
            extra={"missing_columns": missing, "available_columns": list(df.columns)},
        )
        raise InputSchemaError(f"Missing required columns: {', '.join(missing)}")


def prepare_postings(df: pd.DataFrame) -> pd.DataFrame:
    """
    Validate and coerce an in-memory postings frame.

    Numeric columns are converted with ``errors='coerce'`` so malformed cells
    become NaN instead of aborting the run; salary computations then treat
    them as missing.

    Args:
        df: Raw postings frame

    Returns:
        A new frame with numeric columns coerced
    """
    validate_columns(df)

    prepared = df.copy()
    for column in NUMERIC_COLUMNS:
        prepared[column] = pd.to_numeric(prepared[column], errors="coerce")

    return prepared


def load_postings(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load the postings CSV.

    Args:
        path: Path to the NYC Jobs CSV export

    Returns:
        Validated postings DataFrame

    Raises:
        InputSchemaError: If the file is missing, unparsable, or lacks columns

    Example:
        >>> postings = load_postings("data/nyc-jobs.csv")
        >>> postings[AGENCY].nunique()
        52
    """
    resolved = Path(path)
    logger.info("Loading postings", extra={"input_path": str(resolved)})

    if not resolved.exists():
        logger.error("Input file not found: %s", resolved)
        raise InputSchemaError(f"Input file not found: {resolved}")

    try:
        raw = pd.read_csv(resolved)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        logger.error("Failed to parse input file %s: %s", resolved, exc)
        raise InputSchemaError(f"Failed to parse input file {resolved}: {exc}") from exc

    postings = prepare_postings(raw)

    logger.info(
        "Postings loaded",
        extra={"rows": len(postings), "columns": len(postings.columns)},
    )
    return postings
