"""
Pytest configuration and shared fixtures

Fixtures build small postings frames in memory so no test depends on the
real NYC Jobs export or on network access.
"""

import pandas as pd
import pytest

from jobs_eda.common.dataset import (
    AGENCY,
    BUSINESS_TITLE,
    MINIMUM_QUALIFICATIONS,
    NUMBER_OF_POSITIONS,
    SALARY_FREQUENCY,
    SALARY_FROM,
    SALARY_TO,
    WORK_LOCATION,
)


def make_postings(rows: list[dict]) -> pd.DataFrame:
    """Build a postings frame, filling unspecified columns with defaults."""
    defaults = {
        AGENCY: "DEPT OF PARKS & RECREATION",
        BUSINESS_TITLE: "Analyst",
        NUMBER_OF_POSITIONS: 1,
        SALARY_FROM: 50000,
        SALARY_TO: 60000,
        SALARY_FREQUENCY: "Annual",
        MINIMUM_QUALIFICATIONS: "",
        WORK_LOCATION: "100 Gold St.",
    }
    return pd.DataFrame([{**defaults, **row} for row in rows])


@pytest.fixture(scope="function")
def scenario_postings() -> pd.DataFrame:
    """
    Three postings with a known outcome.

    Normalized salaries are 60000, 70000 and 39150; agency A has two
    postings and agency B one.
    """
    return make_postings(
        [
            {AGENCY: "A", SALARY_FROM: 50000, SALARY_TO: 70000, SALARY_FREQUENCY: "Annual"},
            {AGENCY: "A", SALARY_FROM: 60000, SALARY_TO: 80000, SALARY_FREQUENCY: "Annual"},
            {AGENCY: "B", SALARY_FROM: 100, SALARY_TO: 200, SALARY_FREQUENCY: "Daily"},
        ]
    )


@pytest.fixture(scope="function")
def sample_postings() -> pd.DataFrame:
    """
    A mixed batch of postings across agencies, frequencies and salary brackets.
    """
    return make_postings(
        [
            {
                AGENCY: "DEPT OF ENVIRONMENT PROTECTION",
                BUSINESS_TITLE: "Senior Engineer",
                NUMBER_OF_POSITIONS: 3,
                SALARY_FROM: 110000,
                SALARY_TO: 140000,
                MINIMUM_QUALIFICATIONS: "Professional engineering license and 4 years of engineering experience.",
                WORK_LOCATION: "59-17 Junction Blvd",
            },
            {
                AGENCY: "DEPT OF PARKS & RECREATION",
                BUSINESS_TITLE: "Seasonal Aide",
                NUMBER_OF_POSITIONS: 20,
                SALARY_FROM: 15,
                SALARY_TO: 16,
                SALARY_FREQUENCY: "Hourly",
                MINIMUM_QUALIFICATIONS: "High school diploma; ability to lift heavy equipment.",
                WORK_LOCATION: "830 Fifth Ave",
            },
            {
                AGENCY: "DEPT OF ENVIRONMENT PROTECTION",
                BUSINESS_TITLE: "Data Architect",
                NUMBER_OF_POSITIONS: 1,
                SALARY_FROM: 120000,
                SALARY_TO: 150000,
                MINIMUM_QUALIFICATIONS: "Graduate degree and engineering license.",
                WORK_LOCATION: "59-17 Junction Blvd",
            },
            {
                AGENCY: "HRA/DEPT OF SOCIAL SERVICES",
                BUSINESS_TITLE: "Caseworker",
                NUMBER_OF_POSITIONS: 5,
                SALARY_FROM: 150,
                SALARY_TO: 170,
                SALARY_FREQUENCY: "Daily",
                MINIMUM_QUALIFICATIONS: "High school diploma and valid driver license.",
                WORK_LOCATION: "150 Greenwich St",
            },
            {
                AGENCY: "HRA/DEPT OF SOCIAL SERVICES",
                BUSINESS_TITLE: "Program Manager",
                NUMBER_OF_POSITIONS: 1,
                SALARY_FROM: 70000,
                SALARY_TO: 80000,
                MINIMUM_QUALIFICATIONS: None,
                WORK_LOCATION: None,
            },
            {
                AGENCY: "DEPT OF PARKS & RECREATION",
                BUSINESS_TITLE: "Clerk",
                NUMBER_OF_POSITIONS: 2,
                SALARY_FROM: None,
                SALARY_TO: None,
                MINIMUM_QUALIFICATIONS: "Typing skills.",
                WORK_LOCATION: "830 Fifth Ave",
            },
        ]
    )


def pytest_configure(config):
    """
    Register custom pytest markers.

    - pytest -m unit        (run only unit tests)
    - pytest -m "not slow"  (skip slow tests)
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (isolated, fast)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (>1 second)"
    )
