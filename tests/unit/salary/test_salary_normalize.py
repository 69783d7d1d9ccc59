"""
Unit Tests for Salary Normalization

Test Organization:
- TestNormalizeSalary: formulas per salary frequency and missing values
- TestAddNormalizedSalary: the DataFrame-level column and row exclusion
- TestSalaryBrackets: high/low subset split and threshold edges
"""

import math

import pandas as pd
import pytest

from jobs_eda.common.dataset import SALARY_FREQUENCY, SALARY_FROM, SALARY_TO
from jobs_eda.salary.normalize import (
    HOURLY,
    NORMALIZED_SALARY,
    WORKING_DAYS_PER_YEAR,
    WORKING_HOURS_PER_DAY,
    MissingValueError,
    add_normalized_salary,
    normalize_salary,
    salary_bracket,
    split_by_salary,
    with_salary,
)


class TestNormalizeSalary:
    """Tests for the per-posting formula"""

    @pytest.mark.parametrize("salary_from,salary_to", [
        (50000, 70000),
        (45000.55, 45000.56),
        (0, 0),
        (123456.789, 234567.891),
    ])
    def test_annual_is_rounded_midpoint(self, salary_from, salary_to):
        expected = round((salary_from + salary_to) / 2, 2)
        assert normalize_salary(salary_from, salary_to, "Annual") == expected

    @pytest.mark.parametrize("salary_from,salary_to", [
        (100, 200),
        (250.5, 300.25),
    ])
    def test_daily_scales_by_working_days(self, salary_from, salary_to):
        expected = round((salary_from + salary_to) * 261 / 2, 2)
        assert normalize_salary(salary_from, salary_to, "Daily") == expected

    @pytest.mark.parametrize("frequency", ["Hourly", "Weekly", "", None])
    def test_hourly_and_unknown_scale_by_days_and_hours(self, frequency):
        expected = round((15.5 + 20.25) * 261 * 8.4 / 2, 2)
        assert normalize_salary(15.5, 20.25, frequency) == expected

    def test_policy_constants(self):
        assert WORKING_DAYS_PER_YEAR == 261
        assert WORKING_HOURS_PER_DAY == 8.4

    def test_frequency_whitespace_is_ignored(self):
        assert normalize_salary(100, 200, " Daily ") == 39150.0

    def test_lowercase_frequency_is_treated_as_hourly(self):
        """Only the exact labels select the annual/daily formulas"""
        assert normalize_salary(10, 10, "annual") == round(20 * 261 * 8.4 / 2, 2)

    def test_unrecognized_frequency_is_logged(self, caplog):
        with caplog.at_level("DEBUG", logger="jobs_eda.salary.normalize"):
            normalize_salary(10, 10, "Weekly")
            normalize_salary(10, 10, HOURLY)

        flagged = [r.salary_frequency for r in caplog.records if hasattr(r, "salary_frequency")]
        assert flagged == ["Weekly"]

    @pytest.mark.parametrize("salary_from,salary_to", [
        (None, 100),
        (100, None),
        (float("nan"), 100),
        (100, pd.NA),
    ])
    def test_missing_bound_raises(self, salary_from, salary_to):
        with pytest.raises(MissingValueError, match="incomplete"):
            normalize_salary(salary_from, salary_to, "Annual")

    def test_negative_values_are_not_validated(self):
        assert normalize_salary(-100, -200, "Annual") == -150.0


class TestAddNormalizedSalary:
    """Tests for the DataFrame-level normalization"""

    def test_scenario_values(self, scenario_postings):
        result = add_normalized_salary(scenario_postings)
        assert list(result[NORMALIZED_SALARY]) == [60000.0, 70000.0, 39150.0]

    def test_does_not_mutate_input(self, scenario_postings):
        original_columns = list(scenario_postings.columns)
        add_normalized_salary(scenario_postings)
        assert list(scenario_postings.columns) == original_columns
        assert NORMALIZED_SALARY not in scenario_postings.columns

    def test_missing_salary_rows_are_nan_and_excluded(self, sample_postings):
        result = add_normalized_salary(sample_postings)

        assert math.isnan(result[NORMALIZED_SALARY].iloc[5])
        salaried = with_salary(result)
        assert len(salaried) == len(sample_postings) - 1
        assert salaried[NORMALIZED_SALARY].notna().all()

    def test_matches_row_formula(self, sample_postings):
        result = with_salary(add_normalized_salary(sample_postings))
        for _, row in result.iterrows():
            assert row[NORMALIZED_SALARY] == normalize_salary(
                row[SALARY_FROM], row[SALARY_TO], row[SALARY_FREQUENCY]
            )

    def test_missing_rows_are_logged(self, sample_postings, caplog):
        with caplog.at_level("WARNING"):
            add_normalized_salary(sample_postings)
        assert "excluded from salary computations: 1" in caplog.text

    def test_preserves_index(self):
        frame = pd.DataFrame(
            {SALARY_FROM: [10.0, 20.0], SALARY_TO: [10.0, 20.0], SALARY_FREQUENCY: ["Annual", "Annual"]},
            index=[7, 3],
        )
        result = add_normalized_salary(frame)
        assert result.loc[7, NORMALIZED_SALARY] == 10.0
        assert result.loc[3, NORMALIZED_SALARY] == 20.0


class TestSalaryBrackets:
    """Tests for high/low salary classification"""

    @pytest.mark.parametrize("value,expected", [
        (100000, "high"),
        (250000.5, "high"),
        (50000, "low"),
        (12000, "low"),
        (50000.01, "mid"),
        (99999.99, "mid"),
        (float("nan"), None),
    ])
    def test_salary_bracket_edges(self, value, expected):
        assert salary_bracket(value, 100000, 50000) == expected

    def test_split_by_salary(self, sample_postings):
        salaried = with_salary(add_normalized_salary(sample_postings))
        high, low = split_by_salary(salaried, 100000, 50000)

        assert list(high["Business Title"]) == ["Senior Engineer", "Data Architect"]
        assert list(low["Business Title"]) == ["Seasonal Aide", "Caseworker"]
        # the 75000 posting sits between the thresholds
        assert "Program Manager" not in set(high["Business Title"]) | set(low["Business Title"])

    def test_split_rejects_overlapping_thresholds(self, scenario_postings):
        salaried = add_normalized_salary(scenario_postings)
        with pytest.raises(ValueError, match="must be below"):
            split_by_salary(salaried, high_threshold=50000, low_threshold=60000)
