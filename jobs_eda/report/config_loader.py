"""
Configuration Loader for the analysis report

This module loads the analysis settings from config/analysis.yml: salary
thresholds, display parameters, geocoding options and the hand-curated
stopword lists used by the second text frequency pass.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class SalaryThresholds:
    """Bounds of the high and low paying subsets (annualized)."""

    high: float = 100000
    low: float = 50000

    def validate(self) -> None:
        if self.low >= self.high:
            raise ValueError(
                f"salary.low ({self.low}) must be below salary.high ({self.high})"
            )


@dataclass
class DisplaySettings:
    """Rendering parameters; they never change the computed frequencies."""

    top_agencies: int = 10
    inspect_top_n: int = 50
    bar_chart_words: int = 50
    wordcloud_min_frequency: int = 100
    wordcloud_max_words_high: int = 100
    wordcloud_max_words_low: int = 200


@dataclass
class GeocodingSettings:
    """Geocoding and cache file options."""

    enabled: bool = True
    region_suffix: str = ", New York, NY"
    cache_file: str = "geocode_cache.csv"
    high_subset_file: str = "high_salary_geocoded.csv"
    low_subset_file: str = "low_salary_geocoded.csv"
    high_color: str = "red"
    low_color: str = "blue"
    max_retries: int = 2
    retry_delay: float = 1.0


@dataclass
class CustomStopwords:
    """Hand-picked stopwords per corpus, chosen after reading the raw tables."""

    high: list[str] = field(default_factory=list)
    low: list[str] = field(default_factory=list)


@dataclass
class AnalysisConfig:
    """Complete analysis configuration."""

    salary: SalaryThresholds = field(default_factory=SalaryThresholds)
    display: DisplaySettings = field(default_factory=DisplaySettings)
    geocoding: GeocodingSettings = field(default_factory=GeocodingSettings)
    stopwords: CustomStopwords = field(default_factory=CustomStopwords)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "AnalysisConfig":
        """Create AnalysisConfig from dictionary, using defaults for absent keys."""
        salary_dict = config_dict.get("salary") or {}
        salary = SalaryThresholds(
            high=float(salary_dict.get("high", 100000)),
            low=float(salary_dict.get("low", 50000)),
        )
        salary.validate()

        display_dict = config_dict.get("display") or {}
        defaults = DisplaySettings()
        display = DisplaySettings(
            top_agencies=int(display_dict.get("top_agencies", defaults.top_agencies)),
            inspect_top_n=int(display_dict.get("inspect_top_n", defaults.inspect_top_n)),
            bar_chart_words=int(display_dict.get("bar_chart_words", defaults.bar_chart_words)),
            wordcloud_min_frequency=int(
                display_dict.get("wordcloud_min_frequency", defaults.wordcloud_min_frequency)
            ),
            wordcloud_max_words_high=int(
                display_dict.get("wordcloud_max_words_high", defaults.wordcloud_max_words_high)
            ),
            wordcloud_max_words_low=int(
                display_dict.get("wordcloud_max_words_low", defaults.wordcloud_max_words_low)
            ),
        )

        geocoding_dict = config_dict.get("geocoding") or {}
        known = GeocodingSettings.__dataclass_fields__
        unknown = sorted(set(geocoding_dict) - set(known))
        if unknown:
            logger.warning("Ignoring unknown geocoding settings: %s", ", ".join(unknown))
        geocoding = GeocodingSettings(
            **{key: value for key, value in geocoding_dict.items() if key in known}
        )

        stopwords_dict = config_dict.get("stopwords") or {}
        stopwords = CustomStopwords(
            high=[str(word) for word in stopwords_dict.get("high") or []],
            low=[str(word) for word in stopwords_dict.get("low") or []],
        )

        return cls(salary=salary, display=display, geocoding=geocoding, stopwords=stopwords)


def default_config_path() -> Path:
    """config/analysis.yml relative to the project root."""
    return Path(__file__).resolve().parent.parent.parent / "config" / "analysis.yml"


def load_analysis_config(config_path: Optional[str] = None) -> AnalysisConfig:
    """
    Load analysis configuration from YAML file.

    Args:
        config_path: Path to analysis.yml. If None, uses JOBS_EDA_CONFIG or
            the default location.

    Returns:
        AnalysisConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid

    Example:
        >>> config = load_analysis_config('config/analysis.yml')
        >>> config.salary.high
        100000.0
    """
    if config_path is None:
        config_path = os.getenv("JOBS_EDA_CONFIG") or str(default_config_path())

    logger.info("Loading analysis configuration", extra={"config_path": config_path})

    try:
        with open(config_path, encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)

        if not config_dict:
            logger.warning("Empty configuration file, using defaults")
            config_dict = {}

        config = AnalysisConfig.from_dict(config_dict)

        logger.info(
            "Analysis configuration loaded",
            extra={
                "high_threshold": config.salary.high,
                "low_threshold": config.salary.low,
                "custom_stopwords_high": len(config.stopwords.high),
                "custom_stopwords_low": len(config.stopwords.low),
                "geocoding_enabled": config.geocoding.enabled,
            },
        )
        return config

    except FileNotFoundError:
        logger.error(f"Configuration file not found: {config_path}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except (TypeError, AttributeError) as e:
        logger.error(f"Failed to load configuration: {e}")
        raise ValueError(f"Failed to load configuration: {e}") from e
