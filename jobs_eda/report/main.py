"""
NYC Jobs Report - Main Entry Point

Runs the whole analysis as one sequential batch pass:

    postings -> salary normalization -> agency rankings -> charts
    postings by salary bracket -> term frequencies (raw, then curated) -> charts
    postings by salary bracket -> geocode cache -> map

Usage:
    python -m jobs_eda.report.main --input data/nyc-jobs.csv [OPTIONS]

Options:
    --input PATH          NYC Jobs CSV export (required)
    --output-dir PATH     Directory for charts, tables and caches (default: output)
    --config PATH         Analysis settings (default: config/analysis.yml)
    --skip-geocoding      Only use already cached coordinates
    --verbose             Enable debug logging

Exit Codes:
    0: Success
    2: Fatal error (missing input column, unreadable file, bad config)
"""

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from jobs_eda.aggregator.agency_summary import (
    POSTING_COUNT,
    TOTAL_POSITIONS,
    bottom_n,
    count_by_agency,
    median_salary_by_agency,
    sum_positions_by_agency,
    summarize_agencies,
    top_n,
)
from jobs_eda.common.dataset import (
    AGENCY,
    BUSINESS_TITLE,
    MINIMUM_QUALIFICATIONS,
    InputSchemaError,
    load_postings,
)
from jobs_eda.geocoder.cache import GeocodeCache, geocode_subset, mappable
from jobs_eda.geocoder.client import Geocoder, GoogleGeocodingClient
from jobs_eda.salary.normalize import add_normalized_salary, split_by_salary, with_salary
from jobs_eda.text_frequency.pipeline import TermFrequencyPipeline

from . import charts
from .config_loader import AnalysisConfig, load_analysis_config

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Exploratory analysis of NYC job postings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--input", type=str, required=True, help="NYC Jobs CSV export")
    parser.add_argument(
        "--output-dir",
        type=str,
        default="output",
        help="Directory for charts, tables and caches",
        dest="output_dir",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to analysis.yml (defaults to JOBS_EDA_CONFIG or config/analysis.yml)",
    )
    parser.add_argument(
        "--skip-geocoding",
        action="store_true",
        help="Do not call the geocoding API; map only cached coordinates",
        dest="skip_geocoding",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_geocoder(config: AnalysisConfig, skip_geocoding: bool = False) -> Optional[Geocoder]:
    """
    Create the geocoding backend, or None for cache-only runs.

    A missing API key is not fatal: the run continues with cached
    coordinates only.
    """
    if skip_geocoding or not config.geocoding.enabled:
        logger.info("Geocoding disabled; using cached coordinates only")
        return None

    if not os.getenv("GOOGLE_MAPS_API_KEY"):
        logger.warning("GOOGLE_MAPS_API_KEY not set; using cached coordinates only")
        return None

    return GoogleGeocodingClient(
        region_suffix=config.geocoding.region_suffix,
        max_retries=config.geocoding.max_retries,
        retry_delay=config.geocoding.retry_delay,
    )


def _agency_outputs(postings, config: AnalysisConfig, output_dir: Path) -> dict[str, Any]:
    n = config.display.top_agencies
    summary = summarize_agencies(postings, sort_by=POSTING_COUNT)
    summary_path = output_dir / "agency_summary.csv"
    summary.to_csv(summary_path, index=False)

    counts = count_by_agency(postings)
    positions = sum_positions_by_agency(postings)
    medians = median_salary_by_agency(postings)

    charts.plot_ranking(top_n(counts, n), f"Top {n} agencies by postings",
                        "Postings", output_dir / "agencies_most_postings.png")
    charts.plot_ranking(bottom_n(counts, n), f"Bottom {n} agencies by postings",
                        "Postings", output_dir / "agencies_fewest_postings.png")
    charts.plot_ranking(top_n(positions, n), f"Top {n} agencies by positions",
                        "Positions", output_dir / "agencies_most_positions.png")
    charts.plot_ranking(bottom_n(positions, n), f"Bottom {n} agencies by positions",
                        "Positions", output_dir / "agencies_fewest_positions.png")
    charts.plot_ranking(top_n(medians, n), f"Top {n} agencies by median salary",
                        "Median annualized salary", output_dir / "agencies_highest_median_salary.png")
    charts.plot_ranking(bottom_n(medians, n), f"Bottom {n} agencies by median salary",
                        "Median annualized salary", output_dir / "agencies_lowest_median_salary.png")

    return {
        "agencies": len(summary),
        "agency_summary_path": str(summary_path),
        "top_agency_by_postings": summary["agency"].iloc[0] if len(summary) else None,
        "top_agency_by_positions": (
            summarize_agencies(postings, sort_by=TOTAL_POSITIONS)["agency"].iloc[0]
            if len(summary) else None
        ),
    }


def _text_outputs(label: str, subset, custom_stopwords: Sequence[str], max_words: int,
                  pipeline: TermFrequencyPipeline, config: AnalysisConfig,
                  output_dir: Path) -> dict[str, Any]:
    raw = pipeline.inspect(subset[MINIMUM_QUALIFICATIONS])
    raw_path = raw.top(config.display.inspect_top_n).to_csv(output_dir / f"{label}_raw_terms.csv")

    curated = pipeline.refine(raw, custom_stopwords)
    curated_path = curated.to_csv(output_dir / f"{label}_terms.csv")

    charts.plot_term_frequencies(
        curated,
        f"Top {config.display.bar_chart_words} qualification words ({label} salary)",
        output_dir / f"{label}_terms_bar.png",
        top_n=config.display.bar_chart_words,
    )
    cloud_path = charts.render_word_cloud(
        curated,
        output_dir / f"{label}_wordcloud.png",
        min_frequency=config.display.wordcloud_min_frequency,
        max_words=max_words,
    )

    return {
        f"{label}_raw_terms_path": str(raw_path),
        f"{label}_terms_path": str(curated_path),
        f"{label}_distinct_words": len(curated),
        f"{label}_wordcloud_path": str(cloud_path) if cloud_path else None,
    }


def _geo_outputs(high, low, config: AnalysisConfig, geocoder: Optional[Geocoder],
                 output_dir: Path) -> dict[str, Any]:
    settings = config.geocoding
    cache = GeocodeCache(output_dir / settings.cache_file, geocoder=geocoder)
    try:
        high_geo = geocode_subset(high, output_dir / settings.high_subset_file, cache, settings.high_color)
        low_geo = geocode_subset(low, output_dir / settings.low_subset_file, cache, settings.low_color)
    finally:
        cache.save()

    map_path = charts.render_location_map(
        [high_geo, low_geo],
        output_dir / "job_locations_map.html",
        hover_columns=[AGENCY, BUSINESS_TITLE, "address"],
    )
    return {
        "geocode_service_calls": cache.service_calls,
        "geocode_cache_hits": cache.hits,
        "geocode_failures": cache.service_failures,
        "high_mappable": len(mappable(high_geo)),
        "low_mappable": len(mappable(low_geo)),
        "map_path": str(map_path) if map_path else None,
    }


def run_report(
    postings,
    config: AnalysisConfig,
    output_dir: Path | str,
    geocoder: Optional[Geocoder] = None,
    geocode: bool = True,
    pipeline: Optional[TermFrequencyPipeline] = None,
) -> dict[str, Any]:
    """
    Run every analysis stage over a loaded postings frame.

    Args:
        postings: Validated postings frame (see load_postings)
        config: Analysis configuration
        output_dir: Directory receiving all artifacts
        geocoder: Geocoding backend; None maps cached coordinates only
        geocode: When False the location stage is skipped entirely
        pipeline: Term frequency pipeline (defaults to standard stopwords)

    Returns:
        Dictionary of run statistics and artifact paths
    """
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)

    normalized = add_normalized_salary(postings)
    salaried = with_salary(normalized)

    stats: dict[str, Any] = {
        "rows_loaded": len(postings),
        "rows_with_salary": len(salaried),
    }

    logger.info("Building agency rankings")
    stats.update(_agency_outputs(normalized, config, output))

    high, low = split_by_salary(salaried, config.salary.high, config.salary.low)
    stats["high_rows"] = len(high)
    stats["low_rows"] = len(low)

    logger.info("Computing qualification term frequencies")
    pipeline = pipeline or TermFrequencyPipeline()
    stats.update(_text_outputs("high", high, config.stopwords.high,
                               config.display.wordcloud_max_words_high, pipeline, config, output))
    stats.update(_text_outputs("low", low, config.stopwords.low,
                               config.display.wordcloud_max_words_low, pipeline, config, output))

    if geocode:
        logger.info("Geocoding work locations")
        stats.update(_geo_outputs(high, low, config, geocoder, output))

    logger.info("Report completed", extra=stats)
    return stats


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the report.

    Returns:
        Exit code (0 = success, 2 = fatal error)
    """
    args = parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = load_analysis_config(args.config)
        postings = load_postings(args.input)
        geocoder = build_geocoder(config, skip_geocoding=args.skip_geocoding)
        stats = run_report(postings, config, args.output_dir, geocoder=geocoder)
    except InputSchemaError as e:
        logger.error(f"Input error: {e}")
        print(f"ERROR: {e}")
        return 2
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        print(f"ERROR: {e}")
        return 2

    print("\n" + "=" * 60)
    print("NYC JOBS REPORT SUMMARY")
    print("=" * 60)
    for key, value in stats.items():
        print(f"{key:32s} {value}")
    print("=" * 60 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
