"""
Chart and map rendering.

Static charts are drawn with matplotlib/seaborn on the non-interactive Agg
backend and saved as PNG; word clouds use ``wordcloud``; the location map is
an interactive plotly HTML page.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import plotly.express as px  # noqa: E402
import seaborn as sns  # noqa: E402
from wordcloud import WordCloud  # noqa: E402

from jobs_eda.geocoder.cache import COLOR, LATITUDE, LONGITUDE, mappable  # noqa: E402
from jobs_eda.text_frequency.pipeline import FrequencyTable  # noqa: E402

logger = logging.getLogger(__name__)

NYC_CENTER = {"lat": 40.7128, "lon": -74.0060}


def _prepare_path(path: Path | str) -> Path:
    resolved = Path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved


def _barh(labels: Sequence[str], values: Sequence[float], title: str, xlabel: str,
          path: Path | str, color: str) -> Optional[Path]:
    frame = pd.DataFrame({"label": [str(label) for label in labels], "value": list(values)})
    if frame.empty:
        logger.warning("Nothing to plot; skipping chart", extra={"chart_path": str(path)})
        return None
    resolved = _prepare_path(path)

    height = max(4, 0.35 * len(frame) + 1.5)
    fig, ax = plt.subplots(figsize=(10, height))
    sns.barplot(data=frame, x="value", y="label", color=color, ax=ax)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.set_xlabel(xlabel)
    ax.set_ylabel("")
    ax.grid(axis="x", linestyle="--", alpha=0.3)
    for container in ax.containers:
        ax.bar_label(container, padding=3, fmt="%g")
    fig.tight_layout()
    fig.savefig(resolved)
    plt.close(fig)

    logger.info("Chart saved", extra={"chart_path": str(resolved), "bars": len(frame)})
    return resolved


def plot_ranking(
    ranking: pd.Series,
    title: str,
    xlabel: str,
    path: Path | str,
    color: str = "#69b3a2",
) -> Optional[Path]:
    """
    Horizontal bar chart of a ranked agency Series (index = agency).

    Args:
        ranking: Ranked values, highest first
        title: Chart title
        xlabel: Value axis label
        path: Output PNG path

    Returns:
        Path of the written image, or None for an empty ranking
    """
    return _barh(list(ranking.index), list(ranking.values), title, xlabel, path, color)


def plot_term_frequencies(
    table: FrequencyTable,
    title: str,
    path: Path | str,
    top_n: int = 50,
    color: str = "#4DA6FF",
) -> Optional[Path]:
    """Bar chart of the ``top_n`` most frequent words."""
    top = table.top(top_n)
    return _barh(
        [entry.word for entry in top],
        [entry.frequency for entry in top],
        title,
        "Frequency",
        path,
        color,
    )


def render_word_cloud(
    table: FrequencyTable,
    path: Path | str,
    min_frequency: int = 100,
    max_words: int = 100,
    colormap: str = "viridis",
) -> Optional[Path]:
    """
    Word cloud of words occurring at least ``min_frequency`` times.

    Returns:
        Path of the written image, or None when no word passes the floor
    """
    frequencies = table.with_min_frequency(min_frequency).as_dict()
    if not frequencies:
        logger.warning(
            "No words meet the word cloud frequency floor; skipping",
            extra={"min_frequency": min_frequency, "chart_path": str(path)},
        )
        return None

    resolved = _prepare_path(path)
    cloud = WordCloud(
        width=1200,
        height=800,
        background_color="white",
        max_words=max_words,
        colormap=colormap,
        random_state=42,
    ).generate_from_frequencies(frequencies)
    cloud.to_file(str(resolved))

    logger.info(
        "Word cloud saved",
        extra={"chart_path": str(resolved), "words": min(len(frequencies), max_words)},
    )
    return resolved


def render_location_map(
    subsets: Sequence[pd.DataFrame],
    path: Path | str,
    title: str = "Job locations by salary bracket",
    hover_columns: Optional[Sequence[str]] = None,
) -> Optional[Path]:
    """
    Interactive map of geocoded postings.

    Each subset must carry latitude, longitude and color columns; rows without
    coordinates are left out of the map.

    Returns:
        Path of the written HTML page, or None when nothing is mappable
    """
    points = [mappable(subset) for subset in subsets]
    points = [frame for frame in points if not frame.empty]
    if not points:
        logger.warning("No geocoded rows to map; skipping", extra={"map_path": str(path)})
        return None

    combined = pd.concat(points, ignore_index=True)
    hover = [column for column in (hover_columns or []) if column in combined.columns]

    fig = px.scatter_map(
        combined,
        lat=LATITUDE,
        lon=LONGITUDE,
        color=COLOR,
        color_discrete_map="identity",
        hover_data=hover or None,
        zoom=10,
        center=NYC_CENTER,
        map_style="open-street-map",
        title=title,
    )
    resolved = _prepare_path(path)
    fig.write_html(str(resolved), include_plotlyjs="cdn")

    logger.info("Map saved", extra={"map_path": str(resolved), "points": len(combined)})
    return resolved
