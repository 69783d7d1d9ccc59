"""
Term frequency pipeline for free-text qualification fields.

Cleaning runs these steps in order, each one idempotent:

1. Collapse repeated whitespace
2. Lowercase
3. Strip punctuation
4. Strip digits
5. Remove standard English stopwords
6. Remove an optional additional stopword list

Tokens are then counted across the whole corpus and ranked by descending
frequency; ties keep the order in which the word first appeared.

Stopword curation happens in two explicit stages. ``inspect`` produces the
raw table (standard stopwords only) so a person can read it and pick
domain-specific noise words, then ``refine`` drops that hand-picked list.
"""
from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from .stopwords import (
    DIGIT_PATTERN,
    PUNCTUATION_PATTERN,
    normalize_stopwords,
    standard_stopwords,
)

logger = logging.getLogger(__name__)

WHITESPACE_PATTERN = re.compile(r"\s+")


@dataclass(frozen=True)
class TermFrequencyEntry:
    """One distinct normalized word and how often it occurs in a corpus."""

    word: str
    frequency: int


class FrequencyTable(Sequence[TermFrequencyEntry]):
    """
    Ranked, immutable term frequency table.

    Entries are ordered by descending frequency, ties by first occurrence.
    """

    def __init__(self, entries: Iterable[TermFrequencyEntry] = ()):
        self._entries = tuple(entries)

    def __getitem__(self, index):  # type: ignore[override]
        if isinstance(index, slice):
            return FrequencyTable(self._entries[index])
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TermFrequencyEntry]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FrequencyTable):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        preview = ", ".join(f"{e.word}={e.frequency}" for e in self._entries[:5])
        return f"FrequencyTable({len(self)} words: {preview})"

    @classmethod
    def from_counter(cls, counts: Counter) -> "FrequencyTable":
        # sorted() is stable and Counter keeps insertion order, so ties
        # stay in first-occurrence order
        ranked = sorted(counts.items(), key=lambda item: -item[1])
        return cls(TermFrequencyEntry(word, count) for word, count in ranked)

    def top(self, n: int) -> "FrequencyTable":
        """First ``n`` entries."""
        return self[:n]

    def with_min_frequency(self, minimum: int) -> "FrequencyTable":
        """Entries occurring at least ``minimum`` times."""
        return FrequencyTable(e for e in self._entries if e.frequency >= minimum)

    def without(self, words: Iterable[str]) -> "FrequencyTable":
        """Drop the given words, keeping the ranking of everything else."""
        excluded = normalize_stopwords(words)
        return FrequencyTable(e for e in self._entries if e.word not in excluded)

    def as_dict(self) -> dict[str, int]:
        return {e.word: e.frequency for e in self._entries}

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [(e.word, e.frequency) for e in self._entries],
            columns=["word", "frequency"],
        )

    def to_csv(self, path: Path | str) -> Path:
        """Write the table as a two-column CSV and return the path."""
        resolved = Path(path)
        resolved.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame().to_csv(resolved, index=False)
        return resolved


def clean_text(
    text: Any,
    stopwords: Optional[Iterable[str]] = None,
    extra_stopwords: Optional[Iterable[str]] = None,
) -> str:
    """
    Normalize one document.

    Args:
        text: Free text; None, NaN and other non-strings count as empty
        stopwords: Standard stopword set (defaults to the bundled English list)
        extra_stopwords: Additional words removed after the standard set

    Returns:
        Space separated cleaned tokens, or "" when nothing survives

    Examples:
        >>> clean_text("Must have 5 years' experience!", stopwords={"have"})
        'must years experience'
    """
    if not isinstance(text, str) or not text:
        return ""

    standard = normalize_stopwords(stopwords) if stopwords is not None else standard_stopwords()
    return _clean(text, standard, normalize_stopwords(extra_stopwords))


def _clean(text: str, standard: frozenset[str], extra: frozenset[str]) -> str:
    cleaned = WHITESPACE_PATTERN.sub(" ", text).strip()
    cleaned = cleaned.lower()
    cleaned = PUNCTUATION_PATTERN.sub("", cleaned)
    cleaned = DIGIT_PATTERN.sub("", cleaned)

    tokens = [token for token in cleaned.split() if token not in standard]
    if extra:
        tokens = [token for token in tokens if token not in extra]

    return " ".join(tokens)


def tokenize(text: str) -> list[str]:
    """Split cleaned text on whitespace."""
    return text.split()


def build_frequency_table(
    texts: Iterable[Any],
    stopwords: Optional[Iterable[str]] = None,
    extra_stopwords: Optional[Iterable[str]] = None,
) -> FrequencyTable:
    """
    Count cleaned tokens across a corpus.

    Args:
        texts: Documents (missing values contribute nothing)
        stopwords: Standard stopword set (defaults to the bundled English list)
        extra_stopwords: Additional words to remove

    Returns:
        FrequencyTable ranked by descending frequency
    """
    standard = normalize_stopwords(stopwords) if stopwords is not None else standard_stopwords()
    extra = normalize_stopwords(extra_stopwords)

    counts: Counter = Counter()
    documents = 0
    for text in texts:
        documents += 1
        if isinstance(text, str) and text:
            counts.update(tokenize(_clean(text, standard, extra)))

    table = FrequencyTable.from_counter(counts)
    logger.debug(
        "Frequency table built",
        extra={"documents": documents, "distinct_words": len(table)},
    )
    return table


class TermFrequencyPipeline:
    """
    Two-stage term frequency analysis over one corpus.

    Example:
        >>> pipeline = TermFrequencyPipeline()
        >>> raw = pipeline.inspect(high_paying["Minimum Qual Requirements"])
        >>> raw.top(50).to_csv("output/high_raw_terms.csv")   # read, curate
        >>> curated = pipeline.refine(raw, ["experience", "years", "degree"])
    """

    def __init__(self, stopwords: Optional[Iterable[str]] = None):
        """
        Args:
            stopwords: Standard stopword set. Defaults to the bundled English list.
        """
        self.stopwords = (
            normalize_stopwords(stopwords) if stopwords is not None else standard_stopwords()
        )

    def inspect(self, texts: Iterable[Any]) -> FrequencyTable:
        """First stage: frequencies with only the standard stopwords removed."""
        return build_frequency_table(texts, self.stopwords)

    def refine(
        self,
        raw_table: FrequencyTable,
        custom_stopwords: Optional[Iterable[str]] = None,
    ) -> FrequencyTable:
        """
        Second stage: drop a hand-curated stopword list from the raw table.

        Removing words from counted tokens gives the same table as cleaning
        the corpus again with ``custom_stopwords`` as extra stopwords.
        """
        custom = normalize_stopwords(custom_stopwords)
        refined = raw_table.without(custom)
        logger.info(
            "Custom stopwords applied",
            extra={
                "custom_stopwords": len(custom),
                "words_before": len(raw_table),
                "words_after": len(refined),
            },
        )
        return refined
