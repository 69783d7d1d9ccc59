"""
Text frequency stage.

Cleans free-text qualification requirements and ranks word frequencies,
with a raw inspection pass followed by a curated stopword pass.
"""

from .pipeline import (
    FrequencyTable,
    TermFrequencyEntry,
    TermFrequencyPipeline,
    build_frequency_table,
    clean_text,
)
from .stopwords import standard_stopwords

__all__ = [
    "FrequencyTable",
    "TermFrequencyEntry",
    "TermFrequencyPipeline",
    "build_frequency_table",
    "clean_text",
    "standard_stopwords",
]
