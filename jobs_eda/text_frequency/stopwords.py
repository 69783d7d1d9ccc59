"""
Stopword sets for the text frequency pipeline.

The standard English list is the one bundled with ``wordcloud``, so no corpus
download is needed at runtime. Entries are passed through the same case
folding and punctuation stripping as the text itself ("don't" -> "dont"),
otherwise contractions would never match a cleaned token.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache

from wordcloud import STOPWORDS

PUNCTUATION_PATTERN = re.compile(r"[^\w\s]|_")
DIGIT_PATTERN = re.compile(r"\d")


def normalize_word(word: str) -> str:
    """Lowercase a word and strip punctuation and digits from it."""
    cleaned = PUNCTUATION_PATTERN.sub("", word.lower())
    return DIGIT_PATTERN.sub("", cleaned).strip()


def normalize_stopwords(words: Iterable[str] | None) -> frozenset[str]:
    """
    Normalize an arbitrary stopword collection.

    Args:
        words: Stopwords as written by a person or shipped by a library

    Returns:
        Frozen set of cleaned, non-empty words
    """
    if not words:
        return frozenset()
    cleaned = (normalize_word(word) for word in words if isinstance(word, str))
    return frozenset(word for word in cleaned if word)


@lru_cache(maxsize=1)
def standard_stopwords() -> frozenset[str]:
    """Standard English stopword list (wordcloud's bundled set), normalized."""
    return normalize_stopwords(STOPWORDS)
