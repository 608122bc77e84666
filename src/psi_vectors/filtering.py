"""
psi_vectors/filtering.py - Vocabulary term filter

Decides whether a term from the index is eligible for the vocabulary, using
its length, non-alphabetic character count, stopword membership and corpus
frequency.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from .index import PredicationIndex

logger = logging.getLogger(__name__)


def load_stopwords(path: str | Path) -> frozenset[str]:
    """Read a stoplist: one word per line, blank lines and ``#`` comments ignored."""
    words = set()
    with open(path, encoding="utf-8") as f:
        for line in f:
            word = line.strip()
            if word and not word.startswith("#"):
                words.add(word)
    logger.info(f"Loaded {len(words)} stopwords from {path}")
    return frozenset(words)


class TermFilter:
    """Term eligibility checks backed by index statistics.

    Example:
        term_filter = TermFilter(index, stopwords={"PROCESS_OF"})
        term_filter.is_eligible("aspirin", ["subject"], min_frequency=2)
    """

    def __init__(self, index: PredicationIndex, stopwords: Iterable[str] = ()):
        self.index = index
        self.stopwords = frozenset(stopwords)

    def frequency(self, term: str, fields: Sequence[str]) -> int:
        """Total corpus frequency of ``term`` summed over ``fields``."""
        return sum(self.index.term_frequency(field, term) for field in fields)

    def is_eligible(
        self,
        term: str,
        fields: Sequence[str],
        min_frequency: int = 0,
        max_frequency: int | None = None,
        max_non_alphabet_chars: int | None = None,
        min_term_length: int = 0,
    ) -> bool:
        """Check a term against the configured bounds.

        Args:
            term: Candidate term
            fields: Fields whose frequencies are summed for the frequency bounds
            min_frequency: Smallest accepted frequency
            max_frequency: Largest accepted frequency (None = unbounded)
            max_non_alphabet_chars: Most non-letter characters allowed (None = unbounded)
            min_term_length: Shortest accepted term

        Returns:
            True if the term passes every check
        """
        if len(term) < min_term_length:
            return False

        if max_non_alphabet_chars is not None:
            non_alpha = sum(1 for ch in term if not ch.isalpha())
            if non_alpha > max_non_alphabet_chars:
                return False

        if term.strip() in self.stopwords:
            return False

        freq = self.frequency(term, fields)
        if freq < min_frequency:
            return False
        if max_frequency is not None and freq > max_frequency:
            return False

        return True
