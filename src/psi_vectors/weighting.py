"""
psi_vectors/weighting.py - Corpus statistics weights

global_weight(term, field):
    NONE  1
    IDF   log10(1 + N / df)      N = documents, df = document frequency

    Strictly positive and non-increasing in df, so rare neighbours count
    for more than ubiquitous ones.

local_weight(count):
    NONE  1
    LOG   log10(1 + count)
    SQRT  √count

    Non-decreasing and sub-linear in the number of times the same triple
    occurs; positive for count = 1.
"""
from __future__ import annotations

import math

from .index import PredicationIndex
from .types import GlobalWeighting, LocalWeighting


class TermWeighting:
    """Global and local weights computed from a predication index."""

    def __init__(
        self,
        index: PredicationIndex,
        global_weighting: GlobalWeighting = GlobalWeighting.IDF,
        local_weighting: LocalWeighting = LocalWeighting.LOG,
    ):
        self.index = index
        self.global_weighting = GlobalWeighting(global_weighting)
        self.local_weighting = LocalWeighting(local_weighting)

    def global_weight(self, term: str, field: str) -> float:
        """Importance of a concept occurrence in ``field``."""
        if self.global_weighting == GlobalWeighting.NONE:
            return 1.0

        num_docs = max(self.index.num_docs, 1)
        doc_freq = max(self.index.doc_frequency(field, term), 1)
        return math.log10(1.0 + num_docs / doc_freq)

    def local_weight(self, occurrence_count: int) -> float:
        """Weight of a predication seen ``occurrence_count`` times."""
        if occurrence_count < 1:
            raise ValueError(f"occurrence_count must be >= 1, got {occurrence_count}")

        if self.local_weighting == LocalWeighting.LOG:
            return math.log10(1.0 + occurrence_count)
        if self.local_weighting == LocalWeighting.SQRT:
            return math.sqrt(occurrence_count)
        return 1.0
