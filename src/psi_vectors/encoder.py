"""
psi_vectors/encoder.py - Predication-based Semantic Indexing (PSI)

Builds semantic vectors for concepts from a predication index in one pass:

    A. Concept vocabulary: every eligible subject/object term gets one
       elemental vector and one zero semantic accumulator.
    B. Predicate vocabulary: every eligible predicate gets a forward
       elemental vector (key = label) and an inverse elemental vector
       (key = label + "-INV").
    C. Accumulation: for each distinct predication (s, p, o)

           S(s) += w_p · w_o · (E(o) ⊗ P(p))
           S(o) += w_p · w_s · (E(s) ⊗ P(p-INV))

       where E are elemental concept vectors, P elemental predicate vectors,
       w_s / w_o global weights of subject / object and w_p the local weight
       of the predication's occurrence count.
    D. Finalization: every S is normalized once.

The inverse vector is an independent random vector that marks the
object-to-subject direction. It is not computed from the forward vector.

Usage:
    from psi_vectors.config import load_settings
    from psi_vectors.encoder import PredicationEncoder
    from psi_vectors.index import PredicationIndex

    index = PredicationIndex.load("semmed.index.json")
    encoder = PredicationEncoder(index, load_settings(dimensions=1024))
    model = encoder.train()
    print(model.stats.summary())
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .config import BuildSettings
from .exceptions import CorpusStructureError
from .filtering import TermFilter, load_stopwords
from .index import (
    OBJECT_FIELD,
    PREDICATE_FIELD,
    PREDICATION_FIELD,
    SUBJECT_FIELD,
    PredicationIndex,
)
from .operators import bind
from .stores import ElementalVectorStore, SemanticVectorStore
from .weighting import TermWeighting

logger = logging.getLogger(__name__)

ITEM_FIELDS = (SUBJECT_FIELD, OBJECT_FIELD)

INVERSE_SUFFIX = "-INV"

# Skipped triples kept in EncodingStats for diagnostics
MAX_SKIPPED_SAMPLE = 100


def inverse_key(predicate: str) -> str:
    """Key of the inverse-direction vector for ``predicate``.

    Keys share one namespace, so a corpus holding both ``X`` and ``X-INV``
    as predicate labels maps the inverse of ``X`` and the forward vector of
    ``X-INV`` to the same vector. The encoder logs a warning when it sees a
    label ending in ``INVERSE_SUFFIX``.
    """
    return predicate + INVERSE_SUFFIX


@dataclass
class EncodingStats:
    """Counters for one build."""

    concepts: int = 0
    predicates: int = 0
    processed: int = 0
    skipped: int = 0
    skipped_sample: list[tuple[str, str, str]] = field(default_factory=list)

    def record_skip(self, subject: str, predicate: str, object_: str) -> None:
        self.skipped += 1
        if len(self.skipped_sample) < MAX_SKIPPED_SAMPLE:
            self.skipped_sample.append((subject, predicate, object_))

    def summary(self) -> str:
        """Human-readable summary."""
        return "\n".join([
            "PSI Build Complete",
            f"  Concepts: {self.concepts:,}",
            f"  Predicates: {self.predicates:,}",
            f"  Predications: {self.processed:,} processed, {self.skipped:,} skipped",
        ])


@dataclass
class PSIModel:
    """The three vector collections produced by a build."""

    elemental_vectors: ElementalVectorStore
    semantic_vectors: SemanticVectorStore
    predicate_vectors: ElementalVectorStore
    stats: EncodingStats


def log_progress(processed: int) -> None:
    logger.info(f"Processed {processed:,} unique predications ...")


class PredicationEncoder:
    """Encodes a predication index into PSI vectors.

    The encoder owns the three stores for the lifetime of one build. Call
    ``train()`` for the full pipeline, or the phase methods individually.
    """

    def __init__(
        self,
        index: PredicationIndex,
        settings: BuildSettings,
        term_filter: TermFilter | None = None,
        weighting: TermWeighting | None = None,
        progress_hook: Callable[[int], None] | None = log_progress,
    ):
        """Initialize encoder.

        Args:
            index: Predication index to encode
            settings: Build settings (vector, filter and weighting options)
            term_filter: Term filter (default: stoplist from settings)
            weighting: Weighting module (default: from settings)
            progress_hook: Called with the processed count every
                ``settings.progress_interval`` predications; None disables it
        """
        self.index = index
        self.settings = settings
        self.vector_config = settings.vector_config()
        self.filter_config = settings.filter_config()
        if term_filter is None:
            stopwords = load_stopwords(settings.stoplist_path) if settings.stoplist_path else ()
            term_filter = TermFilter(index, stopwords)
        self.term_filter = term_filter
        self.weighting = weighting or TermWeighting(
            index, settings.global_weighting, settings.local_weighting
        )
        self.progress_hook = progress_hook

        self.elemental_vectors = ElementalVectorStore(self.vector_config)
        self.semantic_vectors = SemanticVectorStore(self.vector_config)
        self.predicate_vectors = ElementalVectorStore(self.vector_config)
        self.stats = EncodingStats()

    def _require_terms(self, field_name: str) -> None:
        if not self.index.has_terms(field_name):
            raise CorpusStructureError(
                f"No terms for field '{field_name}'. Please check that index at "
                f"'{self.index.path}' was built correctly for use with PSI.",
                field=field_name,
                index_path=self.index.path,
            )

    # =========================================================================
    # PHASE A: CONCEPT VOCABULARY
    # =========================================================================

    def build_concept_vocabulary(self) -> int:
        """Register every eligible subject/object term once.

        A term that appears in both fields is one concept. Registration
        creates its elemental vector and a zero semantic accumulator.

        Returns:
            Number of concepts

        Raises:
            CorpusStructureError: if an item field has no terms
        """
        bounds = self.filter_config
        for field_name in ITEM_FIELDS:
            self._require_terms(field_name)

            for stats in self.index.terms(field_name):
                term = stats.term
                if not self.term_filter.is_eligible(
                    term,
                    [field_name],
                    min_frequency=bounds.min_frequency,
                    max_frequency=bounds.max_frequency,
                    max_non_alphabet_chars=bounds.max_non_alphabet_chars,
                    min_term_length=bounds.min_term_length,
                ):
                    logger.debug(f"Filtering out term: {field_name}:{term}")
                    continue

                _, created = self.elemental_vectors.get_or_insert(term)
                if created:
                    self.semantic_vectors.initialize(term)

        self.stats.concepts = len(self.elemental_vectors)
        logger.info(f"Registered {self.stats.concepts:,} concepts")
        return self.stats.concepts

    # =========================================================================
    # PHASE B: PREDICATE VOCABULARY
    # =========================================================================

    def build_predicate_vocabulary(self) -> int:
        """Register forward and inverse vectors for every eligible predicate.

        Frequency bounds do not apply to predicates; the stoplist does.

        Returns:
            Number of predicates (forward keys)

        Raises:
            CorpusStructureError: if the predicate field has no terms
        """
        self._require_terms(PREDICATE_FIELD)

        labels = set()
        for stats in self.index.terms(PREDICATE_FIELD):
            if not self.term_filter.is_eligible(
                stats.term,
                [PREDICATE_FIELD],
                min_frequency=0,
                max_frequency=None,
                max_non_alphabet_chars=None,
                min_term_length=1,
            ):
                logger.debug(f"Filtering out predicate: {stats.term}")
                continue

            label = stats.term.strip()
            if label.endswith(INVERSE_SUFFIX):
                logger.warning(
                    f"Predicate '{label}' ends with '{INVERSE_SUFFIX}'; its vector is shared "
                    f"with the inverse of '{label[: -len(INVERSE_SUFFIX)]}' if that predicate occurs"
                )
            self.predicate_vectors.get_or_insert(label)
            self.predicate_vectors.get_or_insert(inverse_key(label))
            labels.add(label)

        self.stats.predicates = len(labels)
        logger.info(f"Registered {self.stats.predicates:,} predicates")
        return self.stats.predicates

    # =========================================================================
    # PHASE C: ACCUMULATION
    # =========================================================================

    def encode_predication(
        self,
        subject: str,
        predicate: str,
        object_: str,
        occurrence_count: int = 1,
    ) -> bool:
        """Apply one predication to the semantic vectors of its concepts.

        Args:
            subject: Subject concept
            predicate: Predicate label
            object_: Object concept
            occurrence_count: How often the triple occurs in the corpus

        Returns:
            True if applied, False if skipped because a component is not in
            the vocabulary
        """
        predicate = predicate.strip()
        if not (
            self.elemental_vectors.contains(object_)
            and self.elemental_vectors.contains(subject)
            and self.predicate_vectors.contains(predicate)
        ):
            logger.info(f"skipping predication {subject} {predicate} {object_}")
            self.stats.record_skip(subject, predicate, object_)
            return False

        s_weight = self.weighting.global_weight(subject, SUBJECT_FIELD)
        o_weight = self.weighting.global_weight(object_, OBJECT_FIELD)
        p_weight = self.weighting.local_weight(occurrence_count)

        vector_type = self.vector_config.vector_type
        subject_elemental = self.elemental_vectors.vector_for(subject)
        object_elemental = self.elemental_vectors.vector_for(object_)
        predicate_vector = self.predicate_vectors.vector_for(predicate)
        predicate_vector_inv = self.predicate_vectors.vector_for(inverse_key(predicate))

        # bind() is out-of-place, stored elemental vectors stay untouched
        obj_to_add = bind(object_elemental, predicate_vector, vector_type)
        self.semantic_vectors.superpose(subject, obj_to_add, p_weight * o_weight)

        subj_to_add = bind(subject_elemental, predicate_vector_inv, vector_type)
        self.semantic_vectors.superpose(object_, subj_to_add, p_weight * s_weight)

        self.stats.processed += 1
        return True

    def accumulate(self) -> EncodingStats:
        """Stream every distinct predication once and accumulate.

        Each predication term is applied once; its term frequency (the number
        of identical triples in the corpus) only sets the local weight.

        Returns:
            Build statistics

        Raises:
            CorpusStructureError: if the predication field has no terms
        """
        self._require_terms(PREDICATION_FIELD)
        interval = self.settings.progress_interval
        seen = 0

        for stats in self.index.terms(PREDICATION_FIELD):
            seen += 1
            doc_ids = self.index.docs_for_term(PREDICATION_FIELD, stats.term)
            document = self.index.document(doc_ids[0])

            self.encode_predication(
                document[SUBJECT_FIELD],
                document[PREDICATE_FIELD],
                document[OBJECT_FIELD],
                occurrence_count=stats.total_freq,
            )

            if self.progress_hook is not None and seen % interval == 0:
                self.progress_hook(seen)

        logger.info(
            f"Accumulated {self.stats.processed:,} predications "
            f"({self.stats.skipped:,} skipped)"
        )
        return self.stats

    # =========================================================================
    # PHASE D: FINALIZATION
    # =========================================================================

    def finalize(self) -> PSIModel:
        """Normalize the semantic vectors and package the three stores."""
        self.semantic_vectors.normalize_all()
        return PSIModel(
            elemental_vectors=self.elemental_vectors,
            semantic_vectors=self.semantic_vectors,
            predicate_vectors=self.predicate_vectors,
            stats=self.stats,
        )

    def train(self) -> PSIModel:
        """Run vocabulary construction, accumulation and finalization."""
        self.build_concept_vocabulary()
        self.build_predicate_vocabulary()
        self.accumulate()
        return self.finalize()
