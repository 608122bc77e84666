"""
tests/test_encoder.py - PSI build

Verifies:
    - Vocabulary: one elemental vector and one zero accumulator per concept,
      distinct forward and inverse vectors per predicate
    - Accumulation: forward and inverse contributions with their weights
    - Triples with a filtered component are skipped and counted
    - Duplicate triples are applied once, weighted by their count
    - Results do not depend on the order of the input triples
    - Finalized semantic vectors have unit norm (zero if never updated)
"""

import logging
import math

import pytest
import torch

from psi_vectors.encoder import INVERSE_SUFFIX, PredicationEncoder, inverse_key
from psi_vectors.exceptions import CorpusStructureError
from psi_vectors.filtering import TermFilter
from psi_vectors.index import PredicationIndex
from psi_vectors.operators import bind
from psi_vectors.types import VectorType
from psi_vectors.vectors import is_zero, norm, normalize

ALL_TYPES = [VectorType.REAL, VectorType.COMPLEX, VectorType.BINARY]


def encoder_for(triples, settings, **kwargs):
    return PredicationEncoder(PredicationIndex.from_triples(triples), settings, **kwargs)


# =============================================================================
# VOCABULARY TESTS
# =============================================================================


class TestVocabulary:

    def test_concepts_from_both_fields(self, drug_index, make_settings):
        encoder = PredicationEncoder(drug_index, make_settings())
        count = encoder.build_concept_vocabulary()

        assert count == 4
        assert set(encoder.elemental_vectors.keys()) == {"aspirin", "ibuprofen", "headache", "fever"}
        assert set(encoder.semantic_vectors.keys()) == set(encoder.elemental_vectors.keys())
        for _, vec in encoder.semantic_vectors.items():
            assert is_zero(vec)

    def test_concept_in_both_fields_registered_once(self, drug_index, make_settings):
        encoder = PredicationEncoder(drug_index, make_settings())
        encoder.build_concept_vocabulary()
        # aspirin is a subject and an object
        assert encoder.elemental_vectors.keys().count("aspirin") == 1

    def test_predicates_get_forward_and_inverse(self, drug_index, make_settings):
        encoder = PredicationEncoder(drug_index, make_settings())
        encoder.build_concept_vocabulary()
        count = encoder.build_predicate_vocabulary()

        assert count == 3
        assert len(encoder.predicate_vectors) == 6
        forward = encoder.predicate_vectors.get("TREATS")
        inverse = encoder.predicate_vectors.get("TREATS" + INVERSE_SUFFIX)
        assert not torch.equal(forward, inverse)
        for _, concept_vec in encoder.elemental_vectors.items():
            assert not torch.equal(forward, concept_vec)
            assert not torch.equal(inverse, concept_vec)

    def test_concept_filter_excludes_terms(self, make_settings):
        triples = [("A", "P", "B"), ("A", "P", "B"), ("A", "P", "C")]
        encoder = encoder_for(triples, make_settings(min_frequency=2))
        encoder.build_concept_vocabulary()
        assert encoder.elemental_vectors.keys() == ["A", "B"]

    def test_predicate_frequency_bounds_ignored(self, make_settings):
        triples = [("A", "RARE", "B"), ("B", "P", "A"), ("A", "P", "B")]
        encoder = encoder_for(triples, make_settings(min_frequency=2, max_frequency=2))
        encoder.build_predicate_vocabulary()
        assert encoder.predicate_vectors.contains("RARE")

    def test_stoplisted_predicate_excluded(self, drug_index, make_settings):
        encoder = PredicationEncoder(
            drug_index,
            make_settings(),
            term_filter=TermFilter(drug_index, stopwords={"ASSOCIATED_WITH"}),
        )
        assert encoder.build_predicate_vocabulary() == 2
        assert not encoder.predicate_vectors.contains("ASSOCIATED_WITH")
        assert not encoder.predicate_vectors.contains(inverse_key("ASSOCIATED_WITH"))

    def test_stoplist_from_settings(self, drug_index, make_settings, tmp_path):
        stoplist = tmp_path / "stoplist.txt"
        stoplist.write_text("ASSOCIATED_WITH\n")
        encoder = PredicationEncoder(drug_index, make_settings(stoplist_path=str(stoplist)))
        model = encoder.train()

        assert not model.predicate_vectors.contains("ASSOCIATED_WITH")
        assert model.stats.predicates == 2
        assert model.stats.skipped == 1

    def test_stoplist_matches_padded_predicate(self, make_settings):
        triples = [("A", " PROCESS_OF ", "B"), ("A", "TREATS", "B")]
        index = PredicationIndex.from_triples(triples)
        encoder = PredicationEncoder(
            index, make_settings(), term_filter=TermFilter(index, stopwords={"PROCESS_OF"})
        )
        encoder.build_predicate_vocabulary()
        assert encoder.predicate_vectors.keys() == ["TREATS", "TREATS-INV"]

    def test_inverse_suffixed_label_warns(self, make_settings, caplog):
        encoder = encoder_for([("A", "X", "B"), ("B", "X-INV", "A")], make_settings())
        with caplog.at_level(logging.WARNING, logger="psi_vectors"):
            encoder.build_predicate_vocabulary()

        assert "Predicate 'X-INV' ends with '-INV'" in caplog.text
        # the clash is a documented limitation of the key scheme
        assert encoder.predicate_vectors.get(inverse_key("X")) is encoder.predicate_vectors.get("X-INV")

    def test_predicate_labels_trimmed(self, make_settings):
        encoder = encoder_for([("A", " TREATS ", "B")], make_settings())
        model = encoder.train()
        assert model.predicate_vectors.keys() == ["TREATS", "TREATS-INV"]
        assert model.stats.processed == 1

    def test_empty_index_raises(self, make_settings):
        encoder = PredicationEncoder(PredicationIndex(path="empty.json"), make_settings())
        with pytest.raises(CorpusStructureError) as exc_info:
            encoder.train()
        assert exc_info.value.field == "subject"
        assert "empty.json" in str(exc_info.value)


# =============================================================================
# ACCUMULATION TESTS
# =============================================================================


class TestAccumulation:

    def test_forward_and_inverse_contributions(self, make_settings):
        encoder = encoder_for([("A", "P", "B")], make_settings())
        encoder.build_concept_vocabulary()
        encoder.build_predicate_vocabulary()
        encoder.accumulate()

        vt = encoder.vector_config.vector_type
        e_a = encoder.elemental_vectors.get("A")
        e_b = encoder.elemental_vectors.get("B")
        p_fwd = encoder.predicate_vectors.get("P")
        p_inv = encoder.predicate_vectors.get("P-INV")
        p_weight = encoder.weighting.local_weight(1)
        s_weight = encoder.weighting.global_weight("A", "subject")
        o_weight = encoder.weighting.global_weight("B", "object")

        expected_a = bind(e_b, p_fwd, vt) * (p_weight * o_weight)
        expected_b = bind(e_a, p_inv, vt) * (p_weight * s_weight)
        assert torch.allclose(encoder.semantic_vectors.get("A"), expected_a, atol=1e-6)
        assert torch.allclose(encoder.semantic_vectors.get("B"), expected_b, atol=1e-6)
        # the inverse direction uses its own vector
        assert not torch.allclose(encoder.semantic_vectors.get("B"), bind(e_a, p_fwd, vt) * (p_weight * s_weight))

    def test_elemental_vectors_not_mutated(self, drug_index, make_settings):
        encoder = PredicationEncoder(drug_index, make_settings())
        encoder.build_concept_vocabulary()
        encoder.build_predicate_vocabulary()
        before = {k: v.clone() for k, v in encoder.elemental_vectors.items()}
        encoder.accumulate()
        for key, vec in encoder.elemental_vectors.items():
            assert torch.equal(vec, before[key])

    def test_duplicates_applied_once_with_count_weight(self, make_settings):
        encoder = encoder_for([("A", "P", "B"), ("A", "P", "B")], make_settings())
        encoder.build_concept_vocabulary()
        encoder.build_predicate_vocabulary()
        stats = encoder.accumulate()

        assert stats.processed == 1
        vt = encoder.vector_config.vector_type
        # N = 2 documents, df(B) = 2: idf = log10(2); count 2: log10(3)
        weight = math.log10(3) * math.log10(2)
        expected = bind(
            encoder.elemental_vectors.get("B"), encoder.predicate_vectors.get("P"), vt
        ) * weight
        assert torch.allclose(encoder.semantic_vectors.get("A"), expected, atol=1e-6)

    def test_filtered_component_skips_triple(self, make_settings, caplog):
        triples = [("A", "P", "B"), ("A", "P", "B"), ("A", "P", "C")]
        encoder = encoder_for(triples, make_settings(min_frequency=2))

        with caplog.at_level(logging.INFO, logger="psi_vectors"):
            model = encoder.train()

        assert model.stats.processed == 1
        assert model.stats.skipped == 1
        assert model.stats.skipped_sample == [("A", "P", "C")]
        assert "skipping predication A P C" in caplog.text
        assert not model.semantic_vectors.contains("C")

        vt = encoder.vector_config.vector_type
        expected = normalize(
            bind(model.elemental_vectors.get("B"), model.predicate_vectors.get("P"), vt), vt
        )
        assert torch.allclose(model.semantic_vectors.get("A"), expected, atol=1e-5)

    def test_encode_predication_unknown_predicate(self, drug_index, make_settings):
        encoder = PredicationEncoder(drug_index, make_settings())
        encoder.build_concept_vocabulary()
        encoder.build_predicate_vocabulary()
        assert encoder.encode_predication("aspirin", "CAUSES", "fever") is False
        assert is_zero(encoder.semantic_vectors.get("aspirin"))
        assert is_zero(encoder.semantic_vectors.get("fever"))

    def test_progress_hook(self, drug_index, make_settings):
        calls = []
        encoder = PredicationEncoder(
            drug_index, make_settings(progress_interval=2), progress_hook=calls.append
        )
        encoder.train()
        assert calls == [2, 4]

    @pytest.mark.parametrize("vector_type", ALL_TYPES, ids=lambda t: t.value)
    def test_order_independence(self, drug_index, drug_triples, make_settings, vector_type):
        settings = make_settings(vector_type=vector_type.value)
        orders = [
            drug_triples,
            list(reversed(drug_triples)),
            drug_triples[2:] + drug_triples[:2],
        ]

        accumulators = []
        for order in orders:
            encoder = PredicationEncoder(drug_index, settings)
            encoder.build_concept_vocabulary()
            encoder.build_predicate_vocabulary()
            for subject, predicate, object_ in order:
                assert encoder.encode_predication(subject, predicate, object_)
            accumulators.append(encoder.semantic_vectors)

        first = accumulators[0]
        assert not any(is_zero(vec) for _, vec in first.items())
        for other in accumulators[1:]:
            assert other.keys() == first.keys()
            for key, vec in first.items():
                assert torch.allclose(vec, other.get(key), atol=1e-5)


# =============================================================================
# FINALIZATION TESTS
# =============================================================================


class TestFinalization:

    @pytest.mark.parametrize("vector_type", ALL_TYPES, ids=lambda t: t.value)
    def test_unit_norm_or_zero(self, make_settings, vector_type):
        triples = [
            ("aspirin", "TREATS", "headache"),
            ("ibuprofen", "TREATS", "headache"),
            ("dust", "IGNORED", "sneeze"),
        ]
        index = PredicationIndex.from_triples(triples)
        encoder = PredicationEncoder(
            index,
            make_settings(vector_type=vector_type.value),
            term_filter=TermFilter(index, stopwords={"IGNORED"}),
        )
        model = encoder.train()

        assert model.semantic_vectors.frozen
        for key in ("aspirin", "ibuprofen", "headache"):
            assert math.isclose(
                norm(model.semantic_vectors.get(key), vector_type), 1.0, rel_tol=1e-5
            )
        for key in ("dust", "sneeze"):
            assert is_zero(model.semantic_vectors.get(key))

    def test_shared_neighbourhood_is_similar(self, make_settings):
        from psi_vectors.vectors import similarity

        triples = [
            ("aspirin", "TREATS", "headache"),
            ("aspirin", "TREATS", "fever"),
            ("ibuprofen", "TREATS", "headache"),
            ("ibuprofen", "TREATS", "fever"),
            ("insulin", "TREATS", "diabetes"),
        ]
        model = encoder_for(triples, make_settings(dimensions=1024)).train()
        sem = model.semantic_vectors
        assert similarity(sem.get("aspirin"), sem.get("ibuprofen")) > 0.9
        assert abs(similarity(sem.get("aspirin"), sem.get("insulin"))) < 0.5

    def test_summary(self, drug_index, make_settings):
        model = PredicationEncoder(drug_index, make_settings()).train()
        summary = model.stats.summary()
        assert "Concepts: 4" in summary
        assert "5 processed, 0 skipped" in summary
