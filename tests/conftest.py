"""
Pytest fixtures shared by the psi_vectors tests.

Provides small predication corpora and a settings factory that pins the
elemental vector seed so results are reproducible.
"""

import pytest

from psi_vectors.config import load_settings
from psi_vectors.index import PredicationIndex

# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep PSI_* variables and any .env file out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("PSI_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_settings():
    """Factory for deterministic, small-dimension build settings."""

    def _make(**overrides):
        values = {
            "dimensions": 256,
            "seed": 7,
            "deterministic_vectors": True,
        }
        values.update(overrides)
        return load_settings(**values)

    return _make


# =============================================================================
# CORPORA
# =============================================================================


@pytest.fixture
def drug_triples():
    """A small biomedical-style corpus."""
    return [
        ("aspirin", "TREATS", "headache"),
        ("aspirin", "TREATS", "fever"),
        ("ibuprofen", "TREATS", "headache"),
        ("ibuprofen", "INTERACTS_WITH", "aspirin"),
        ("headache", "ASSOCIATED_WITH", "fever"),
    ]


@pytest.fixture
def drug_index(drug_triples):
    return PredicationIndex.from_triples(drug_triples)
