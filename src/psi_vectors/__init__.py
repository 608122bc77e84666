"""
psi_vectors - Predication-based Semantic Indexing with Vector Symbolic Architectures

Builds embeddings for concepts and relations from subject-predicate-object
triples. Every concept and predicate direction gets a random elemental
vector; a concept's semantic vector superposes its neighbours' elemental
vectors bound with the connecting predicate.

Quick Start:
    from psi_vectors import PredicationIndex, PredicationEncoder, load_settings
    from psi_vectors.writer import write_model

    index = PredicationIndex.from_triples([
        ("aspirin", "TREATS", "headache"),
        ("ibuprofen", "TREATS", "headache"),
    ])
    settings = load_settings(dimensions=1024, vector_type="complex")
    model = PredicationEncoder(index, settings).train()
    write_model(model, settings)

Modules:
    psi_vectors.vectors    - Vector generation, norms and normalization
    psi_vectors.operators  - Bind and superpose
    psi_vectors.stores     - Elemental and semantic vector stores
    psi_vectors.index      - Predication index and triple files
    psi_vectors.filtering  - Vocabulary term filter
    psi_vectors.weighting  - Global and local weights
    psi_vectors.encoder    - The PSI build
    psi_vectors.writer     - Vector store files
    psi_vectors.config     - Build settings
    psi_vectors.types      - Pydantic type definitions
"""

__version__ = "0.1.0"

from .config import BuildSettings, load_settings
from .encoder import (
    INVERSE_SUFFIX,
    EncodingStats,
    PredicationEncoder,
    PSIModel,
    inverse_key,
)
from .exceptions import ConfigurationError, CorpusStructureError, PSIError
from .filtering import TermFilter, load_stopwords
from .index import PredicationIndex, predication_term
from .operators import bind, superpose
from .stores import ElementalVectorStore, SemanticVectorStore, VectorStore
from .types import (
    FilterConfig,
    GlobalWeighting,
    LocalWeighting,
    VectorConfig,
    VectorType,
)
from .vectors import norm, normalize, random_vector, similarity, zero_vector
from .weighting import TermWeighting

__all__ = [
    # Version
    "__version__",
    # Settings
    "BuildSettings",
    "load_settings",
    # Encoder
    "PredicationEncoder",
    "PSIModel",
    "EncodingStats",
    "inverse_key",
    "INVERSE_SUFFIX",
    # Errors
    "PSIError",
    "ConfigurationError",
    "CorpusStructureError",
    # Index & filtering
    "PredicationIndex",
    "predication_term",
    "TermFilter",
    "load_stopwords",
    "TermWeighting",
    # Stores
    "VectorStore",
    "ElementalVectorStore",
    "SemanticVectorStore",
    # Algebra
    "bind",
    "superpose",
    "norm",
    "normalize",
    "random_vector",
    "similarity",
    "zero_vector",
    # Types
    "VectorConfig",
    "FilterConfig",
    "VectorType",
    "GlobalWeighting",
    "LocalWeighting",
]
