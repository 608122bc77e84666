"""
psi_vectors/stores.py - Vector stores owned by one PSI build

VectorStore           ordered key -> tensor mapping with a uniform header
ElementalVectorStore  lazily creates one random vector per key
SemanticVectorStore   zero-initialized accumulators, normalized once

Every store carries the VectorConfig of its build; dimensionality and vector
type are uniform within a store. Mutations are guarded by a re-entrant lock
so the create-on-miss test-and-set and each superposition are atomic.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterator

import torch

from .operators import superpose
from .types import VectorConfig
from .vectors import (
    is_zero,
    key_generator,
    normalize,
    random_vector,
    store_generator,
    zero_vector,
)

logger = logging.getLogger(__name__)


class VectorStore:
    """Ordered mapping from vocabulary key to vector.

    Insertion order is preserved so exported stores are deterministic for a
    given corpus.
    """

    def __init__(self, config: VectorConfig):
        self.config = config
        self._vectors: dict[str, torch.Tensor] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._vectors)

    def __contains__(self, key: object) -> bool:
        return key in self._vectors

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._vectors))

    def contains(self, key: str) -> bool:
        return key in self._vectors

    def keys(self) -> list[str]:
        return list(self._vectors)

    def items(self) -> list[tuple[str, torch.Tensor]]:
        return list(self._vectors.items())

    def get(self, key: str) -> torch.Tensor | None:
        """Get vector by key, or None if absent."""
        return self._vectors.get(key)

    def put(self, key: str, vector: torch.Tensor) -> None:
        """Store ``vector`` under ``key``, replacing any existing entry."""
        if vector.shape != (self.config.dimensions,):
            raise ValueError(
                f"Vector for '{key}' has shape {tuple(vector.shape)}, "
                f"store expects ({self.config.dimensions},)"
            )
        with self._lock:
            self._vectors[key] = vector


class ElementalVectorStore(VectorStore):
    """Random elemental vectors, created on first request.

    A key's vector is created once and the same tensor object is returned
    on every later request. Callers that need to modify it must clone it.

    With ``config.deterministic`` each key's vector is derived from a hash of
    the key and ``config.seed``, so separate stores agree on every key.
    Otherwise vectors come from one store-level generator and are only
    reproducible within a run (or across runs with a fixed ``config.seed``
    and identical key order).

    Example:
        store = ElementalVectorStore(VectorConfig(dimensions=1024))
        vec, created = store.get_or_insert("aspirin")   # created == True
        same, created = store.get_or_insert("aspirin")  # created == False
        assert same is vec
    """

    def __init__(self, config: VectorConfig):
        super().__init__(config)
        self._generator = None if config.deterministic else store_generator(config.seed)

    def _create(self, key: str) -> torch.Tensor:
        if self.config.deterministic:
            generator = key_generator(key, self.config.seed)
        else:
            generator = self._generator
        return random_vector(self.config, generator)

    def get_or_insert(self, key: str) -> tuple[torch.Tensor, bool]:
        """Return the vector for ``key``, creating it if absent.

        Returns:
            (vector, created) where ``created`` is True only for the call
            that created the vector
        """
        with self._lock:
            vector = self._vectors.get(key)
            if vector is not None:
                return vector, False
            vector = self._create(key)
            self._vectors[key] = vector
            return vector, True

    def vector_for(self, key: str) -> torch.Tensor:
        """Get the vector for ``key``, creating it on first access."""
        return self.get_or_insert(key)[0]


class SemanticVectorStore(VectorStore):
    """Mutable semantic accumulators, one per concept.

    Accumulators start at the zero vector, receive weighted superpositions,
    and are normalized exactly once by ``normalize_all``. After that the
    store is frozen.
    """

    def __init__(self, config: VectorConfig):
        super().__init__(config)
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def initialize(self, key: str) -> torch.Tensor:
        """Create a zero accumulator for ``key`` (no-op if it exists)."""
        with self._lock:
            if self._frozen:
                raise RuntimeError("Semantic vectors are frozen after normalization")
            vector = self._vectors.get(key)
            if vector is None:
                vector = zero_vector(self.config)
                self._vectors[key] = vector
            return vector

    def superpose(self, key: str, vector: torch.Tensor, weight: float) -> torch.Tensor:
        """Add ``weight · vector`` into the accumulator for ``key``.

        Raises:
            KeyError: if ``key`` has no accumulator
            RuntimeError: if the store has been normalized
        """
        with self._lock:
            if self._frozen:
                raise RuntimeError("Semantic vectors are frozen after normalization")
            acc = self._vectors[key]
            return superpose(acc, vector, weight)

    def normalize_all(self) -> int:
        """Normalize every accumulator and freeze the store.

        Zero accumulators stay zero.

        Returns:
            Number of accumulators that were zero
        """
        with self._lock:
            if self._frozen:
                raise RuntimeError("Semantic vectors have already been normalized")
            zero_count = 0
            for key, acc in self._vectors.items():
                normalized = normalize(acc, self.config.vector_type)
                if is_zero(normalized):
                    zero_count += 1
                self._vectors[key] = normalized
            self._frozen = True

        if zero_count:
            logger.info(f"{zero_count} concept(s) received no predications; left as zero vectors")
        return zero_count
