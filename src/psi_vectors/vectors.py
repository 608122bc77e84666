"""
psi_vectors/vectors.py - Vector Generation and Normalization

Three VSA flavours share one tensor-level interface:

    REAL     float32, elemental vectors are sparse ternary: ``seed_length``
             entries set to +1 or -1, the rest 0. Canonical norm is L2.
    COMPLEX  complex64, elemental vectors are unit phasors e^(iθ) with
             θ uniform in [0, 2π). Canonical norm is L2.
    BINARY   float32 bipolar, elemental vectors are dense +1/-1. The
             accumulator is a real-valued vote tally; normalization takes the
             sign (majority vote). Canonical norm is RMS, so every bipolar
             vector has norm 1.

Normalizing a zero vector returns a zero vector for every flavour.
"""
from __future__ import annotations

import hashlib
import math

import torch

from .types import VectorConfig, VectorType

# Tolerance below which an accumulator is treated as the zero vector
ZERO_EPS = 1e-12


# =============================================================================
# GENERATORS
# =============================================================================


def key_generator(key: str, seed: int | None = None) -> torch.Generator:
    """Build a generator whose state depends only on ``key`` and ``seed``.

    The 64-bit seed is taken from SHA-256 of ``"{seed}:{key}"``, so two
    independently created stores produce the same vector for the same key.
    """
    digest = hashlib.sha256(f"{seed or 0}:{key}".encode()).digest()
    generator = torch.Generator()
    generator.manual_seed(int.from_bytes(digest[:8], "big") & 0x7FFF_FFFF_FFFF_FFFF)
    return generator


def store_generator(seed: int | None = None) -> torch.Generator:
    """Build a generator for a store; ``None`` draws fresh entropy."""
    generator = torch.Generator()
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(seed)
    return generator


# =============================================================================
# VECTOR GENERATION
# =============================================================================


def zero_vector(config: VectorConfig) -> torch.Tensor:
    """Generate the additive identity for superposition.

    Args:
        config: Vector configuration (type, dimensions, device)

    Returns:
        All-zero tensor of shape (d,)
    """
    return torch.zeros(
        config.dimensions, dtype=config.get_dtype(), device=config.get_device()
    )


def random_vector(config: VectorConfig, generator: torch.Generator) -> torch.Tensor:
    """Generate a random elemental vector of the configured flavour.

    Sampling always happens on CPU with ``generator`` and the result is moved
    to the configured device, so the same generator state yields the same
    vector on every device.

    Args:
        config: Vector configuration
        generator: Source of randomness

    Returns:
        Elemental vector of shape (d,)
    """
    dim = config.dimensions

    if config.vector_type == VectorType.REAL:
        positions = torch.randperm(dim, generator=generator)[: config.seed_length]
        signs = torch.randint(0, 2, (config.seed_length,), generator=generator) * 2 - 1
        vector = torch.zeros(dim, dtype=torch.float32)
        vector[positions] = signs.to(torch.float32)
    elif config.vector_type == VectorType.COMPLEX:
        phases = torch.rand(dim, generator=generator) * 2 * math.pi
        vector = torch.exp(1j * phases)
    elif config.vector_type == VectorType.BINARY:
        bits = torch.randint(0, 2, (dim,), generator=generator)
        vector = (bits * 2 - 1).to(torch.float32)
    else:
        raise ValueError(f"Unsupported vector type: {config.vector_type}")

    return vector.to(config.get_device())


# =============================================================================
# NORMS & NORMALIZATION
# =============================================================================


def norm(v: torch.Tensor, vector_type: VectorType) -> float:
    """Canonical norm of ``v`` for its flavour (L2, or RMS for binary)."""
    if vector_type == VectorType.BINARY:
        if v.numel() == 0:
            return 0.0
        return float(torch.sqrt(torch.mean(v.to(torch.float32) ** 2)))
    return float(torch.linalg.vector_norm(v))


def is_zero(v: torch.Tensor) -> bool:
    """True if every component of ``v`` is (numerically) zero."""
    return bool(torch.all(torch.abs(v) <= ZERO_EPS))


def normalize(v: torch.Tensor, vector_type: VectorType) -> torch.Tensor:
    """Scale ``v`` to unit canonical norm.

    REAL and COMPLEX divide by the L2 norm. BINARY takes the sign of each
    component; ties (exact zeros in a non-zero tally) resolve to +1.

    Args:
        v: Input tensor of shape (d,)
        vector_type: Flavour of ``v``

    Returns:
        New normalized tensor; a zero vector is returned unchanged (as a copy)

    Note:
        A concept that never received an update keeps its zero accumulator,
        so it stays zero after finalization rather than raising.
    """
    if is_zero(v):
        return v.clone()

    if vector_type == VectorType.BINARY:
        return torch.where(v >= 0, torch.ones_like(v), -torch.ones_like(v))

    return v / torch.linalg.vector_norm(v)


def similarity(a: torch.Tensor, b: torch.Tensor) -> float:
    """Cosine similarity Re(⟨a, b*⟩) / (||a|| · ||b||); 0.0 if either is zero."""
    if a.device != b.device:
        b = b.to(a.device)

    norm_a = torch.linalg.vector_norm(a)
    norm_b = torch.linalg.vector_norm(b)
    if norm_a <= ZERO_EPS or norm_b <= ZERO_EPS:
        return 0.0

    dot = torch.sum(a * torch.conj(b))
    if dot.is_complex():
        dot = dot.real
    return float(dot / (norm_a * norm_b))
