"""
psi_vectors/operators.py - Algebraic Operations for PSI

BINDING (⊗):
    REAL     circular convolution, computed as irfft(rfft(a) · rfft(b))
    COMPLEX  element-wise product (phase addition)
    BINARY   element-wise product of bipolar vectors (XOR on bits)

    Binding is out-of-place: neither operand is modified, so elemental
    vectors held by a store can be passed in directly. The result has the
    dimensionality and dtype of the operands and depends only on them.

SUPERPOSITION (⊕):
    Weighted accumulation into an existing vector:
        acc ← acc + w · v

    Addition is commutative and associative, so the final accumulator does
    not depend on the order in which predications are processed.
"""
from __future__ import annotations

import torch

from .types import VectorType

# =============================================================================
# BINDING
# =============================================================================


def bind(a: torch.Tensor, b: torch.Tensor, vector_type: VectorType) -> torch.Tensor:
    """Bind two vectors of the same flavour.

    Use for: encoding "related to ``a`` via ``b``", e.g. an object's
    elemental vector bound with a predicate's elemental vector.

    Args:
        a: First vector (typically the neighbour's elemental vector)
        b: Second vector (typically the predicate's elemental vector)
        vector_type: Flavour of both operands

    Returns:
        New bound vector of shape (d,)
    """
    if a.shape != b.shape:
        raise ValueError(f"Cannot bind vectors of shape {tuple(a.shape)} and {tuple(b.shape)}")
    if a.device != b.device:
        b = b.to(a.device)

    if vector_type == VectorType.REAL:
        n = a.shape[-1]
        return torch.fft.irfft(torch.fft.rfft(a) * torch.fft.rfft(b), n=n).to(a.dtype)
    if vector_type in (VectorType.COMPLEX, VectorType.BINARY):
        return a * b

    raise ValueError(f"Unsupported vector type: {vector_type}")


# =============================================================================
# SUPERPOSITION
# =============================================================================


def superpose(acc: torch.Tensor, v: torch.Tensor, weight: float = 1.0) -> torch.Tensor:
    """Add ``weight · v`` into ``acc`` in place.

    Args:
        acc: Accumulator, modified in place
        v: Vector to add
        weight: Scalar weight

    Returns:
        ``acc`` (for chaining)
    """
    if acc.shape != v.shape:
        raise ValueError(f"Cannot superpose shape {tuple(v.shape)} into {tuple(acc.shape)}")
    if v.device != acc.device:
        v = v.to(acc.device)
    acc.add_(v.to(acc.dtype), alpha=weight)
    return acc
