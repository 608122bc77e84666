"""
psi_vectors/types.py - Pydantic type definitions for PSI builds

Uses Pydantic v2 for validation. Vector and filter configuration are frozen
value objects shared by the stores, the encoder and the writer.
"""
from __future__ import annotations

from enum import Enum
from typing import Literal

import torch
from pydantic import BaseModel, Field, model_validator

# =============================================================================
# ENUMERATIONS
# =============================================================================


class VectorType(str, Enum):
    """VSA flavour used for every vector in a build.

    REAL    - sparse ternary elemental vectors, bind = circular convolution
    COMPLEX - unit phasor elemental vectors, bind = element-wise product
    BINARY  - dense bipolar (+1/-1) elemental vectors, bind = element-wise
              product (XOR on the {0, 1} encoding)
    """

    REAL = "real"
    COMPLEX = "complex"
    BINARY = "binary"


class GlobalWeighting(str, Enum):
    """Corpus-level weight applied to a concept occurrence."""

    NONE = "none"
    IDF = "idf"


class LocalWeighting(str, Enum):
    """Weight applied to a predication from its occurrence count."""

    NONE = "none"
    LOG = "log"
    SQRT = "sqrt"


# =============================================================================
# VECTOR CONFIGURATION
# =============================================================================


class VectorConfig(BaseModel):
    """Configuration for elemental and semantic vectors."""

    vector_type: VectorType = Field(
        default=VectorType.REAL,
        description="VSA flavour (real, complex, binary)",
    )
    dimensions: int = Field(
        default=512,
        ge=8,
        le=131072,
        description="Vector dimensionality",
    )
    seed_length: int = Field(
        default=10,
        ge=1,
        description="Non-zero entries in a sparse real elemental vector",
    )
    seed: int | None = Field(
        default=None,
        description="Seed for the elemental vector generator (None = fresh entropy)",
    )
    deterministic: bool = Field(
        default=False,
        description="Derive each elemental vector from a hash of its key",
    )
    device: Literal["cuda", "cpu", "auto"] = Field(
        default="cpu",
        description="Compute device",
    )

    @model_validator(mode="after")
    def check_seed_length(self) -> VectorConfig:
        if self.seed_length > self.dimensions:
            raise ValueError(
                f"seed_length ({self.seed_length}) cannot exceed dimensions ({self.dimensions})"
            )
        return self

    def get_device(self) -> torch.device:
        """Get torch device based on config."""
        if self.device == "auto":
            return torch.device("cuda" if torch.cuda.is_available() else "cpu")
        return torch.device(self.device)

    def get_dtype(self) -> torch.dtype:
        """Get torch dtype for the configured vector type."""
        if self.vector_type == VectorType.COMPLEX:
            return torch.complex64
        return torch.float32

    model_config = {"frozen": True}


# =============================================================================
# TERM FILTER CONFIGURATION
# =============================================================================


class FilterConfig(BaseModel):
    """Bounds applied to concept terms during vocabulary construction.

    ``None`` disables an upper bound.
    """

    min_frequency: int = Field(default=0, ge=0)
    max_frequency: int | None = Field(default=None, ge=0)
    max_non_alphabet_chars: int | None = Field(default=None, ge=0)
    min_term_length: int = Field(default=0, ge=0)

    model_config = {"frozen": True}
