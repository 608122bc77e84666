"""PSI build configuration.

Follows the pydantic-settings pattern: values load from ``PSI_*``
environment variables and a ``.env`` file, and can be overlaid from a YAML
settings file and explicit overrides (CLI flags).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .types import FilterConfig, GlobalWeighting, LocalWeighting, VectorConfig, VectorType


class BuildSettings(BaseSettings):
    """Configuration for one PSI build.

    All values can be set via environment variables or .env file.
    Prefix: PSI_ (e.g. PSI_INDEX_PATH, PSI_DIMENSIONS).
    """

    # ----- Input -----
    index_path: str | None = Field(
        default=None,
        description="Path to the prebuilt predication index (required to build).",
    )
    stoplist_path: str | None = Field(
        default=None,
        description="Optional stopword file applied to concepts and predicates.",
    )

    # ----- Term filter -----
    min_frequency: int = Field(default=0, ge=0, description="Minimum concept term frequency.")
    max_frequency: int | None = Field(
        default=None, ge=0, description="Maximum concept term frequency (unbounded if unset)."
    )
    max_non_alphabet_chars: int | None = Field(
        default=None, ge=0, description="Maximum non-letter characters in a concept term."
    )
    min_term_length: int = Field(default=0, ge=0, description="Minimum concept term length.")

    # ----- Vectors -----
    vector_type: VectorType = Field(default=VectorType.REAL, description="real, complex or binary.")
    dimensions: int = Field(default=512, ge=8, description="Vector dimensionality.")
    seed_length: int = Field(default=10, ge=1, description="Non-zero entries per real elemental vector.")
    seed: int | None = Field(default=None, description="Elemental vector seed.")
    deterministic_vectors: bool = Field(
        default=False, description="Derive elemental vectors from a hash of each key."
    )
    device: str = Field(default="cpu", description="cpu, cuda or auto.")

    # ----- Weighting -----
    global_weighting: GlobalWeighting = Field(default=GlobalWeighting.IDF)
    local_weighting: LocalWeighting = Field(default=LocalWeighting.LOG)

    # ----- Output -----
    output_dir: str = Field(default=".", description="Directory for the vector stores.")
    elemental_vector_file: str = Field(default="elementalvectors.npz")
    semantic_vector_file: str = Field(default="semanticvectors.npz")
    predicate_vector_file: str = Field(default="predicatevectors.npz")

    # ----- Runtime -----
    progress_interval: int = Field(
        default=1000, ge=1, description="Log progress every N predications."
    )
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="PSI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def vector_config(self) -> VectorConfig:
        """Vector settings as a frozen VectorConfig."""
        return VectorConfig(
            vector_type=self.vector_type,
            dimensions=self.dimensions,
            seed_length=self.seed_length,
            seed=self.seed,
            deterministic=self.deterministic_vectors,
            device=self.device,
        )

    def filter_config(self) -> FilterConfig:
        """Concept term filter bounds as a frozen FilterConfig."""
        return FilterConfig(
            min_frequency=self.min_frequency,
            max_frequency=self.max_frequency,
            max_non_alphabet_chars=self.max_non_alphabet_chars,
            min_term_length=self.min_term_length,
        )

    def output_paths(self) -> dict[str, Path]:
        """Target files for the three vector stores."""
        out = Path(self.output_dir)
        return {
            "elemental": out / self.elemental_vector_file,
            "semantic": out / self.semantic_vector_file,
            "predicate": out / self.predicate_vector_file,
        }


def load_settings(config_file: str | Path | None = None, **overrides: Any) -> BuildSettings:
    """Build settings from environment, an optional YAML file, and overrides.

    Precedence: overrides > YAML file > environment / .env > defaults.
    Overrides whose value is None are ignored.

    Raises:
        ConfigurationError: if the YAML file is unreadable or values are invalid
    """
    values: dict[str, Any] = {}

    if config_file is not None:
        path = Path(config_file)
        try:
            with open(path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read settings file '{path}': {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Settings file '{path}' must contain a mapping")
        values.update(raw)

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        settings = BuildSettings(**values)
        settings.vector_config()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
    return settings
