"""
psi_vectors/writer.py - Vector store persistence

Each store is written to its own ``.npz`` archive:

    header   JSON string: format, vector_type, dimensions, count
    labels   (n,) unicode array of keys, in store order
    vectors  (n, d) array (float32, or complex64 for complex stores)

The archive is written to a temporary file in the target directory and
moved into place with ``os.replace``, so a failed write leaves any existing
file (and every other store) untouched.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import torch

from .stores import VectorStore
from .types import VectorType

if TYPE_CHECKING:
    from .config import BuildSettings
    from .encoder import PSIModel

logger = logging.getLogger(__name__)

STORE_FORMAT = "psi-vectors"


@dataclass(frozen=True)
class VectorStoreHeader:
    """Per-store metadata, recorded once per file."""

    vector_type: VectorType
    dimensions: int
    count: int

    def to_json(self) -> str:
        return json.dumps({
            "format": STORE_FORMAT,
            "vector_type": self.vector_type.value,
            "dimensions": self.dimensions,
            "count": self.count,
        })

    @classmethod
    def from_json(cls, raw: str) -> VectorStoreHeader:
        data = json.loads(raw)
        if data.get("format") != STORE_FORMAT:
            raise ValueError(f"Not a PSI vector store (format={data.get('format')!r})")
        return cls(
            vector_type=VectorType(data["vector_type"]),
            dimensions=int(data["dimensions"]),
            count=int(data["count"]),
        )


def write_vectors(path: str | Path, store: VectorStore) -> Path:
    """Write one vector store atomically.

    Args:
        path: Target ``.npz`` file
        store: Store to write

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    config = store.config
    items = store.items()
    header = VectorStoreHeader(
        vector_type=config.vector_type,
        dimensions=config.dimensions,
        count=len(items),
    )

    labels = np.array([key for key, _ in items], dtype=str)
    if items:
        vectors = torch.stack([v.detach().cpu() for _, v in items]).numpy()
    else:
        dtype = np.complex64 if config.vector_type == VectorType.COMPLEX else np.float32
        vectors = np.zeros((0, config.dimensions), dtype=dtype)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            np.savez(f, header=np.array(header.to_json()), labels=labels, vectors=vectors)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.info(f"Wrote {header.count:,} {config.vector_type.value} vectors to {path}")
    return path


def read_vectors(path: str | Path) -> tuple[VectorStoreHeader, dict[str, torch.Tensor]]:
    """Read a store written by ``write_vectors``.

    Returns:
        (header, {key: vector}) with keys in file order
    """
    with np.load(Path(path), allow_pickle=False) as data:
        header = VectorStoreHeader.from_json(str(data["header"]))
        labels = [str(label) for label in data["labels"]]
        vectors = torch.from_numpy(np.array(data["vectors"]))

    if len(labels) != header.count or vectors.shape[0] != header.count:
        raise ValueError(f"Vector store {path} is inconsistent with its header")
    return header, {label: vectors[i] for i, label in enumerate(labels)}


def write_model(model: PSIModel, settings: BuildSettings) -> dict[str, Path]:
    """Write the elemental, semantic and predicate stores of a PSI model.

    Args:
        model: Finalized PSIModel
        settings: BuildSettings naming the output directory and files

    Returns:
        Mapping of store name to written path
    """
    paths = settings.output_paths()
    written = {
        "elemental": write_vectors(paths["elemental"], model.elemental_vectors),
        "semantic": write_vectors(paths["semantic"], model.semantic_vectors),
        "predicate": write_vectors(paths["predicate"], model.predicate_vectors),
    }
    logger.info("Finished writing vectors.")
    return written
