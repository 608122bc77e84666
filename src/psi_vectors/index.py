"""
psi_vectors/index.py - Predication Index

A small term/document index over subject-predicate-object triples. Each
document is one predication occurrence with four single-term fields:

    subject      the subject concept
    predicate    the relation label
    object       the object concept
    predication  subject + TAB + predicate + TAB + object

Identical triples share their predication term, so the term frequency of a
predication term is the number of times that triple occurs in the corpus.

Usage:
    from psi_vectors.index import PredicationIndex

    index = PredicationIndex.from_triples_file("semmed.tsv")
    index.save("semmed.index.json")

    index = PredicationIndex.load("semmed.index.json")
    for stats in index.terms("subject"):
        print(stats.term, stats.doc_freq)
"""
from __future__ import annotations

import csv
import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

from .exceptions import CorpusStructureError

logger = logging.getLogger(__name__)

SUBJECT_FIELD = "subject"
PREDICATE_FIELD = "predicate"
OBJECT_FIELD = "object"
PREDICATION_FIELD = "predication"

TRIPLE_FIELDS = (SUBJECT_FIELD, PREDICATE_FIELD, OBJECT_FIELD)
REQUIRED_FIELDS = (SUBJECT_FIELD, PREDICATE_FIELD, OBJECT_FIELD, PREDICATION_FIELD)

PREDICATION_SEPARATOR = "\t"

INDEX_FORMAT = "psi-index"
INDEX_VERSION = 1


def predication_term(subject: str, predicate: str, object_: str) -> str:
    """Term under which a triple is indexed in the predication field."""
    return PREDICATION_SEPARATOR.join((subject, predicate, object_))


@dataclass(frozen=True)
class TermStats:
    """Statistics for one distinct term of one field."""

    field: str
    term: str
    doc_freq: int
    total_freq: int


# =============================================================================
# TRIPLE FILES
# =============================================================================


def read_triples(path: str | Path, delimiter: str | None = None) -> Iterator[tuple[str, str, str]]:
    """Stream (subject, predicate, object) rows from a delimited file.

    The delimiter defaults to ``,`` for ``.csv`` files and TAB otherwise.
    Columns beyond the third are ignored. A leading
    ``subject/predicate/object`` header row is skipped. Rows with fewer than
    three non-empty columns are logged and skipped.

    Args:
        path: Triples file
        delimiter: Column delimiter override

    Yields:
        Stripped (subject, predicate, object) tuples
    """
    path = Path(path)
    if delimiter is None:
        delimiter = "," if path.suffix.lower() == ".csv" else "\t"

    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f, delimiter=delimiter)
        for line_no, row in enumerate(reader, start=1):
            cells = [cell.strip() for cell in row[:3]]
            if line_no == 1 and [c.lower() for c in cells] == list(TRIPLE_FIELDS):
                continue
            if len(cells) < 3 or not all(cells):
                if any(cells):
                    logger.warning(f"Skipping malformed triple at {path}:{line_no}: {row!r}")
                continue
            yield cells[0], cells[1], cells[2]


# =============================================================================
# INDEX
# =============================================================================


class PredicationIndex:
    """In-memory term/document index of predications.

    Example:
        index = PredicationIndex.from_triples([
            ("aspirin", "TREATS", "headache"),
            ("aspirin", "TREATS", "headache"),
        ])
        index.term_frequency("predication", predication_term("aspirin", "TREATS", "headache"))
        # 2
    """

    def __init__(
        self,
        documents: Iterable[Mapping[str, str]] = (),
        path: str | None = None,
    ):
        """Initialize index.

        Args:
            documents: Mappings with at least subject, predicate and object
            path: Where the index was loaded from (for diagnostics)
        """
        self.path = path
        self._documents: list[dict[str, str]] = []
        self._postings: dict[str, dict[str, list[int]]] = {field: {} for field in REQUIRED_FIELDS}

        for doc in documents:
            self.add_document(doc)

    @classmethod
    def from_triples(cls, triples: Iterable[tuple[str, str, str]]) -> PredicationIndex:
        """Build an index with one document per triple."""
        return cls(
            {SUBJECT_FIELD: s, PREDICATE_FIELD: p, OBJECT_FIELD: o}
            for s, p, o in triples
        )

    @classmethod
    def from_triples_file(cls, path: str | Path, delimiter: str | None = None) -> PredicationIndex:
        """Build an index from a delimited triples file (see ``read_triples``)."""
        index = cls.from_triples(read_triples(path, delimiter))
        logger.info(f"Indexed {index.num_docs:,} predications from {path}")
        return index

    def add_document(self, doc: Mapping[str, str]) -> int:
        """Add one predication document.

        Returns:
            The new document id

        Raises:
            CorpusStructureError: if the document is not a mapping, a field
                value is not a string, or subject, predicate or object is missing
        """
        if not isinstance(doc, Mapping):
            raise CorpusStructureError(
                f"Document {len(self._documents)} is a {type(doc).__name__}, not a field mapping. "
                f"Please check that index at '{self.path}' was built correctly for use with PSI.",
                index_path=self.path,
            )

        not_text = [
            field for field in REQUIRED_FIELDS
            if doc.get(field) is not None and not isinstance(doc[field], str)
        ]
        if not_text:
            raise CorpusStructureError(
                f"Document {len(self._documents)} has non-string value(s) for "
                f"{', '.join(not_text)}. "
                f"Please check that index at '{self.path}' was built correctly for use with PSI.",
                field=not_text[0],
                index_path=self.path,
            )

        missing = [field for field in TRIPLE_FIELDS if not doc.get(field)]
        if missing:
            raise CorpusStructureError(
                f"Document {len(self._documents)} is missing field(s) {', '.join(missing)}. "
                f"Please check that index at '{self.path}' was built correctly for use with PSI.",
                field=missing[0],
                index_path=self.path,
            )

        document = {field: doc[field] for field in TRIPLE_FIELDS}
        document[PREDICATION_FIELD] = doc.get(PREDICATION_FIELD) or predication_term(
            document[SUBJECT_FIELD], document[PREDICATE_FIELD], document[OBJECT_FIELD]
        )

        doc_id = len(self._documents)
        self._documents.append(document)
        for field in REQUIRED_FIELDS:
            self._postings[field].setdefault(document[field], []).append(doc_id)
        return doc_id

    # -------------------------------------------------------------------------
    # Enumeration & lookup
    # -------------------------------------------------------------------------

    @property
    def num_docs(self) -> int:
        return len(self._documents)

    @property
    def fields(self) -> tuple[str, ...]:
        return REQUIRED_FIELDS

    def has_terms(self, field: str) -> bool:
        """True if ``field`` holds at least one term."""
        return bool(self._postings.get(field))

    def terms(self, field: str) -> Iterator[TermStats]:
        """Enumerate the distinct terms of ``field`` in sorted order."""
        postings = self._postings.get(field, {})
        for term in sorted(postings):
            docs = postings[term]
            yield TermStats(field=field, term=term, doc_freq=len(docs), total_freq=len(docs))

    def docs_for_term(self, field: str, term: str) -> list[int]:
        """Ids of the documents containing ``term`` in ``field``."""
        return list(self._postings.get(field, {}).get(term, ()))

    def document(self, doc_id: int) -> dict[str, str]:
        """Field values of one document."""
        return dict(self._documents[doc_id])

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def doc_frequency(self, field: str, term: str) -> int:
        """Number of documents containing ``term`` in ``field``."""
        return len(self._postings.get(field, {}).get(term, ()))

    def term_frequency(self, field: str, term: str) -> int:
        """Total occurrences of ``term`` in ``field`` across the corpus.

        Every field is single-valued, so this equals the document frequency.
        """
        return self.doc_frequency(field, term)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self, path: str | Path) -> Path:
        """Write the index as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "format": INDEX_FORMAT,
            "version": INDEX_VERSION,
            "documents": [
                {field: doc[field] for field in TRIPLE_FIELDS} for doc in self._documents
            ],
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False)
        return path

    @classmethod
    def load(cls, path: str | Path) -> PredicationIndex:
        """Load an index written by ``save``.

        Raises:
            FileNotFoundError: if ``path`` does not exist
            CorpusStructureError: if the file is not a PSI index, or a
                document is malformed or lacks a required field
        """
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            try:
                payload = json.load(f)
            except json.JSONDecodeError as e:
                raise CorpusStructureError(
                    f"Index at '{path}' is not valid JSON: {e}", index_path=str(path)
                ) from e

        if not isinstance(payload, dict) or payload.get("format") != INDEX_FORMAT:
            raise CorpusStructureError(
                f"'{path}' is not a PSI predication index", index_path=str(path)
            )

        documents = payload.get("documents", [])
        if not isinstance(documents, list):
            raise CorpusStructureError(
                f"Index at '{path}' has no document list", index_path=str(path)
            )

        index = cls(documents, path=str(path))
        logger.debug(f"Loaded {index.num_docs:,} predications from {path}")
        return index
