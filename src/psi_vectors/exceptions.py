"""Exceptions raised by a PSI build."""

from __future__ import annotations


class PSIError(Exception):
    """Base class for fatal PSI build errors."""


class ConfigurationError(PSIError):
    """Raised before a build starts when its configuration is unusable."""


class CorpusStructureError(PSIError):
    """Raised when the predication index is malformed.

    A required field with no terms, or a document missing a field, means no
    meaningful vocabulary can be built, so the whole build is aborted.
    """

    def __init__(self, message: str, field: str | None = None, index_path: str | None = None):
        self.field = field
        self.index_path = index_path
        super().__init__(message)
