"""
Custom exceptions for dealgraph.

Missing optional data is never an error; these cover the corpus boundary
and post-assembly integrity checks only.
"""


class DealGraphError(Exception):
    """Base exception for all dealgraph errors."""

    pass


class CorpusLoadError(DealGraphError):
    """A corpus file could not be read or a record failed validation."""

    def __init__(self, message: str, record_index: int | None = None):
        super().__init__(message)
        self.record_index = record_index


class GraphIntegrityError(DealGraphError):
    """An assembled graph broke a structural invariant (dangling edge, duplicate id)."""

    pass
