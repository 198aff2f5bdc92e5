"""
Error taxonomy for the search core.

Port failures (embedding, vector index, generation) are transient and handled per
item or per query. Configuration errors are fatal and raised before traffic starts.
"""

from typing import Optional


class SearchError(Exception):
    """Base class for every error raised by the search core."""


class PortError(SearchError):
    """A call to an external collaborator failed."""

    stage = "port"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class EmbeddingError(PortError):
    stage = "embedding"


class VectorIndexError(PortError):
    stage = "search"


class GenerationError(PortError):
    stage = "generation"


class ConfigurationError(SearchError):
    """Invalid or inconsistent configuration. Not recoverable at request time."""
