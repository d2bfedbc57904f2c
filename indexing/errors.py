"""Errors raised while indexing files into the vector store."""


class IndexingError(Exception):
    """Base class for indexing failures."""


class ConfigurationError(IndexingError):
    """Required settings are missing or inconsistent."""


class ProviderError(IndexingError):
    """The embedding provider could not produce a vector."""


class StoreError(IndexingError):
    """The vector store rejected or failed a request."""


class ExtractionSkip(IndexingError):
    """The file has no text worth indexing (binary or unsupported)."""
