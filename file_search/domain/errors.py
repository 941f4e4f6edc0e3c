from __future__ import annotations


class EmbeddingError(RuntimeError):
    """Raised when embedding provider fails."""


class GenerationError(RuntimeError):
    """Raised when text generation provider fails."""


class VectorStoreError(RuntimeError):
    """Raised when vector store persistence fails."""


class DocumentImportError(RuntimeError):
    """Raised when a file cannot be turned into text."""


class ContractError(ValueError):
    """Raised when request violates documented contract (e.g., limit < 1)."""


class OperationCancelled(RuntimeError):
    """Raised when a search is aborted through its cancel event."""
