from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union
from .models import GenerationOptions, ImportedDocument, IndexedDocument


class GenerationProvider(ABC):
    """Port for the embedding/generation provider (e.g., Ollama)."""

    @abstractmethod
    def embed(self, text: str, model: str) -> List[float]:
        """Embed a single text into a vector.

        Raises:
            EmbeddingError: Provider/network failures surface; callers fall back.
        """
        raise NotImplementedError

    @abstractmethod
    def complete(self, prompt: str, model: str, options: Optional[GenerationOptions] = None) -> str:
        """Return a non-streamed completion for ``prompt``.

        Raises:
            GenerationError: Provider/network failures surface; callers decide.
        """
        raise NotImplementedError


class DocumentImporter(ABC):
    """Port for turning a file on disk into plain text."""

    @abstractmethod
    def import_document(self, path: Union[str, Path]) -> ImportedDocument:
        """Extract title, text and mtime for ``path``.

        Raises:
            DocumentImportError: The file could not be read or decoded.
        """
        raise NotImplementedError


class VectorStore(ABC):
    """Port for durable document storage keyed by absolute path."""

    @abstractmethod
    def put(self, document: IndexedDocument) -> None:
        """Insert or replace the record with the same path (id is preserved)."""
        raise NotImplementedError

    @abstractmethod
    def get_all(self, limit: int = 200) -> List[IndexedDocument]:
        """Return up to ``limit`` records, most recently indexed first."""
        raise NotImplementedError

    @abstractmethod
    def get_by_path(self, path: str) -> Optional[IndexedDocument]:
        """Return the record stored for ``path`` or ``None``."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, path: str) -> bool:
        """Remove the record for ``path``; returns True when a row was removed."""
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        """Number of stored records."""
        raise NotImplementedError

    @abstractmethod
    def list_paths(self) -> List[str]:
        """All stored paths, sorted."""
        raise NotImplementedError

    def close(self) -> None:
        """Release underlying resources; default is a no-op."""
