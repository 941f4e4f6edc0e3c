from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import time
import uuid


def new_document_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class IndexedDocument:
    """A file that has been indexed into the vector store.

    Fields:
        title: Display name (filename stem unless the importer knows better).
        path: Absolute filesystem path; unique key of the store.
        embedding: Provider embedding or 512-d fallback vector; never empty once stored.
        extracted_text: Cached text, already capped by the indexer.
        last_modified: Source file mtime (epoch seconds) at index time, if known.
        last_indexed: Epoch seconds of the last successful write.
        id: Stable identifier assigned at first index.
    """
    title: str
    path: str
    embedding: List[float]
    extracted_text: str = ""
    last_modified: Optional[float] = None
    last_indexed: float = field(default_factory=time.time)
    id: str = field(default_factory=new_document_id)


@dataclass(frozen=True)
class ImportedDocument:
    """Importer output for a single file."""
    title: str
    extracted_text: str
    last_modified: Optional[float] = None


@dataclass(frozen=True)
class FileSearchResult:
    """Ranked match for a query; score is clamped to [0, 1]."""
    document: IndexedDocument
    snippet: str
    score: float


@dataclass(frozen=True)
class QueryIntent:
    """Structured reading of a free-text query.

    Fields:
        normalized_query: Lowercased, whitespace-trimmed query.
        content_terms: Tokens left after stopword removal, in query order.
        required_terms: Content terms that are not category words; at least one
            must appear in a candidate to escape the required-term gate.
        prefers_documents: Query hints at document files (pdf, report, resume...).
        prefers_images: Query hints at image files; suppresses prefers_documents.
        is_resume_query: Query asks for a resume/CV.
    """
    normalized_query: str
    content_terms: Tuple[str, ...] = ()
    required_terms: Tuple[str, ...] = ()
    prefers_documents: bool = False
    prefers_images: bool = False
    is_resume_query: bool = False

    @property
    def has_type_preference(self) -> bool:
        return self.prefers_documents or self.prefers_images


@dataclass(frozen=True)
class GenerationOptions:
    """Sampling options for a single completion request.

    Fields:
        temperature: Sampling temperature; ``None`` keeps the server default.
        max_tokens: Upper bound on generated tokens (Ollama ``num_predict``).
        json_output: Ask the server to constrain output to JSON.
    """
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    json_output: bool = False
