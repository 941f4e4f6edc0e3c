"""
Pytest configuration and fixtures for file search tests.

Provides deterministic provider/importer stubs, a temporary SQLite store and
a small on-disk corpus.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence
import pytest

from file_search.domain.errors import DocumentImportError, EmbeddingError, GenerationError
from file_search.domain.interfaces import DocumentImporter, GenerationProvider
from file_search.domain.models import ImportedDocument
from file_search.domain.vectors import fallback_vector
from file_search.infrastructure.sqlite.store import SqliteVectorStore


class StubProvider(GenerationProvider):
    """Deterministic provider: explicit vectors per text, else the hashed vector."""

    def __init__(
        self,
        vectors: Optional[Dict[str, Sequence[float]]] = None,
        fail: bool = False,
        completion: Optional[str] = None,
    ) -> None:
        self.vectors = dict(vectors or {})
        self.fail = fail
        self.completion = completion
        self.embed_calls: List[str] = []
        self.complete_calls: List[str] = []

    def embed(self, text, model):
        self.embed_calls.append(text)
        if self.fail:
            raise EmbeddingError("provider down")
        if text in self.vectors:
            return list(self.vectors[text])
        return fallback_vector(text)

    def complete(self, prompt, model, options=None):
        self.complete_calls.append(prompt)
        if self.completion is None:
            raise GenerationError("no model loaded")
        return self.completion


class StubImporter(DocumentImporter):
    """Reads files as UTF-8; paths listed in ``broken`` raise, ``on_import`` runs after each call."""

    def __init__(self, broken: Sequence[str] = (), on_import=None) -> None:
        self.broken = {os.path.basename(b) for b in broken}
        self.on_import = on_import
        self.calls: List[Path] = []

    def import_document(self, path):
        p = Path(path)
        self.calls.append(p)
        try:
            if p.name in self.broken:
                raise DocumentImportError(f"cannot decode {p.name}")
            return ImportedDocument(
                title=p.stem,
                extracted_text=p.read_text(encoding="utf-8"),
                last_modified=p.stat().st_mtime,
            )
        finally:
            if self.on_import is not None:
                self.on_import(len(self.calls))


@pytest.fixture
def stub_provider():
    return StubProvider()


@pytest.fixture
def failing_provider():
    return StubProvider(fail=True)


@pytest.fixture
def stub_importer():
    return StubImporter()


@pytest.fixture
def store(tmp_path):
    s = SqliteVectorStore(tmp_path / "index" / "files.sqlite3")
    yield s
    s.close()


@pytest.fixture
def corpus(tmp_path):
    """Folder with five indexable files, one ignored extension and a nested dir."""
    root = tmp_path / "corpus"
    (root / "nested").mkdir(parents=True)
    (root / "budget.txt").write_text("Quarterly budget forecast for the marketing team.")
    (root / "groceries.md").write_text("# Groceries\n\nMilk, eggs, bread and coffee.")
    (root / "travel.txt").write_text("Flight itinerary to Lisbon with hotel booking.")
    (root / "nested" / "recipe.md").write_text("Grandma's apple pie recipe with cinnamon.")
    (root / "nested" / "meeting.txt").write_text("Minutes of the weekly planning meeting.")
    (root / "ignored.exe").write_text("binary")
    return root


@pytest.fixture
def clean_environment(monkeypatch, tmp_path):
    """Clear config variables and run from an empty directory (no stray .env)."""
    for var in (
        "OLLAMA_URL",
        "EMBED_MODEL",
        "GENERATION_MODEL",
        "FILE_SEARCH_DB",
        "FILE_SEARCH_TEXT_MAX",
        "FILE_SEARCH_CANDIDATE_LIMIT",
        "FILE_SEARCH_EXTENSIONS",
        "FILE_SEARCH_HTTP_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    yield tmp_path
