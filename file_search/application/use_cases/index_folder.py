from __future__ import annotations

import time
from pathlib import Path
from typing import List, Optional

from ..dto import IndexFolderRequest, IndexFolderResponse
from ...domain.errors import VectorStoreError
from ...domain.interfaces import DocumentImporter, GenerationProvider, VectorStore
from ...domain.models import IndexedDocument, new_document_id
from ...domain.vectors import fallback_vector
from ...infrastructure.config import supported_extensions, text_max
from ...infrastructure.logging import get_logger
from ...ingestion.folder_scanner import file_mtime, iter_candidate_files

logger = get_logger("file_search.indexer")


def needs_reindex(existing: Optional[IndexedDocument], mtime: Optional[float]) -> bool:
    """False only when both timestamps are known and the stored one is not older."""
    if existing is None or existing.last_modified is None or mtime is None:
        return True
    return existing.last_modified < mtime


class IndexFolderUseCase:
    """Use-case: walk a folder, (re)index new or changed files, and write them to the store.

    One file at a time: import text, embed it (falling back to the hashed
    vector when the provider fails), then replace the stored record. A failure
    on one file is logged and counted; the walk continues.
    """

    def __init__(
        self,
        importer: DocumentImporter,
        provider: GenerationProvider,
        store: VectorStore,
        embedding_model: str,
        max_text_chars: Optional[int] = None,
    ) -> None:
        self._importer = importer
        self._provider = provider
        self._store = store
        self._model = embedding_model
        self._max_chars = max_text_chars if max_text_chars is not None else text_max()

    def execute(self, req: IndexFolderRequest) -> IndexFolderResponse:
        root = Path(req.root).expanduser().resolve()
        resp = IndexFolderResponse(root=str(root))
        if not root.is_dir():
            if req.strict:
                raise FileNotFoundError(f"Folder not found or not a directory: {root}")
            logger.warning("Index skipped | root=%s | reason=not a directory", root)
            return resp

        extensions = req.extensions or supported_extensions()
        logger.info("Index request | root=%s", root)
        for path in iter_candidate_files(root, extensions):
            if req.cancel is not None and req.cancel.is_set():
                resp.cancelled = True
                logger.info("Index cancelled | root=%s | indexed=%d", root, resp.indexed)
                break
            resp.scanned += 1
            if self._index_file(path, resp) and req.progress:
                req.progress(f"Indexed {path.name}")

        logger.info(
            "Index completed | root=%s | scanned=%d | indexed=%d | skipped=%d | failed=%d | fallbacks=%d",
            root, resp.scanned, resp.indexed, resp.skipped, resp.failed, resp.fallbacks,
        )
        return resp

    def _index_file(self, path: Path, resp: IndexFolderResponse) -> bool:
        key = str(path)
        try:
            existing = self._store.get_by_path(key)
        except VectorStoreError as exc:
            logger.error("Index lookup failed | path=%s | error=%s", key, exc)
            resp.failed += 1
            return False

        mtime = file_mtime(path)
        if not needs_reindex(existing, mtime):
            resp.skipped += 1
            return False

        try:
            imported = self._importer.import_document(path)
        except Exception as exc:  # any importer failure skips just this file
            logger.warning("Import failed | path=%s | error=%s", key, exc)
            resp.failed += 1
            return False

        text = (imported.extracted_text or "")[: self._max_chars]
        embedding = self._embed(text, resp)
        doc = IndexedDocument(
            id=existing.id if existing is not None else new_document_id(),
            title=imported.title or path.stem,
            path=key,
            embedding=embedding,
            extracted_text=text,
            last_modified=mtime if mtime is not None else imported.last_modified,
            last_indexed=time.time(),
        )
        try:
            self._store.put(doc)
        except VectorStoreError as exc:
            logger.error("Index write failed | path=%s | error=%s", key, exc)
            resp.failed += 1
            return False
        resp.indexed += 1
        return True

    def _embed(self, text: str, resp: IndexFolderResponse) -> List[float]:
        try:
            vec = self._provider.embed(text, self._model)
        except Exception as exc:  # provider down or timed out
            logger.debug("Embedding fell back to hashed vector | error=%s", exc)
            vec = []
        if not vec:
            resp.fallbacks += 1
            return fallback_vector(text)
        return list(vec)
