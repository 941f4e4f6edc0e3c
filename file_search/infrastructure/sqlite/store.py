from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from ...domain.errors import VectorStoreError
from ...domain.interfaces import VectorStore
from ...domain.models import IndexedDocument
from ..logging import get_logger

logger = get_logger("file_search.store")

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS indexed_documents (
  id TEXT NOT NULL,
  title TEXT NOT NULL,
  path TEXT NOT NULL UNIQUE,
  embedding BLOB NOT NULL,
  embedding_dim INTEGER NOT NULL,
  extracted_text TEXT NOT NULL DEFAULT '',
  last_modified REAL,
  last_indexed REAL NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_documents_last_indexed ON indexed_documents(last_indexed);
"""

_COLUMNS = "id, title, path, embedding, embedding_dim, extracted_text, last_modified, last_indexed"


def _encode(values: List[float]) -> bytes:
    return np.asarray(values, dtype="<f8").tobytes()


def _decode(blob: bytes, dim: int) -> List[float]:
    return np.frombuffer(blob, dtype="<f8", count=int(dim)).tolist()


def _row_to_document(row: tuple) -> IndexedDocument:
    doc_id, title, path, blob, dim, text, last_modified, last_indexed = row
    return IndexedDocument(
        id=str(doc_id),
        title=str(title),
        path=str(path),
        embedding=_decode(blob, dim),
        extracted_text=text or "",
        last_modified=float(last_modified) if last_modified is not None else None,
        last_indexed=float(last_indexed),
    )


class SqliteVectorStore(VectorStore):
    """Vector store adapter backed by a single SQLite file.

    One connection is shared by all callers; every mutation takes the write
    lock and commits its own transaction, so a record is either fully written
    or not at all. Reads materialize rows into a list (a snapshot).
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = str(db_path) if str(db_path) == ":memory:" else str(Path(db_path).expanduser())
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._con = sqlite3.connect(self.db_path, check_same_thread=False)
            self._con.executescript(SCHEMA_SQL)
        except sqlite3.Error as exc:
            raise VectorStoreError(f"Cannot open index at {self.db_path}: {exc}") from exc
        logger.debug("Opened index | path=%s", self.db_path)

    def put(self, document: IndexedDocument) -> None:
        if not document.embedding:
            raise VectorStoreError(f"Refusing to store empty embedding for {document.path}")
        params = (
            document.id,
            document.title,
            document.path,
            _encode(document.embedding),
            len(document.embedding),
            document.extracted_text,
            document.last_modified,
            document.last_indexed,
        )
        # id keeps the value first assigned to this path
        sql = f"""
            INSERT INTO indexed_documents({_COLUMNS})
            VALUES(?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(path) DO UPDATE SET
              title=excluded.title,
              embedding=excluded.embedding,
              embedding_dim=excluded.embedding_dim,
              extracted_text=excluded.extracted_text,
              last_modified=excluded.last_modified,
              last_indexed=excluded.last_indexed
        """
        with self._lock:
            try:
                with self._con:
                    self._con.execute(sql, params)
            except sqlite3.Error as exc:
                raise VectorStoreError(f"Failed to write {document.path}: {exc}") from exc

    def get_all(self, limit: int = 200) -> List[IndexedDocument]:
        rows = self._fetch(
            f"SELECT {_COLUMNS} FROM indexed_documents ORDER BY last_indexed DESC, rowid DESC LIMIT ?",
            (max(0, int(limit)),),
        )
        return [_row_to_document(r) for r in rows]

    def get_by_path(self, path: str) -> Optional[IndexedDocument]:
        rows = self._fetch(f"SELECT {_COLUMNS} FROM indexed_documents WHERE path = ?", (str(path),))
        return _row_to_document(rows[0]) if rows else None

    def list_paths(self) -> List[str]:
        return [str(r[0]) for r in self._fetch("SELECT path FROM indexed_documents ORDER BY path", ())]

    def delete(self, path: str) -> bool:
        with self._lock:
            try:
                with self._con:
                    cur = self._con.execute("DELETE FROM indexed_documents WHERE path = ?", (str(path),))
            except sqlite3.Error as exc:
                raise VectorStoreError(f"Failed to delete {path}: {exc}") from exc
        return cur.rowcount > 0

    def count(self) -> int:
        rows = self._fetch("SELECT COUNT(*) FROM indexed_documents", ())
        return int(rows[0][0])

    def close(self) -> None:
        with self._lock:
            self._con.close()

    def __enter__(self) -> "SqliteVectorStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _fetch(self, sql: str, params: tuple) -> list:
        # sqlite3 connections are not safe for interleaved use across threads
        with self._lock:
            try:
                return self._con.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise VectorStoreError(f"Index read failed: {exc}") from exc
