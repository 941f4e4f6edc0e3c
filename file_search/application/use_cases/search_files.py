from __future__ import annotations

from typing import List

from ..dto import SearchRequest
from ..services.ranker import HybridRanker
from ...domain.errors import ContractError
from ...domain.interfaces import VectorStore
from ...domain.models import FileSearchResult
from ...infrastructure.config import candidate_limit


class SearchFilesUseCase:
    """Use-case: snapshot the store and rank it against the query."""

    def __init__(self, ranker: HybridRanker, store: VectorStore) -> None:
        self._ranker = ranker
        self._store = store

    def execute(self, req: SearchRequest) -> List[FileSearchResult]:
        """
        Returns ranked results for ``req.query``.

        An empty query or an empty store yields an empty list, not an error.

        Raises:
            ContractError: ``limit`` is below 1.
            OperationCancelled: ``req.cancel`` was set while ranking.
        """
        if req.limit < 1:
            raise ContractError(f"limit must be >= 1, got {req.limit}")
        if not req.query.strip():
            return []
        docs = self._store.get_all(req.candidate_limit or candidate_limit())
        if not docs:
            return []
        return self._ranker.rank(req.query, docs, limit=req.limit, expand=req.expand, cancel=req.cancel)
