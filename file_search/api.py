from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from threading import Event
from typing import Any, Dict, List, Optional, Union

from .application.dto import IndexFolderRequest, ProgressCb, SearchRequest
from .application.services.query_expander import QueryExpander
from .application.services.ranker import HybridRanker, RankingConfig
from .application.use_cases.index_folder import IndexFolderUseCase
from .application.use_cases.prune_missing import PruneMissingUseCase
from .application.use_cases.search_files import SearchFilesUseCase
from .domain.interfaces import DocumentImporter, GenerationProvider, VectorStore
from .domain.models import FileSearchResult, IndexedDocument
from .infrastructure.config import db_path, embed_model, generation_model
from .infrastructure.importers.filesystem import FileSystemDocumentImporter
from .infrastructure.logging import get_logger
from .infrastructure.ollama.client import OllamaClient
from .infrastructure.sqlite.store import SqliteVectorStore

logger = get_logger("file_search.api")


@dataclass
class Services:
    """Collaborators wired together for one engine instance."""
    store: VectorStore
    provider: GenerationProvider
    importer: DocumentImporter
    embedding_model: str
    generation_model: str
    ranking: RankingConfig


def default_services(database: Optional[Union[str, Path]] = None) -> Services:
    return Services(
        store=SqliteVectorStore(database or db_path()),
        provider=OllamaClient(),
        importer=FileSystemDocumentImporter(),
        embedding_model=embed_model(),
        generation_model=generation_model(),
        ranking=RankingConfig(),
    )


def index_folder(
    services: Services,
    root: Union[str, Path],
    strict: bool = False,
    cancel: Optional[Event] = None,
    progress: Optional[ProgressCb] = None,
) -> int:
    """Index ``root`` and return the number of files actually (re)indexed."""
    resp = IndexFolderUseCase(
        services.importer, services.provider, services.store, services.embedding_model
    ).execute(IndexFolderRequest(root=root, strict=strict, cancel=cancel, progress=progress))
    return resp.indexed


def search(
    services: Services,
    query: str,
    limit: int = 10,
    expand: bool = False,
    min_score: Optional[float] = None,
    cancel: Optional[Event] = None,
) -> List[FileSearchResult]:
    config = services.ranking
    if min_score is not None:
        config = replace(
            config,
            min_score=float(min_score),
            min_score_with_type_preference=max(float(min_score), config.min_score_with_type_preference),
        )
    expander = QueryExpander(services.provider, services.generation_model) if expand else None
    ranker = HybridRanker(services.provider, services.embedding_model, config=config, expander=expander)
    return SearchFilesUseCase(ranker, services.store).execute(
        SearchRequest(query=query, limit=limit, expand=expand, cancel=cancel)
    )


def prune(services: Services, root: Union[str, Path]) -> int:
    return PruneMissingUseCase(services.store).execute(root)


def serialize_document(doc: IndexedDocument, include_text: bool = False) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": doc.id,
        "title": doc.title,
        "path": doc.path,
        "embedding_dim": len(doc.embedding),
        "last_modified": doc.last_modified,
        "last_indexed": doc.last_indexed,
    }
    if include_text:
        out["extracted_text"] = doc.extracted_text
    return out


def serialize_result(result: FileSearchResult) -> Dict[str, Any]:
    return {
        "score": round(float(result.score), 4),
        "snippet": result.snippet,
        **serialize_document(result.document),
    }
