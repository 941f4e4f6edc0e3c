"""
Hybrid ranking of indexed files against a free-text query.

Each document gets four signals: semantic (embedding cosine), lexical (term
hits in title/path/body), category affinity (file type and resume cues) and
a quality penalty for short or numeric OCR text. The signals are blended with
a weight tuple chosen by what is available for the query, gated on required
terms, clamped to [0, 1] and cut off below a minimum score.

The numeric defaults in ``RankingConfig`` are empirically tuned; override them
with ``dataclasses.replace`` rather than editing the module.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from threading import Event
from typing import List, Optional, Sequence

from ...domain.errors import OperationCancelled
from ...domain.interfaces import GenerationProvider
from ...domain.models import FileSearchResult, IndexedDocument, QueryIntent
from ...domain.vectors import cosine_similarity, terms
from ...infrastructure.config import DOCUMENT_EXTENSIONS, IMAGE_EXTENSIONS
from ...infrastructure.logging import get_logger
from .intent import classify
from .query_expander import QueryExpander
from .snippets import make_snippet

logger = get_logger("file_search.ranker")

RESUME_NAME_TOKENS = frozenset({"resume", "résumé", "cv"})


@dataclass(frozen=True)
class BlendWeights:
    lexical: float
    semantic: float
    category: float


@dataclass(frozen=True)
class RankingConfig:
    # blend tuples
    balanced: BlendWeights = BlendWeights(lexical=0.62, semantic=0.25, category=0.13)
    lexical_only: BlendWeights = BlendWeights(lexical=0.8, semantic=0.0, category=0.2)
    semantic_only: BlendWeights = BlendWeights(lexical=0.0, semantic=0.85, category=0.15)
    # lexical
    title_weight: float = 0.5
    path_weight: float = 0.3
    body_weight: float = 0.08
    body_hit_cap: int = 5
    term_contribution_cap: float = 1.0
    # category affinity
    category_limit: float = 0.5
    document_match_bonus: float = 0.25
    image_match_bonus: float = 0.3
    type_mismatch_penalty: float = 0.2
    resume_name_bonus: float = 0.25
    resume_body_bonus: float = 0.2
    resume_miss_penalty: float = 0.1
    # OCR quality
    ocr_min_terms: int = 10
    ocr_penalty: float = 0.15
    # required-term gate
    gate_penalty: float = 0.1
    gate_mild_penalty: float = 0.6
    gate_high_similarity: float = 0.78
    # cutoffs
    min_score: float = 0.12
    min_score_with_type_preference: float = 0.15


@dataclass(frozen=True)
class DocumentScore:
    semantic: float
    lexical: float
    category: float
    quality: float
    gated: bool
    final: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _extension(path: str) -> str:
    return Path(path).suffix.lower().lstrip(".")


class HybridRanker:
    """Scores a snapshot of stored documents for one query at a time."""

    def __init__(
        self,
        provider: GenerationProvider,
        embedding_model: str,
        config: Optional[RankingConfig] = None,
        expander: Optional[QueryExpander] = None,
    ) -> None:
        self._provider = provider
        self._model = embedding_model
        self.config = config or RankingConfig()
        self._expander = expander

    def rank(
        self,
        query: str,
        documents: Sequence[IndexedDocument],
        limit: int = 10,
        expand: bool = False,
        cancel: Optional[Event] = None,
    ) -> List[FileSearchResult]:
        trimmed = (query or "").strip()
        if not trimmed or not documents:
            return []

        intent = classify(trimmed)
        query_embedding = self._embed_query(trimmed)
        ranking_terms = list(intent.content_terms)
        if expand and self._expander is not None:
            ranking_terms = self._expander.expand(trimmed, ranking_terms)

        cfg = self.config
        cutoff = cfg.min_score_with_type_preference if intent.has_type_preference else cfg.min_score

        scored: List[tuple] = []
        for doc in documents:
            if cancel is not None and cancel.is_set():
                raise OperationCancelled("Search cancelled")
            s = self.score_document(doc, intent, ranking_terms, query_embedding)
            if s.final >= cutoff:
                scored.append((s.final, doc))

        # sort is stable: equal scores keep store order (most recently indexed first)
        scored.sort(key=lambda pair: pair[0], reverse=True)
        logger.debug(
            "Ranked | query=%s | candidates=%d | kept=%d | semantic=%s",
            trimmed, len(documents), len(scored), query_embedding is not None,
        )
        return [
            FileSearchResult(document=doc, snippet=make_snippet(doc.extracted_text, ranking_terms), score=score)
            for score, doc in scored[: max(1, int(limit))]
        ]

    def score_document(
        self,
        doc: IndexedDocument,
        intent: QueryIntent,
        ranking_terms: Sequence[str],
        query_embedding: Optional[Sequence[float]],
    ) -> DocumentScore:
        cfg = self.config
        title = doc.title.lower()
        path = doc.path.lower()
        body = doc.extracted_text.lower()

        semantic = 0.0
        if query_embedding is not None:
            semantic = _clamp(cosine_similarity(query_embedding, doc.embedding), 0.0, 1.0)
        original = [t for t in ranking_terms if t in intent.content_terms]
        synonyms = [t for t in ranking_terms if t not in intent.content_terms]
        if not original:
            original, synonyms = synonyms, []
        lexical = self.lexical_score(original, title, path, body, synonyms=synonyms)
        category = self.category_affinity(doc, intent, title, path, body)
        quality = self.quality_adjustment(doc, intent)

        if query_embedding is None:
            weights = cfg.lexical_only
        elif not intent.content_terms:
            weights = cfg.semantic_only
        else:
            weights = cfg.balanced
        score = weights.lexical * lexical + weights.semantic * semantic + weights.category * category + quality

        gated = False
        if intent.required_terms and not any(
            t in title or t in path or t in body for t in intent.required_terms
        ):
            gated = True
            score *= cfg.gate_mild_penalty if semantic >= cfg.gate_high_similarity else cfg.gate_penalty

        return DocumentScore(
            semantic=semantic,
            lexical=lexical,
            category=category,
            quality=quality,
            gated=gated,
            final=_clamp(score, 0.0, 1.0),
        )

    def lexical_score(
        self,
        ranking_terms: Sequence[str],
        title: str,
        path: str,
        body: str,
        synonyms: Sequence[str] = (),
    ) -> float:
        """Mean per-term hit score in [0, 1]; inputs must already be lowercased.

        The mean is taken over ``ranking_terms`` only. The best-matching
        synonym adds at most one term's worth on top, so an expanded query
        never scores a document lower than the plain query does.
        """
        if not ranking_terms:
            return 0.0
        cap = self.config.term_contribution_cap
        total = sum(self._term_score(term, title, path, body) for term in ranking_terms)
        if synonyms:
            total += max(self._term_score(term, title, path, body) for term in synonyms)
        return _clamp(total / (len(ranking_terms) * cap), 0.0, 1.0)

    def _term_score(self, term: str, title: str, path: str, body: str) -> float:
        cfg = self.config
        raw = (
            cfg.title_weight * title.count(term)
            + cfg.path_weight * path.count(term)
            + cfg.body_weight * min(body.count(term), cfg.body_hit_cap)
        )
        length_weight = min(1.0, 0.5 + len(term) / 10.0)
        return min(cfg.term_contribution_cap, raw * length_weight)

    def category_affinity(self, doc: IndexedDocument, intent: QueryIntent, title: str, path: str, body: str) -> float:
        cfg = self.config
        ext = _extension(doc.path)
        affinity = 0.0
        if intent.prefers_images:
            affinity += cfg.image_match_bonus if ext in IMAGE_EXTENSIONS else -cfg.type_mismatch_penalty
        elif intent.prefers_documents:
            affinity += cfg.document_match_bonus if ext in DOCUMENT_EXTENSIONS else -cfg.type_mismatch_penalty

        if intent.is_resume_query:
            if RESUME_NAME_TOKENS & set(terms(f"{title} {path}")):
                affinity += cfg.resume_name_bonus
            elif "experience" in body and "education" in body:
                affinity += cfg.resume_body_bonus
            else:
                affinity -= cfg.resume_miss_penalty
        return _clamp(affinity, -cfg.category_limit, cfg.category_limit)

    def quality_adjustment(self, doc: IndexedDocument, intent: QueryIntent) -> float:
        """Penalty for OCR text too short or too numeric to rank on."""
        if intent.prefers_images or _extension(doc.path) not in IMAGE_EXTENSIONS:
            return 0.0
        text = doc.extracted_text
        digits = sum(ch.isdigit() for ch in text)
        letters = sum(ch.isalpha() for ch in text)
        if len(terms(text)) < self.config.ocr_min_terms or digits > letters:
            return -self.config.ocr_penalty
        return 0.0

    def _embed_query(self, query: str) -> Optional[List[float]]:
        try:
            vec = self._provider.embed(query, self._model)
        except Exception as exc:  # provider failure drops the semantic signal
            logger.info("Query embedding unavailable; ranking lexically | error=%s", exc)
            return None
        return vec or None
