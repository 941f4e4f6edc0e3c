"""
Query intent classification.

Category words ("resume", "photo", "pdf") steer which file types are favored;
every other content word is required to appear in a candidate.
"""
from __future__ import annotations

from typing import FrozenSet, List

from ...domain.models import QueryIntent
from ...domain.vectors import terms

STOPWORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "and", "or", "of", "in", "on", "at", "to", "for", "from",
    "with", "by", "about", "into", "onto", "over", "under", "as", "is", "are",
    "was", "were", "be", "been", "it", "its", "i", "me", "my", "mine", "we",
    "our", "you", "your", "this", "that", "these", "those", "there", "here",
    "what", "which", "who", "whom", "where", "when", "why", "how", "do", "does",
    "did", "can", "could", "please", "find", "show", "get", "search", "look",
    "open", "locate", "give", "any", "some", "all",
})

RESUME_TERMS: FrozenSet[str] = frozenset({"resume", "résumé", "resumes", "cv", "cvs", "curriculum", "vitae"})

IMAGE_TERMS: FrozenSet[str] = frozenset({
    "image", "images", "photo", "photos", "picture", "pictures", "pic", "pics",
    "screenshot", "screenshots", "png", "jpg", "jpeg", "heic", "scan", "scans",
})

DOCUMENT_TERMS: FrozenSet[str] = frozenset({
    "document", "documents", "doc", "docs", "docx", "pdf", "pdfs", "file",
    "files", "report", "reports", "paper", "papers", "note", "notes", "text",
})

CATEGORY_TERMS: FrozenSet[str] = RESUME_TERMS | IMAGE_TERMS | DOCUMENT_TERMS


def _dedupe(items: List[str]) -> List[str]:
    seen: set[str] = set()
    out: List[str] = []
    for it in items:
        if it not in seen:
            seen.add(it)
            out.append(it)
    return out


def classify(query: str) -> QueryIntent:
    normalized = (query or "").strip().lower()
    content = _dedupe([t for t in terms(normalized) if t not in STOPWORDS])
    tokens = set(content)

    is_resume = bool(tokens & RESUME_TERMS)
    prefers_images = bool(tokens & IMAGE_TERMS)
    prefers_documents = (bool(tokens & DOCUMENT_TERMS) or is_resume) and not prefers_images

    return QueryIntent(
        normalized_query=normalized,
        content_terms=tuple(content),
        required_terms=tuple(t for t in content if t not in CATEGORY_TERMS),
        prefers_documents=prefers_documents,
        prefers_images=prefers_images,
        is_resume_query=is_resume,
    )
