from __future__ import annotations

import json
import re
from typing import List, Sequence

from ...domain.interfaces import GenerationProvider
from ...domain.models import GenerationOptions
from ...domain.vectors import terms as tokenize
from ...infrastructure.logging import get_logger

logger = get_logger("file_search.expander")

PROMPT_TEMPLATE = (
    "You help a desktop file search engine. Suggest up to {count} single-word synonyms "
    "or closely related keywords for the search query below.\n"
    'Respond with strict JSON only, exactly in the form {{"keywords": ["word", "word"]}}.\n'
    "Query: {query}"
)

_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)


def parse_keywords(raw: str) -> List[str]:
    """Pull keyword strings out of a model reply.

    Accepts a JSON object with a ``keywords`` (or ``synonyms``) array, a bare
    JSON array, or either of those embedded in surrounding prose.

    Raises:
        ValueError: No usable JSON found.
    """
    text = (raw or "").strip()
    candidates = [text]
    for pattern in (_OBJECT_RE, _ARRAY_RE):
        m = pattern.search(text)
        if m:
            candidates.append(m.group(0))
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            data = data.get("keywords", data.get("synonyms"))
        if isinstance(data, list):
            return [str(x) for x in data if isinstance(x, str)]
    raise ValueError("No keyword list in model response")


class QueryExpander:
    """Best-effort synonym expansion through the generation model."""

    def __init__(self, provider: GenerationProvider, model: str, max_synonyms: int = 8) -> None:
        self._provider = provider
        self._model = model
        self._max = max_synonyms

    def expand(self, query: str, base_terms: Sequence[str]) -> List[str]:
        """Return ``base_terms`` followed by new synonym terms; on any failure, ``base_terms``."""
        original = list(base_terms)
        if not query.strip():
            return original
        prompt = PROMPT_TEMPLATE.format(count=self._max, query=query.strip())
        try:
            raw = self._provider.complete(
                prompt, self._model, GenerationOptions(temperature=0.1, max_tokens=128, json_output=True)
            )
            keywords = parse_keywords(raw)
        except Exception as exc:  # provider or parse failure; expansion is optional
            logger.debug("Query expansion skipped | query=%s | error=%s", query, exc)
            return original

        out = list(original)
        added = 0
        for kw in keywords:
            for term in tokenize(kw):
                if term not in out and added < self._max:
                    out.append(term)
                    added += 1
        logger.debug("Query expanded | query=%s | added=%d", query, added)
        return out
