from __future__ import annotations

import re
from typing import Iterable

NO_PREVIEW = "No preview available"

_WS_RE = re.compile(r"\s+")


def make_snippet(text: str, terms: Iterable[str], before: int = 90, after: int = 180, head: int = 220) -> str:
    """Preview window around the earliest hit of any term, or the head of the text."""
    if not text or not text.strip():
        return NO_PREVIEW
    # offsets come from the original text; lower() can change its length
    matches = [re.search(re.escape(t), text, re.IGNORECASE) for t in terms if t]
    hits = [m.start() for m in matches if m is not None]
    if hits:
        pos = min(hits)
        window = text[max(0, pos - before): pos + after]
    else:
        window = text[:head]
    return _WS_RE.sub(" ", window).strip() or NO_PREVIEW
