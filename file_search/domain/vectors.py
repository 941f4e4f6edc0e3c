"""Vector helpers shared by the indexer and the ranker.

The fallback vector is a hashed bag-of-words: it needs no network and is
bit-identical across platforms and interpreter runs (no ``hash()`` seeding).
"""
from __future__ import annotations

import re
from typing import List, Optional, Sequence

import numpy as np

FALLBACK_VECTOR_SIZE = 512

_TOKEN_RE = re.compile(r"[^\W_]+")
_MASK_64 = (1 << 64) - 1
_MASK_63 = (1 << 63) - 1


def terms(text: str) -> List[str]:
    """Lowercase alphanumeric runs longer than one character."""
    return [t for t in _TOKEN_RE.findall((text or "").lower()) if len(t) > 1]


def stable_bucket(token: str, modulo: int = FALLBACK_VECTOR_SIZE) -> int:
    """djb2 over UTF-8 bytes in wrapping 64-bit arithmetic."""
    h = 5381
    for byte in token.encode("utf-8"):
        h = ((h << 5) + h + byte) & _MASK_64
    return (h & _MASK_63) % max(modulo, 1)


def fallback_vector(text: str, size: int = FALLBACK_VECTOR_SIZE) -> List[float]:
    vec = np.zeros(size, dtype=np.float64)
    for token in terms(text):
        vec[stable_bucket(token, size)] += 1.0
    norm = float(np.linalg.norm(vec))
    if norm > 0:
        vec = vec / norm
    return vec.tolist()


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """Cosine over the overlapping prefix; 0 for empty or zero-norm input."""
    if not a or not b:
        return 0.0
    n = min(len(a), len(b))
    va = np.asarray(a[:n], dtype=np.float64)
    vb = np.asarray(b[:n], dtype=np.float64)
    na = float(np.linalg.norm(va))
    nb = float(np.linalg.norm(vb))
    if na == 0.0 or nb == 0.0:
        return 0.0
    return float(np.dot(va, vb) / (na * nb))
