from __future__ import annotations

from .config import env_str


def http_timeout_seconds() -> float:
    """Per-request timeout for provider calls; a timeout counts as a provider failure."""
    try:
        value = float(env_str("FILE_SEARCH_HTTP_TIMEOUT", "15"))
    except ValueError:
        return 15.0
    return value if value > 0 else 15.0
