from __future__ import annotations

import contextlib
import os
from pathlib import Path
from typing import Dict, FrozenSet, Optional

DOCUMENT_EXTENSIONS = frozenset({"md", "txt", "rtf", "text", "markdown", "pdf", "docx"})
IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "heic", "tif", "tiff"})
DEFAULT_EXTENSIONS = DOCUMENT_EXTENSIONS | IMAGE_EXTENSIONS


def parse_dotenv(dotenv_path: Path) -> Dict[str, str]:
    """Parse a simple .env file (KEY=VALUE per line, '#' comments, quotes stripped)."""
    env: Dict[str, str] = {}
    if dotenv_path.exists():
        with contextlib.suppress(OSError):
            for raw in dotenv_path.read_text(encoding="utf-8", errors="ignore").splitlines():
                s = raw.strip()
                if not s or s.startswith("#") or "=" not in s:
                    continue
                k, v = s.split("=", 1)
                k = k.strip()
                v = v.strip().strip('"').strip("'")
                if k:
                    env[k] = v
    return env


def env_get(key: str) -> Optional[str]:
    """Get environment value from process env, falling back to .env in CWD."""
    v = os.getenv(key)
    if v is not None and v.strip():
        return v.strip()
    v2 = parse_dotenv(Path(".env")).get(key)
    return v2.strip() if v2 is not None and v2.strip() else None


def env_str(name: str, default: str) -> str:
    return env_get(name) or default


def env_int(name: str, default: int) -> int:
    try:
        return int(env_str(name, str(default)))
    except ValueError:
        return default


def ollama_url() -> str:
    return env_str("OLLAMA_URL", "http://localhost:11434").rstrip("/")


def embed_model() -> str:
    return env_str("EMBED_MODEL", "nomic-embed-text")


def generation_model() -> str:
    return env_str("GENERATION_MODEL", "mistral")


def db_path() -> Path:
    return Path(env_str("FILE_SEARCH_DB", "~/.file_search/index.sqlite3")).expanduser()


def text_max() -> int:
    """
    Characters of extracted text cached per document.
    Defaults to 50000 when FILE_SEARCH_TEXT_MAX is not set or invalid.
    """
    return env_int("FILE_SEARCH_TEXT_MAX", 50000)


def candidate_limit() -> int:
    """Number of most recently indexed records a query ranks."""
    return env_int("FILE_SEARCH_CANDIDATE_LIMIT", 200)


def supported_extensions() -> FrozenSet[str]:
    raw = env_get("FILE_SEARCH_EXTENSIONS")
    if not raw:
        return DEFAULT_EXTENSIONS
    exts = {e.strip().lower().lstrip(".") for e in raw.split(",")}
    return frozenset(e for e in exts if e) or DEFAULT_EXTENSIONS
