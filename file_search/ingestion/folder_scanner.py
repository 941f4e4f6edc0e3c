from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, Optional

from ..infrastructure.logging import get_logger

logger = get_logger("file_search.ingestion")


def iter_candidate_files(root: Path, extensions: Iterable[str]) -> Iterator[Path]:
    """Yield files under ``root`` whose extension is allowed, in sorted walk order.

    Directories that cannot be listed are logged and skipped; the walk goes on.
    """
    allowed = frozenset(e.lower().lstrip(".") for e in extensions)

    def on_error(err: OSError) -> None:
        logger.warning("Skipping unreadable directory | path=%s | error=%s", err.filename, err)

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        for name in sorted(filenames):
            p = Path(dirpath) / name
            if p.suffix.lower().lstrip(".") in allowed and p.is_file():
                yield p


def file_mtime(path: Path) -> Optional[float]:
    try:
        return float(path.stat().st_mtime)
    except OSError:
        return None
