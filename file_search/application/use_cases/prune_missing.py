from __future__ import annotations

import os
from pathlib import Path
from typing import Union

from ...domain.interfaces import VectorStore
from ...infrastructure.logging import get_logger

logger = get_logger("file_search.prune")


class PruneMissingUseCase:
    """Use-case: drop stored records under a folder whose files are gone."""

    def __init__(self, store: VectorStore) -> None:
        self._store = store

    def execute(self, root: Union[str, Path]) -> int:
        prefix = str(Path(root).expanduser().resolve())
        removed = 0
        for path in self._store.list_paths():
            if path != prefix and not path.startswith(prefix.rstrip(os.sep) + os.sep):
                continue
            if not Path(path).exists() and self._store.delete(path):
                removed += 1
        logger.info("Prune completed | root=%s | removed=%d", prefix, removed)
        return removed
