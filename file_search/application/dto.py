from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from threading import Event
from typing import Callable, FrozenSet, Optional, Union

ProgressCb = Callable[[str], None]


@dataclass(frozen=True)
class IndexFolderRequest:
    root: Union[str, Path]
    strict: bool = False
    extensions: Optional[FrozenSet[str]] = None
    cancel: Optional[Event] = field(default=None, compare=False)
    progress: Optional[ProgressCb] = field(default=None, compare=False)


@dataclass
class IndexFolderResponse:
    """Outcome of one folder scan; ``indexed`` counts only successful writes."""
    root: str
    scanned: int = 0
    indexed: int = 0
    skipped: int = 0
    failed: int = 0
    fallbacks: int = 0
    cancelled: bool = False


@dataclass(frozen=True)
class SearchRequest:
    query: str
    limit: int = 10
    expand: bool = False
    candidate_limit: Optional[int] = None
    cancel: Optional[Event] = field(default=None, compare=False)
