from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Sequence

from ..api import (
    Services,
    default_services,
    index_folder,
    prune,
    search,
    serialize_document,
    serialize_result,
)
from ..domain.errors import ContractError, VectorStoreError
from ..infrastructure.config import embed_model, generation_model, ollama_url
from ..infrastructure.logging import get_logger
from ..infrastructure.ollama.client import OllamaClient
from .parsers import build_parser

logger = get_logger("file_search.cli")


def _print(payload: dict) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def cmd_index(ns, services: Services) -> int:
    """Index a folder; a missing folder is a user error (exit 2)."""
    root = Path(str(ns.dir)).expanduser()
    if not root.is_dir() and not ns.strict:
        _print({"status": "error", "error": f"Folder '{root}' not found", "indexed": 0})
        return 2
    indexed = index_folder(services, root, strict=bool(ns.strict))
    _print({"status": "ok", "root": str(root.resolve()), "indexed": indexed, "total": services.store.count()})
    return 0


def cmd_search(ns, services: Services) -> int:
    results = search(
        services,
        str(ns.q),
        limit=int(ns.k),
        expand=bool(ns.expand),
        min_score=ns.min_score,
    )
    _print({"status": "ok", "query": str(ns.q), "result": [serialize_result(r) for r in results]})
    return 0


def cmd_prune(ns, services: Services) -> int:
    removed = prune(services, str(ns.dir))
    _print({"status": "ok", "removed": removed, "total": services.store.count()})
    return 0


def cmd_list(ns, services: Services) -> int:
    docs = services.store.get_all(int(ns.limit))
    _print({"status": "ok", "total": services.store.count(), "result": [serialize_document(d) for d in docs]})
    return 0


def cmd_remove(ns, services: Services) -> int:
    path = str(Path(str(ns.path)).expanduser().resolve())
    if not services.store.delete(path):
        _print({"status": "error", "error": f"Path '{path}' is not indexed"})
        return 2
    _print({"status": "ok", "removed": path})
    return 0


def cmd_status(ns, services: Services) -> int:
    provider = services.provider
    reachable = provider.is_reachable() if isinstance(provider, OllamaClient) else None
    _print(
        {
            "status": "ok",
            "ollama_url": ollama_url(),
            "ollama_reachable": reachable,
            "embed_model": embed_model(),
            "generation_model": generation_model(),
            "documents": services.store.count(),
        }
    )
    return 0


COMMANDS = {
    "index": cmd_index,
    "search": cmd_search,
    "prune": cmd_prune,
    "list": cmd_list,
    "remove": cmd_remove,
    "status": cmd_status,
}


def run(argv: Optional[Sequence[str]] = None, services: Optional[Services] = None) -> int:
    ns = build_parser().parse_args(list(argv or []))
    owned = services is None
    try:
        services = services or default_services(ns.db)
    except VectorStoreError as exc:
        _print({"status": "error", "error": str(exc)})
        return 3
    try:
        return COMMANDS[ns.cmd](ns, services)
    except (ContractError, FileNotFoundError) as exc:
        _print({"status": "error", "error": str(exc)})
        return 2
    except VectorStoreError as exc:
        logger.error("Command failed | cmd=%s | error=%s", ns.cmd, exc)
        _print({"status": "error", "error": f"{type(exc).__name__}: {exc}"})
        return 3
    finally:
        if owned:
            services.store.close()


def main() -> int:
    import sys
    return run(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
