from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Local file search (Ollama embeddings + SQLite index)")
    ap.add_argument("--db", default=None, help="Index database path; defaults to $FILE_SEARCH_DB")
    sub = ap.add_subparsers(dest="cmd", required=True)

    # Scan a folder and (re)index new or changed files
    ix = sub.add_parser("index")
    ix.add_argument("--dir", required=True, help="Folder to scan recursively")
    ix.add_argument("--strict", action="store_true", help="Fail when the folder does not exist")

    sq = sub.add_parser("search")
    sq.add_argument("--q", required=True)
    sq.add_argument("--k", type=int, default=10)
    sq.add_argument("--expand", action="store_true", help="Widen terms with model-suggested synonyms")
    sq.add_argument("--min-score", type=float, default=None)

    # Drop records whose files were deleted
    pr = sub.add_parser("prune")
    pr.add_argument("--dir", required=True)

    ls = sub.add_parser("list")
    ls.add_argument("--limit", type=int, default=50)

    rm = sub.add_parser("remove")
    rm.add_argument("--path", required=True)

    sub.add_parser("status")
    return ap
