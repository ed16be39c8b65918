"""Repo-root discovery, path normalization, tree walking, and glob matching."""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

# Directories never descended into when enumerating the tree.
EXCLUDED_DIRS = frozenset({
    "node_modules",
    ".next",
    "build",
    "dist",
    ".git",
    "coverage",
    ".turbo",
})

PathLike = Union[str, Path]


def find_repo_root(start: Optional[Path] = None) -> Path:
    """Return the repository root for *start* (default: cwd).

    Asks git first; without git, walks up looking for ``.git`` and then
    ``package.json``. Falls back to *start* itself.
    """
    from styleaudit.git.adapter import GitError, get_repo_root

    start = (start or Path.cwd()).resolve()
    try:
        return get_repo_root(start)
    except GitError:
        pass

    for marker in (".git", "package.json"):
        for candidate in (start, *start.parents):
            if (candidate / marker).exists():
                return candidate
    return start


def normalize_path(path: PathLike) -> str:
    """Forward slashes, no leading ``./``, no duplicate separators."""
    text = str(path).replace("\\", "/")
    while text.startswith("./"):
        text = text[2:]
    text = re.sub(r"/{2,}", "/", text)
    if len(text) > 1:
        text = text.rstrip("/")
    return text


def relative_to_root(path: PathLike, root: Path) -> str:
    """Return *path* as a forward-slash path relative to *root*."""
    p = Path(path)
    if not p.is_absolute():
        return normalize_path(p)
    try:
        return normalize_path(p.resolve().relative_to(root.resolve()))
    except ValueError:
        return normalize_path(os.path.relpath(p, root))


def walk_files(root: Path) -> Iterator[str]:
    """Yield every file under *root* as a sorted, repo-relative path."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS)
        rel_dir = os.path.relpath(dirpath, root)
        for name in sorted(filenames):
            rel = name if rel_dir == "." else f"{rel_dir}/{name}"
            yield normalize_path(rel)


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a simple glob (``**``, ``*``, ``?``) into an unanchored regex."""
    pattern = normalize_path(pattern)
    out: List[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif ch == "*":
            out.append("[^/]*")
            i += 1
        elif ch == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(ch))
            i += 1
    return re.compile("".join(out))


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    """Return True if *path* matches at least one glob in *patterns*."""
    return any(compile_glob(p).search(path) for p in patterns)


def split_csv(values: Optional[Iterable[str]]) -> List[str]:
    """Flatten repeatable, comma-separated option values."""
    result: List[str] = []
    for value in values or []:
        result.extend(v.strip() for v in value.split(",") if v.strip())
    return result
