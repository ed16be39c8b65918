"""Git subprocess wrapper — repo root and changed-file detection."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal, Optional

from styleaudit.paths import normalize_path

DetectionMethod = Literal["merge-base", "direct"]


class GitError(Exception):
    """Raised when git is unavailable or a git command exits non-zero."""


@dataclass
class ChangeDetection:
    """Outcome of changed-file detection against a reference."""

    ok: bool
    method: Optional[DetectionMethod] = None
    files: List[str] = field(default_factory=list)


def _run_git(args: list[str], cwd: Path, timeout: int = 30) -> str:
    """Run a git command and return stdout. Raises GitError on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")

    if result.returncode != 0:
        stderr = result.stderr.strip() or f"exit status {result.returncode}"
        raise GitError(f"git {' '.join(args)}: {stderr}")
    return result.stdout


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Return the root of the current git repository."""
    cwd = cwd or Path.cwd()
    out = _run_git(["rev-parse", "--show-toplevel"], cwd=cwd)
    return Path(out.strip())


def _parse_name_only(output: str) -> List[str]:
    return [normalize_path(line.strip()) for line in output.splitlines() if line.strip()]


def detect_changed_files(repo_root: Path, since: str) -> ChangeDetection:
    """List files added, copied, modified or renamed since *since*.

    The triple-dot form compares against the merge-base, which is what a
    diverged feature branch needs. When that fails (shallow clone, unrelated
    history) the direct two-ref diff is tried before giving up.
    """
    attempts: list[tuple[DetectionMethod, list[str]]] = [
        ("merge-base", ["diff", "--name-only", "--diff-filter=ACMR", f"{since}...HEAD"]),
        ("direct", ["diff", "--name-only", "--diff-filter=ACMR", since, "HEAD"]),
    ]
    for method, args in attempts:
        try:
            output = _run_git(args, cwd=repo_root)
        except GitError:
            continue
        return ChangeDetection(ok=True, method=method, files=_parse_name_only(output))
    return ChangeDetection(ok=False)
