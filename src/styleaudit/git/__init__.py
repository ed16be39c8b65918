"""Git interface layer — repo root and changed-file detection."""

from styleaudit.git.adapter import (
    ChangeDetection,
    GitError,
    detect_changed_files,
    get_repo_root,
)

__all__ = [
    "ChangeDetection",
    "GitError",
    "detect_changed_files",
    "get_repo_root",
]
