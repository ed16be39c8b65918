"""Target builder — resolve which files a run analyzes."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from styleaudit.git.adapter import detect_changed_files
from styleaudit.paths import matches_any, walk_files
from styleaudit.targets.models import TargetSet, classify


def filter_files(
    files: Iterable[str],
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> List[str]:
    """Apply the include allow-list, then the exclude deny-list."""
    result: List[str] = []
    for path in files:
        if include and not matches_any(path, include):
            continue
        if exclude and matches_any(path, exclude):
            continue
        result.append(path)
    return result


def build_target_set(
    repo_root: Path,
    *,
    changed: bool,
    since: str,
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> TargetSet:
    """Build the TargetSet for a run.

    Detection runs in both modes. In changed mode a failed detection yields
    a full-mode set with ``degraded`` set; the caller is expected to warn.
    """
    detection = detect_changed_files(repo_root, since)

    if changed and detection.ok:
        existing = [f for f in detection.files if (repo_root / f).is_file()]
        selected = filter_files(existing, include, exclude)
        return TargetSet.from_files(
            selected,
            mode="changed",
            since_ref=since,
            changed_files=selected,
            detection=detection,
        )

    files = filter_files(walk_files(repo_root), include, exclude)
    return TargetSet.from_files(
        files,
        mode="full",
        since_ref=since if changed else None,
        changed_files=filter_files(detection.files, include, exclude) if detection.ok else [],
        detection=detection,
        degraded=changed,
    )


class FileCorpus:
    """Lazy, per-run listing of the whole filtered tree.

    Tools that need more than their scoped targets (cross-file duplicate
    detection, token usage, global checks) read from here so the tree is
    walked at most once per run.
    """

    def __init__(
        self,
        repo_root: Path,
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
    ) -> None:
        self.repo_root = repo_root
        self._include = tuple(include)
        self._exclude = tuple(exclude)
        self._files: Optional[List[str]] = None
        self._by_kind: Dict[str, List[str]] = {}

    def all(self) -> List[str]:
        if self._files is None:
            self._files = filter_files(walk_files(self.repo_root), self._include, self._exclude)
            for path in self._files:
                kind = classify(path)
                if kind is not None:
                    self._by_kind.setdefault(kind, []).append(path)
        return list(self._files)

    def files(self, *kinds: str) -> List[str]:
        """Files of the given kinds (all files when no kind is given)."""
        everything = self.all()
        if not kinds or "all" in kinds:
            return everything
        return sorted({f for k in kinds for f in self._by_kind.get(k, [])})

    def full_target_set(self, since_ref: Optional[str] = None) -> TargetSet:
        return TargetSet.from_files(self.all(), mode="full", since_ref=since_ref)
