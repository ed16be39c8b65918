"""TargetSet — the file universe handed to tools for one run."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Literal, Optional

from styleaudit.git.adapter import ChangeDetection

Mode = Literal["full", "changed"]
FileKind = Literal["css", "css_module", "ts", "tsx", "js", "all"]

FILE_KINDS: tuple[str, ...] = ("css", "css_module", "ts", "tsx", "js", "all")

_TS_SUFFIXES = (".ts", ".mts", ".cts")
_JS_SUFFIXES = (".js", ".jsx", ".mjs", ".cjs")


def classify(path: str) -> Optional[str]:
    """Return the file kind of *path*, or None for files no tool reads."""
    if path.endswith(".module.css"):
        return "css_module"
    if path.endswith(".css"):
        return "css"
    if path.endswith(".d.ts"):
        return None
    if path.endswith(".tsx"):
        return "tsx"
    if path.endswith(_TS_SUFFIXES):
        return "ts"
    if path.endswith(_JS_SUFFIXES):
        return "js"
    return None


@dataclass
class TargetSet:
    """Files selected for analysis, bucketed by kind."""

    mode: Mode = "full"
    since_ref: Optional[str] = None
    changed_files: List[str] = field(default_factory=list)
    css_files: List[str] = field(default_factory=list)
    css_module_files: List[str] = field(default_factory=list)
    ts_files: List[str] = field(default_factory=list)
    tsx_files: List[str] = field(default_factory=list)
    js_files: List[str] = field(default_factory=list)
    all_files: List[str] = field(default_factory=list)
    detection: Optional[ChangeDetection] = None
    degraded: bool = False

    @classmethod
    def from_files(cls, files: Iterable[str], **kwargs) -> "TargetSet":
        ts = cls(**kwargs)
        buckets = {
            "css": ts.css_files,
            "css_module": ts.css_module_files,
            "ts": ts.ts_files,
            "tsx": ts.tsx_files,
            "js": ts.js_files,
        }
        for path in sorted(set(files)):
            ts.all_files.append(path)
            kind = classify(path)
            if kind is not None:
                buckets[kind].append(path)
        return ts

    def files_of(self, kind: str) -> List[str]:
        if kind == "all":
            return list(self.all_files)
        return list({
            "css": self.css_files,
            "css_module": self.css_module_files,
            "ts": self.ts_files,
            "tsx": self.tsx_files,
            "js": self.js_files,
        }[kind])

    @property
    def source_files(self) -> List[str]:
        """TS, TSX and JS files together."""
        return sorted({*self.ts_files, *self.tsx_files, *self.js_files})

    @property
    def stylesheet_files(self) -> List[str]:
        return sorted({*self.css_files, *self.css_module_files})

    def narrowed(self, kinds: Iterable[str]) -> "TargetSet":
        """Copy keeping only the file lists for *kinds*; others are emptied."""
        kinds = set(kinds)
        if "all" in kinds:
            return replace(self)
        keep = sorted({f for k in kinds for f in self.files_of(k)})
        return TargetSet.from_files(
            keep,
            mode=self.mode,
            since_ref=self.since_ref,
            changed_files=list(self.changed_files),
            detection=self.detection,
            degraded=self.degraded,
        )

    def filtered(self, predicate) -> "TargetSet":
        return TargetSet.from_files(
            [f for f in self.all_files if predicate(f)],
            mode=self.mode,
            since_ref=self.since_ref,
            changed_files=list(self.changed_files),
            detection=self.detection,
            degraded=self.degraded,
        )
