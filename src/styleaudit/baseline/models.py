"""Baseline data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

BASELINE_VERSION = "2.0"


@dataclass
class BaselineEntry:
    fingerprint: str
    tool: str
    rule_id: str
    severity: str
    note: Optional[str] = None
    added_at: Optional[str] = None

    def sort_key(self) -> tuple[str, str, str]:
        return (self.tool, self.rule_id, self.fingerprint)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "fingerprint": self.fingerprint,
            "tool": self.tool,
            "ruleId": self.rule_id,
            "severity": self.severity,
        }
        if self.note is not None:
            out["note"] = self.note
        if self.added_at is not None:
            out["addedAt"] = self.added_at
        return out


@dataclass
class Baseline:
    version: str = BASELINE_VERSION
    generated_at: Optional[str] = None
    entries: List[BaselineEntry] = field(default_factory=list)

    def fingerprints(self) -> set[str]:
        return {e.fingerprint for e in self.entries}

    def sorted_entries(self) -> List[BaselineEntry]:
        unique: Dict[str, BaselineEntry] = {}
        for entry in self.entries:
            unique.setdefault(entry.fingerprint, entry)
        return sorted(unique.values(), key=BaselineEntry.sort_key)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "generatedAt": self.generated_at,
            "entries": [e.to_dict() for e in self.sorted_entries()],
        }
