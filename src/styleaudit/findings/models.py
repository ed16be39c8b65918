"""Finding data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from styleaudit.config.schema import Severity

ArtifactKind = Literal["json", "text", "html"]


@dataclass
class Finding:
    """A single reported issue.

    ``fingerprint`` is the identity: two findings with the same fingerprint
    are the same issue, whatever their location or wording.
    """

    tool: str
    rule_id: str
    severity: Severity
    message: str
    fingerprint: str
    file: Optional[str] = None
    line: Optional[int] = None
    col: Optional[int] = None
    hint: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "tool": self.tool,
            "ruleId": self.rule_id,
            "severity": self.severity,
        }
        if self.file is not None:
            out["file"] = self.file
        if self.line is not None:
            out["line"] = self.line
        if self.col is not None:
            out["col"] = self.col
        out["message"] = self.message
        if self.hint:
            out["hint"] = self.hint
        out["fingerprint"] = self.fingerprint
        if self.data:
            out["data"] = self.data
        return out


@dataclass
class Artifact:
    """A side file written by a tool (e.g. a size report)."""

    id: str
    path: str
    kind: ArtifactKind = "json"
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "path": self.path, "kind": self.kind}
        if self.title:
            out["title"] = self.title
        return out


@dataclass
class ToolRunResult:
    """What a tool returns from one run."""

    findings: List[Finding] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)
    artifacts: List[Artifact] = field(default_factory=list)
