"""JSON report — the canonical machine-readable result of a run."""

from __future__ import annotations

import json
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from styleaudit.baseline.manager import PersistenceError
from styleaudit.findings.models import Artifact, Finding
from styleaudit.targets.models import TargetSet

TOP_LIMIT = 10


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _top(counter: Counter, key: str) -> List[Dict[str, Any]]:
    ranked = sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))
    return [{key: name, "count": count} for name, count in ranked[:TOP_LIMIT]]


def build_summary(
    findings: Sequence[Finding],
    new: Sequence[Finding],
    suppressed: Sequence[Finding],
) -> Dict[str, Any]:
    """Totals over the run. Severity, rule and file breakdowns count new findings only."""
    by_severity = {"error": 0, "warn": 0, "info": 0}
    for f in new:
        by_severity[f.severity] = by_severity.get(f.severity, 0) + 1
    return {
        "totalFindings": len(findings),
        "suppressed": len(suppressed),
        "new": len(new),
        "bySeverity": by_severity,
        "byTool": dict(sorted(Counter(f.tool for f in new).items())),
        "topRuleIds": _top(Counter(f.rule_id for f in new), "ruleId"),
        "topFiles": _top(Counter(f.file for f in new if f.file), "file"),
    }


def build_report(
    *,
    targets: TargetSet,
    findings: Sequence[Finding],
    new: Sequence[Finding],
    suppressed: Sequence[Finding],
    tools_run: Iterable[str],
    tools_failed: Iterable[str],
    tool_stats: Dict[str, Dict[str, Any]],
    warnings: Iterable[str] = (),
    artifacts: Optional[Dict[str, List[Artifact]]] = None,
    generated_at: Optional[str] = None,
) -> Dict[str, Any]:
    """Assemble the report dict. ``findings`` in the output are the new ones."""
    metadata: Dict[str, Any] = {"mode": targets.mode}
    if targets.since_ref:
        metadata["sinceRef"] = targets.since_ref
    metadata.update(
        {
            "changedFilesCount": len(targets.changed_files),
            "toolsRun": list(tools_run),
            "toolsFailed": list(tools_failed),
            "degraded": targets.degraded,
            "warnings": list(warnings),
            "toolStats": tool_stats,
        }
    )

    report: Dict[str, Any] = {
        "generatedAt": generated_at or _utc_now(),
        "metadata": metadata,
        "summary": build_summary(findings, new, suppressed),
        "findings": [f.to_dict() for f in new],
    }
    if suppressed:
        report["suppressed"] = [f.to_dict() for f in suppressed]
    if artifacts:
        report["artifacts"] = {
            tool_id: [a.to_dict() for a in items] for tool_id, items in artifacts.items() if items
        }
    return report


def render(report: Dict[str, Any]) -> str:
    """Return formatted JSON string."""
    return json.dumps(report, indent=2)


def write_report(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Cannot write report {path}: {exc}") from exc
