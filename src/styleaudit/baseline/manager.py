"""Baseline manager — read, filter, refresh, and persist accepted findings."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from styleaudit.baseline.models import BASELINE_VERSION, Baseline, BaselineEntry
from styleaudit.findings.models import Finding


class PersistenceError(Exception):
    """Raised when the baseline or a report cannot be written."""


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def default_baseline_include(finding: Finding) -> bool:
    """Accept everything except ``info`` findings."""
    return finding.severity != "info"


def _entry_from_dict(raw: Mapping[str, Any]) -> Optional[BaselineEntry]:
    fingerprint = raw.get("fingerprint")
    if not isinstance(fingerprint, str) or not fingerprint:
        return None
    return BaselineEntry(
        fingerprint=fingerprint,
        tool=str(raw.get("tool", "")),
        rule_id=str(raw.get("ruleId", "")),
        severity=str(raw.get("severity", "warn")),
        note=raw.get("note"),
        added_at=raw.get("addedAt"),
    )


def _migrate_legacy(raw: Mapping[str, Any]) -> Baseline:
    """Convert ``{findings: {key: {...}}}`` into the entries form.

    Legacy keys were ``tool:ruleId:fingerprint``; when a record carries no
    fingerprint the last key segment is used.
    """
    entries: List[BaselineEntry] = []
    for key, record in (raw.get("findings") or {}).items():
        if not isinstance(record, dict):
            continue
        fingerprint = record.get("fingerprint") or str(key).rsplit(":", 1)[-1]
        entries.append(
            BaselineEntry(
                fingerprint=fingerprint,
                tool=str(record.get("tool", "")),
                rule_id=str(record.get("ruleId", "")),
                severity=str(record.get("severity", "warn")),
                note=record.get("note"),
                added_at=record.get("addedAt") or record.get("lastSeen"),
            )
        )
    return Baseline(
        version=BASELINE_VERSION,
        generated_at=raw.get("timestamp"),
        entries=entries,
    )


def read_baseline(path: Path, warn: Optional[Callable[[str], None]] = None) -> Baseline:
    """Read *path*. Missing, unreadable or malformed files give an empty baseline."""
    if not path.is_file():
        return Baseline()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        if warn:
            warn(f"Ignoring unreadable baseline {path}: {exc}")
        return Baseline()

    if not isinstance(raw, dict):
        if warn:
            warn(f"Ignoring baseline {path}: expected a JSON object")
        return Baseline()

    if isinstance(raw.get("entries"), list):
        entries = [e for e in (_entry_from_dict(r) for r in raw["entries"] if isinstance(r, dict)) if e]
        return Baseline(
            version=str(raw.get("version", BASELINE_VERSION)),
            generated_at=raw.get("generatedAt"),
            entries=entries,
        )

    if isinstance(raw.get("findings"), dict):
        if warn:
            warn(f"Migrating legacy baseline format in {path}")
        return _migrate_legacy(raw)

    if warn:
        warn(f"Ignoring baseline {path}: unrecognized format")
    return Baseline()


def filter_against_baseline(
    findings: Iterable[Finding], baseline: Baseline
) -> Tuple[List[Finding], List[Finding]]:
    """Split *findings* into (suppressed, new)."""
    known = baseline.fingerprints()
    suppressed: List[Finding] = []
    new: List[Finding] = []
    for finding in findings:
        (suppressed if finding.fingerprint in known else new).append(finding)
    return suppressed, new


def update_baseline(
    baseline: Baseline,
    findings: Iterable[Finding],
    tools_that_ran: Iterable[str],
    ctx: Any = None,
    *,
    tools: Optional[Mapping[str, Any]] = None,
    now: Optional[str] = None,
) -> Baseline:
    """Refresh *baseline* against the complete finding set of a run.

    *findings* must be every finding of the run, not only the new ones.
    Entries still reported are kept unchanged, entries of tools that ran but
    no longer report them are dropped, and entries of tools that did not run
    are kept. New fingerprints are added when the owning tool's
    ``baseline_include`` accepts them.
    """
    findings = list(findings)
    ran = set(tools_that_ran)
    tools = tools or {}
    current = {f.fingerprint for f in findings}
    stamp = now or utc_now()

    kept: Dict[str, BaselineEntry] = {}
    for entry in baseline.sorted_entries():
        if entry.fingerprint in current or entry.tool not in ran:
            kept[entry.fingerprint] = entry

    for finding in findings:
        if finding.fingerprint in kept:
            continue
        tool = tools.get(finding.tool)
        include = tool.baseline_include(finding, ctx) if tool is not None else default_baseline_include(finding)
        if not include:
            continue
        kept[finding.fingerprint] = BaselineEntry(
            fingerprint=finding.fingerprint,
            tool=finding.tool,
            rule_id=finding.rule_id,
            severity=finding.severity,
            added_at=stamp,
        )

    refreshed = Baseline(version=BASELINE_VERSION, entries=sorted(kept.values(), key=BaselineEntry.sort_key))
    unchanged = (
        baseline.generated_at is not None
        and baseline.version == BASELINE_VERSION
        and [e.to_dict() for e in refreshed.entries] == [e.to_dict() for e in baseline.sorted_entries()]
    )
    refreshed.generated_at = baseline.generated_at if unchanged else stamp
    return refreshed


def serialize_baseline(baseline: Baseline) -> str:
    return json.dumps(baseline.to_dict(), indent=2) + "\n"


def write_baseline(path: Path, baseline: Baseline) -> None:
    """Write *baseline* with sorted entries and a trailing newline."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(serialize_baseline(baseline), encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Cannot write baseline {path}: {exc}") from exc
