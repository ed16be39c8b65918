"""Finding normalization and deduplication."""

from __future__ import annotations

from typing import Dict, List, Tuple

from styleaudit.config.schema import SEVERITY_ORDER
from styleaudit.findings.models import Finding
from styleaudit.paths import normalize_path


def normalize_findings(findings: List[Finding]) -> List[Finding]:
    """Normalize paths and drop repeated fingerprints.

    The first instance of a fingerprint wins; later ones are discarded even
    if their severity or message differ.
    """
    seen: Dict[str, Finding] = {}
    for finding in findings:
        if finding.fingerprint in seen:
            continue
        if finding.file:
            finding.file = normalize_path(finding.file)
        seen[finding.fingerprint] = finding
    return list(seen.values())


def sort_findings(findings: List[Finding]) -> List[Finding]:
    """Most severe first, then by location."""

    def key(f: Finding) -> Tuple[int, str, int, str]:
        return (-SEVERITY_ORDER.get(f.severity, 0), f.file or "", f.line or 0, f.rule_id)

    return sorted(findings, key=key)
