"""Finding models, fingerprints, and aggregation."""

from styleaudit.findings.aggregator import normalize_findings, sort_findings
from styleaudit.findings.fingerprint import make_fingerprint, normalize_snippet
from styleaudit.findings.models import Artifact, Finding, ToolRunResult

__all__ = [
    "Artifact",
    "Finding",
    "ToolRunResult",
    "make_fingerprint",
    "normalize_findings",
    "normalize_snippet",
    "sort_findings",
]
