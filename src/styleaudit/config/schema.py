"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal

Severity = Literal["error", "warn", "info"]
OutputFormat = Literal["pretty", "json", "junit"]

SEVERITY_ORDER: dict[str, int] = {
    "info": 0,
    "warn": 1,
    "error": 2,
}

OUTPUT_FORMATS: tuple[str, ...] = ("pretty", "json", "junit")


def severity_at_or_above(finding_sev: str, threshold: str) -> bool:
    """Return True if *finding_sev* is at or above *threshold*."""
    return SEVERITY_ORDER.get(finding_sev, 0) >= SEVERITY_ORDER.get(threshold, 0)


@dataclass
class AuditConfig:
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    since: str = "HEAD~1"
    fail_on: Severity = "error"
    format: OutputFormat = "pretty"
    baseline: str = "styleaudit.baseline.json"
    output: str = "reports/styleaudit.json"
    tools: List[str] = field(default_factory=list)  # empty = default-enabled tools
    skip_tools: List[str] = field(default_factory=list)


@dataclass
class IndexConfig:
    # import-specifier prefix -> directory relative to the repo root
    aliases: Dict[str, str] = field(default_factory=lambda: {"@/": ""})


@dataclass
class StyleAuditConfig:
    version: str = "1.0"
    audit: AuditConfig = field(default_factory=AuditConfig)
    index: IndexConfig = field(default_factory=IndexConfig)
    # raw [tools.<id>] tables; typed per tool by the tool registry
    tools: Dict[str, Dict[str, Any]] = field(default_factory=dict)
