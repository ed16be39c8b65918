"""Resolve CLI flags and config into one fully-defaulted options object."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from styleaudit.config.schema import OUTPUT_FORMATS, SEVERITY_ORDER, StyleAuditConfig
from styleaudit.paths import split_csv


class OptionsError(Exception):
    """Raised for option combinations that must not run."""


@dataclass
class ResolvedCliOptions:
    changed: bool = False
    since: str = "HEAD~1"
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    tools: List[str] = field(default_factory=list)
    skip_tools: List[str] = field(default_factory=list)
    baseline_path: Path = Path("styleaudit.baseline.json")
    no_baseline: bool = False
    update_baseline: bool = False
    force: bool = False
    fail_on: str = "error"
    strict: bool = False
    output_path: Path = Path("reports/styleaudit.json")
    format: str = "pretty"
    html: bool = False
    ci: bool = False
    verbose: bool = False

    @property
    def html_path(self) -> Path:
        return self.output_path.with_suffix(".html")


def _absolute(repo_root: Path, value: str) -> Path:
    p = Path(value)
    return p if p.is_absolute() else repo_root / p


def resolve_options(
    repo_root: Path,
    config: StyleAuditConfig,
    *,
    changed: bool = False,
    since: Optional[str] = None,
    include: Optional[Sequence[str]] = None,
    exclude: Optional[Sequence[str]] = None,
    tools: Optional[Sequence[str]] = None,
    skip_tools: Optional[Sequence[str]] = None,
    baseline: Optional[str] = None,
    no_baseline: bool = False,
    update_baseline: bool = False,
    force: bool = False,
    fail_on: Optional[str] = None,
    strict: bool = False,
    output: Optional[str] = None,
    format: Optional[str] = None,
    html: bool = False,
    ci: bool = False,
    verbose: bool = False,
    warn: Optional[Callable[[str], None]] = None,
) -> ResolvedCliOptions:
    """Merge CLI values over config values.

    Bad values fall back to safe defaults with a warning. Refreshing the
    baseline from a changed-files run is refused unless *force* is set.
    """
    audit = config.audit
    warn = warn or (lambda _msg: None)

    threshold = fail_on or audit.fail_on
    if threshold not in SEVERITY_ORDER:
        warn(f"Invalid fail-on level {threshold!r}; using 'error'")
        threshold = "error"
    if strict and SEVERITY_ORDER[threshold] > SEVERITY_ORDER["warn"]:
        threshold = "warn"

    fmt = format or audit.format
    if fmt not in OUTPUT_FORMATS:
        warn(f"Invalid format {fmt!r}; using 'pretty'")
        fmt = "pretty"

    if update_baseline and changed and not force:
        raise OptionsError(
            "--update-baseline with --changed would prune entries for files outside "
            "the changed set; run a full audit or pass --force"
        )

    cli_tools = split_csv(tools)
    return ResolvedCliOptions(
        changed=changed,
        since=since or audit.since,
        include=[*audit.include, *split_csv(include)],
        exclude=[*audit.exclude, *split_csv(exclude)],
        tools=cli_tools or list(audit.tools),
        skip_tools=list(dict.fromkeys([*audit.skip_tools, *split_csv(skip_tools)])),
        baseline_path=_absolute(repo_root, baseline or audit.baseline),
        no_baseline=no_baseline,
        update_baseline=update_baseline,
        force=force,
        fail_on=threshold,
        strict=strict,
        output_path=_absolute(repo_root, output or audit.output),
        format=fmt,
        html=html,
        ci=ci,
        verbose=verbose,
    )
