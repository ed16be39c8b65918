"""Audit orchestrator — runs the whole pipeline for one invocation.

targets → (lazy) workspace index → selected tools in registration order →
dedup → baseline filter → optional baseline refresh → report → exit code.
Tools run sequentially; a tool that raises is recorded as failed and
contributes nothing.
"""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from styleaudit.baseline.manager import (
    filter_against_baseline,
    read_baseline,
    update_baseline,
    write_baseline,
)
from styleaudit.config.schema import StyleAuditConfig, severity_at_or_above
from styleaudit.engine.log import AuditLog
from styleaudit.engine.options import ResolvedCliOptions
from styleaudit.findings.aggregator import normalize_findings, sort_findings
from styleaudit.findings.models import Artifact, Finding
from styleaudit.output import html_report, report as json_report
from styleaudit.parsing import SourceParsers
from styleaudit.paths import matches_any
from styleaudit.targets.builder import FileCorpus, build_target_set
from styleaudit.targets.models import TargetSet
from styleaudit.tools.models import (
    AuditTool,
    EntitiesScope,
    FilesScope,
    GlobalScope,
    ToolContext,
    ToolOutcome,
)
from styleaudit.tools.registry import ToolRegistry, build_registry
from styleaudit.workspace.indexer import WorkspaceIndex, build_workspace_index

INDEX_UNAVAILABLE = "workspace index unavailable"


@dataclass
class AuditRun:
    """Everything a caller needs after a run."""

    report: Dict[str, Any]
    exit_code: int
    targets: TargetSet
    findings: List[Finding] = field(default_factory=list)
    new: List[Finding] = field(default_factory=list)
    suppressed: List[Finding] = field(default_factory=list)
    outcomes: List[ToolOutcome] = field(default_factory=list)
    baseline_updated: bool = False

    @property
    def failed(self) -> bool:
        return self.exit_code != 0


def compute_exit_code(new: List[Finding], fail_on: str) -> int:
    """1 when any new finding is at or above *fail_on*, else 0."""
    return 1 if any(severity_at_or_above(f.severity, fail_on) for f in new) else 0


def scoped_context(ctx: ToolContext, tool: AuditTool) -> ToolContext:
    """The run context narrowed to what *tool* declared it needs."""
    scope = tool.scope
    if isinstance(scope, FilesScope):
        targets = ctx.targets.narrowed(scope.kinds)
        if tool.include or tool.exclude:
            targets = targets.filtered(
                lambda f: (not tool.include or matches_any(f, tool.include))
                and not (tool.exclude and matches_any(f, tool.exclude))
            )
        return dataclasses.replace(ctx, targets=targets, log=ctx.log.scoped(tool.id))
    if isinstance(scope, EntitiesScope):
        entities = tuple(ctx.index.entities(ctx.mode)) if ctx.index is not None else ()
        return dataclasses.replace(ctx, entities=entities, log=ctx.log.scoped(tool.id))
    if isinstance(scope, GlobalScope):
        targets = ctx.corpus.full_target_set(ctx.targets.since_ref)
        return dataclasses.replace(ctx, targets=targets, log=ctx.log.scoped(tool.id))
    raise TypeError(f"Unknown scope {scope!r} on tool {tool.id}")


def _target_count(ctx: ToolContext, tool: AuditTool) -> int:
    if isinstance(tool.scope, EntitiesScope):
        return len(ctx.entities)
    return len(ctx.targets.all_files)


def _run_tool(tool: AuditTool, ctx: ToolContext, config: Any, log: AuditLog) -> ToolOutcome:
    start = time.perf_counter()
    try:
        result = tool.run(ctx, config)
    except Exception as exc:  # noqa: BLE001
        duration = (time.perf_counter() - start) * 1000
        log.error(f"Tool {tool.id} failed: {exc}")
        return ToolOutcome(
            tool_id=tool.id,
            ok=False,
            error=f"{type(exc).__name__}: {exc}",
            duration_ms=duration,
            targets=_target_count(ctx, tool),
        )
    duration = (time.perf_counter() - start) * 1000
    log.debug(f"{tool.id}: {len(result.findings)} finding(s) in {duration:.0f}ms")
    return ToolOutcome(
        tool_id=tool.id,
        ok=True,
        result=result,
        duration_ms=duration,
        targets=_target_count(ctx, tool),
    )


def _build_index(
    repo_root: Path,
    config: StyleAuditConfig,
    targets: TargetSet,
    corpus: FileCorpus,
    parsers: SourceParsers,
    log: AuditLog,
) -> Optional[WorkspaceIndex]:
    """Build the import index, or None when it cannot be built."""
    start = time.perf_counter()
    try:
        index = build_workspace_index(
            repo_root, targets, corpus, parsers, config.index.aliases, debug=log.debug
        )
    except Exception as exc:  # noqa: BLE001
        log.warn(f"Workspace index failed ({type(exc).__name__}: {exc}); entity-scoped tools will not run")
        return None
    log.debug(
        f"Indexed {index.sources_indexed} source(s), {len(index.artifact_files)} CSS module(s) "
        f"in {(time.perf_counter() - start) * 1000:.0f}ms"
    )
    if index.parse_failures:
        log.warn(f"{len(index.parse_failures)} source file(s) could not be parsed for imports")
    return index


def run_audit(
    repo_root: Path,
    config: StyleAuditConfig,
    options: ResolvedCliOptions,
    log: AuditLog,
    *,
    registry: Optional[ToolRegistry] = None,
    now: Optional[str] = None,
) -> AuditRun:
    """Execute one audit. Raises PersistenceError when results cannot be written."""
    registry = registry or build_registry()

    # --- Targets ---
    targets = build_target_set(
        repo_root,
        changed=options.changed,
        since=options.since,
        include=options.include,
        exclude=options.exclude,
    )
    if targets.degraded:
        log.warn(f"Could not detect changed files against {options.since}; running a full audit instead")
    if targets.mode == "changed":
        method = targets.detection.method if targets.detection else None
        log.info(f"Changed mode: {len(targets.changed_files)} file(s) since {options.since} ({method})")
    else:
        log.info(f"Full mode: {len(targets.all_files)} file(s)")

    corpus = FileCorpus(repo_root, options.include, options.exclude)
    parsers = SourceParsers(repo_root)

    # --- Tools ---
    selected = registry.select(options.tools, options.skip_tools, log.warn)
    tool_configs = registry.build_tool_configs(config, log.warn)

    index: Optional[WorkspaceIndex] = None
    needs_index = any(isinstance(t.scope, EntitiesScope) for t in selected)
    if needs_index:
        index = _build_index(repo_root, config, targets, corpus, parsers, log)

    base_ctx = ToolContext(
        root=repo_root,
        config=config,
        options=options,
        targets=targets,
        corpus=corpus,
        parsers=parsers,
        log=log,
        artifacts_dir=options.output_path.parent / "artifacts",
        index=index,
    )

    outcomes: List[ToolOutcome] = []
    raw: List[Finding] = []
    artifacts: Dict[str, List[Artifact]] = {}
    for tool in selected:
        if needs_index and index is None and isinstance(tool.scope, EntitiesScope):
            # failed tools count as not run for the baseline refresh
            log.error(f"Tool {tool.id} skipped: workspace index unavailable")
            outcomes.append(ToolOutcome(tool_id=tool.id, ok=False, error=INDEX_UNAVAILABLE))
            continue
        ctx = scoped_context(base_ctx, tool)
        log.info(f"Running {tool.id} ({tool.describe_scope()})")
        outcome = _run_tool(tool, ctx, tool_configs[tool.id], log)
        outcomes.append(outcome)
        raw.extend(outcome.result.findings)
        if outcome.result.artifacts:
            artifacts[tool.id] = list(outcome.result.artifacts)

    tools_run = [o.tool_id for o in outcomes if o.ok]
    tools_failed = [o.tool_id for o in outcomes if not o.ok]

    # --- Baseline ---
    findings = sort_findings(normalize_findings(raw))
    baseline = read_baseline(options.baseline_path, warn=log.warn)
    if options.no_baseline:
        suppressed, new = [], list(findings)
    else:
        suppressed, new = filter_against_baseline(findings, baseline)

    baseline_updated = False
    if options.update_baseline:
        refreshed = update_baseline(
            baseline,
            findings,
            tools_run,
            base_ctx,
            tools={t.id: t for t in selected},
            now=now,
        )
        write_baseline(options.baseline_path, refreshed)
        baseline_updated = True
        log.info(f"Baseline updated: {len(refreshed.entries)} entries in {options.baseline_path}")

    # --- Report ---
    report = json_report.build_report(
        targets=targets,
        findings=findings,
        new=new,
        suppressed=suppressed,
        tools_run=tools_run,
        tools_failed=tools_failed,
        tool_stats={o.tool_id: o.stats() for o in outcomes},
        warnings=log.warnings,
        artifacts=artifacts,
        generated_at=now,
    )
    json_report.write_report(options.output_path, json_report.render(report))
    if options.html:
        json_report.write_report(options.html_path, html_report.render(report))

    return AuditRun(
        report=report,
        exit_code=compute_exit_code(new, options.fail_on),
        targets=targets,
        findings=findings,
        new=new,
        suppressed=suppressed,
        outcomes=outcomes,
        baseline_updated=baseline_updated,
    )
