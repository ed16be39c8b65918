"""Report, and optionally delete, CSS modules nothing imports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set

from styleaudit.findings.models import Finding, ToolRunResult
from styleaudit.parsing import ParseError
from styleaudit.paths import matches_any
from styleaudit.tools.models import AuditTool, EntitiesScope, ToolContext, ToolExecutionError
from styleaudit.workspace.resolver import resolve_specifier


@dataclass
class PurgeStylesConfig:
    apply: bool = False
    keep: List[str] = field(default_factory=list)


class PurgeStylesTool(AuditTool):
    id = "css-purge-styles"
    title = "Purge Styles"
    description = "Removes CSS modules that no source imports (mutating; opt-in)"
    category = "fix"
    scope = EntitiesScope("css_module")
    default_enabled = False
    config_class = PurgeStylesConfig

    def baseline_include(self, finding: Finding, ctx: Optional[ToolContext]) -> bool:
        return False

    def _composed_targets(self, ctx: ToolContext) -> Set[str]:
        targets: Set[str] = set()
        for module in ctx.index.artifact_files:
            try:
                sheet = ctx.parsers.stylesheet(module)
            except ParseError:
                continue
            for comp in sheet.compositions:
                if comp.source:
                    resolved = resolve_specifier(comp.source, module, ctx.root, ctx.config.index.aliases)
                    if resolved:
                        targets.add(resolved)
        return targets

    def run(self, ctx: ToolContext, config: PurgeStylesConfig) -> ToolRunResult:
        if ctx.index is None:
            raise ToolExecutionError("workspace index was not built")

        composed = self._composed_targets(ctx)
        findings = []
        deleted: List[str] = []
        failed: List[str] = []
        for module in ctx.entities:
            if ctx.index.importers_of(module) or module in composed:
                continue
            if config.keep and matches_any(module, config.keep):
                continue
            if config.apply:
                try:
                    (ctx.root / module).unlink()
                except OSError as exc:
                    ctx.log.error(f"Cannot delete {module}: {exc}")
                    failed.append(module)
                    findings.append(
                        self.finding(
                            "css/purge-failed",
                            "warn",
                            f"Unreferenced CSS module could not be deleted: {exc.strerror or exc}",
                            file=module,
                        )
                    )
                    continue
                ctx.log.info(f"Deleted {module}")
                deleted.append(module)
            findings.append(
                self.finding(
                    "css/unreferenced-module",
                    "info",
                    "Deleted unreferenced CSS module" if config.apply else "CSS module is not imported anywhere",
                    file=module,
                    hint=None if config.apply else f"Set [tools.{self.id}] apply = true to delete it",
                )
            )

        if deleted:
            ctx.log.warn(f"Deleted {len(deleted)} unreferenced CSS module(s)")
        return ToolRunResult(
            findings=findings,
            stats={
                "modulesChecked": len(ctx.entities),
                "unreferenced": len(findings),
                "deleted": len(deleted),
                "failed": len(failed),
            },
        )
