"""A pattern stylesheet that a component also styles on its own."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Dict, List

from styleaudit.findings.models import ToolRunResult
from styleaudit.tools.models import AuditTool, FilesScope, ToolContext


@dataclass
class DuplicateStylesConfig:
    patterns_dir: str = "styles/ui/patterns"
    components_dir: str = "components"
    allowlist: List[str] = field(default_factory=list)


class DuplicateStylesTool(AuditTool):
    id = "css-duplicate-styles"
    title = "Duplicate Styles"
    description = "Detects duplicate styling sources for the same component"
    scope = FilesScope(("css", "css_module"))
    config_class = DuplicateStylesConfig

    def run(self, ctx: ToolContext, config: DuplicateStylesConfig) -> ToolRunResult:
        patterns_dir = config.patterns_dir.rstrip("/") + "/"
        components_dir = config.components_dir.rstrip("/") + "/"
        stylesheets = ctx.corpus.files("css", "css_module")

        patterns: Dict[str, str] = {}
        for path in stylesheets:
            if posixpath.dirname(path) + "/" == patterns_dir and not path.endswith(".module.css"):
                patterns[posixpath.basename(path)[: -len(".css")]] = path

        owners: Dict[str, List[str]] = {}
        for path in stylesheets:
            if not path.startswith(components_dir):
                continue
            base = posixpath.basename(path)
            name = base[: -len(".module.css")] if base.endswith(".module.css") else base[: -len(".css")]
            if name in patterns:
                owners.setdefault(name, []).append(path)

        scoped = set(ctx.targets.all_files)
        findings = []
        for name in sorted(owners):
            if name in config.allowlist:
                continue
            pattern_file = patterns[name]
            component_files = sorted(owners[name])
            if ctx.mode == "changed" and not scoped.intersection([pattern_file, *component_files]):
                continue
            findings.append(
                self.finding(
                    "css/duplicate-styles",
                    "warn",
                    f'Duplicate styling detected for "{name}"',
                    file=pattern_file,
                    identity=(name,),
                    hint=(
                        f"Pattern CSS: {pattern_file}; component CSS: {', '.join(component_files)}. "
                        f'Choose one owner, or add "{name}" to [tools.{self.id}] allowlist.'
                    ),
                    data={
                        "patternName": name,
                        "patternFile": pattern_file,
                        "componentFiles": component_files,
                    },
                )
            )

        ctx.log.info(f"Found {len(findings)} duplicate styling source(s)")
        return ToolRunResult(findings=findings, stats={"patterns": len(patterns), "duplicates": len(findings)})
