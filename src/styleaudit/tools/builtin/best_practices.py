"""Cross-file CSS conventions: no :global() in modules, no legacy stylesheets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from styleaudit.findings.models import ToolRunResult
from styleaudit.parsing import ParseError
from styleaudit.paths import compile_glob
from styleaudit.tools.models import AuditTool, FilesScope, ToolContext, tool_files


@dataclass
class BestPracticesConfig:
    allow_global_in: List[str] = field(default_factory=list)
    allow_legacy_directory: bool = False
    legacy_dir: str = "styles/legacy/"


class BestPracticesTool(AuditTool):
    id = "css-best-practices"
    title = "CSS Best Practices"
    description = "Enforces cross-file CSS conventions"
    scope = FilesScope(("css", "css_module"))
    config_class = BestPracticesConfig

    def run(self, ctx: ToolContext, config: BestPracticesConfig) -> ToolRunResult:
        files = tool_files(ctx, "css", "css_module")
        if not files:
            return ToolRunResult(stats={"filesChecked": 0})

        legacy_dir = config.legacy_dir.rstrip("/") + "/"
        findings = []
        for path in files:
            if path.endswith(".module.css") and not any(
                compile_glob(p).match(path) for p in config.allow_global_in
            ):
                try:
                    usages = ctx.parsers.stylesheet(path).global_usages
                except ParseError as exc:
                    ctx.log.debug(str(exc))
                    usages = []
                if usages:
                    line, col = usages[0]
                    findings.append(
                        self.finding(
                            "css/forbidden-global",
                            "warn",
                            f":global() used {len(usages)} time(s) in a CSS module",
                            file=path,
                            line=line,
                            col=col,
                            hint=(
                                "Move global styles to a regular stylesheet, or add the directory "
                                f"to [tools.{self.id}] allow_global_in"
                            ),
                            data={"occurrences": len(usages), "allowedDirectories": config.allow_global_in},
                        )
                    )

            if path.startswith(legacy_dir) and not config.allow_legacy_directory:
                findings.append(
                    self.finding(
                        "css/forbidden-legacy",
                        "error",
                        f"Stylesheet in deprecated {legacy_dir} directory",
                        file=path,
                        hint="Move these styles into the token layer, shared UI styles, or a component CSS module",
                    )
                )

        ctx.log.info(f"Checked {len(files)} file(s), {len(findings)} violation(s)")
        return ToolRunResult(findings=findings, stats={"filesChecked": len(files)})
