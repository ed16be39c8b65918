"""Total size of the built CSS bundle against a budget."""

from __future__ import annotations

import json
from dataclasses import dataclass

from styleaudit.findings.models import Artifact, ToolRunResult
from styleaudit.paths import relative_to_root
from styleaudit.tools.models import AuditTool, GlobalScope, ToolContext, ToolExecutionError


@dataclass
class CssSizeConfig:
    bundle_glob: str = ".next/static/css/**/*.css"
    max_total_kb: float = 250.0


class CssSizeTool(AuditTool):
    id = "css-size"
    title = "CSS Bundle Size"
    description = "Compares the built CSS bundle size against a limit"
    scope = GlobalScope()
    config_class = CssSizeConfig

    def run(self, ctx: ToolContext, config: CssSizeConfig) -> ToolRunResult:
        files = sorted(p for p in ctx.root.glob(config.bundle_glob) if p.is_file())
        if not files:
            ctx.log.warn(f"No built CSS matches {config.bundle_glob}; build the app to check bundle size")
            return ToolRunResult(stats={"files": 0, "skipped": True})

        sizes = {relative_to_root(p, ctx.root): p.stat().st_size for p in files}
        total = sum(sizes.values())
        limit = int(config.max_total_kb * 1024)
        delta = total - limit

        report = {
            "bundleGlob": config.bundle_glob,
            "totalBytes": total,
            "limitBytes": limit,
            "deltaBytes": delta,
            "files": [{"file": f, "bytes": b} for f, b in sorted(sizes.items(), key=lambda kv: -kv[1])],
        }
        artifact_path = ctx.artifacts_dir / "css-size.json"
        try:
            artifact_path.parent.mkdir(parents=True, exist_ok=True)
            artifact_path.write_text(json.dumps(report, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ToolExecutionError(f"Cannot write size report: {exc}") from exc

        findings = []
        if delta > 0:
            findings.append(
                self.finding(
                    "css/size-limit",
                    "error",
                    f"CSS bundle is {total / 1024:.1f} KB, {delta / 1024:.1f} KB over the "
                    f"{config.max_total_kb:g} KB limit",
                    identity=("total",),
                    hint="Remove unused rules or split route-specific styles out of the shared bundle",
                    data={"totalBytes": total, "limitBytes": limit, "deltaBytes": delta},
                )
            )

        return ToolRunResult(
            findings=findings,
            stats={"files": len(files), "totalBytes": total, "limitBytes": limit},
            artifacts=[
                Artifact(
                    id="css-size-report",
                    path=relative_to_root(artifact_path, ctx.root),
                    kind="json",
                    title="CSS bundle size",
                )
            ],
        )
