"""Wrap the external stylelint CLI and map its JSON output to findings."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass, field
from typing import Any, List, Optional

from styleaudit.findings.fingerprint import OccurrenceCounter, normalize_snippet
from styleaudit.findings.models import ToolRunResult
from styleaudit.paths import relative_to_root
from styleaudit.tools.models import AuditTool, FilesScope, ToolContext, ToolExecutionError, tool_files


@dataclass
class StylelintConfig:
    command: List[str] = field(default_factory=lambda: ["npx", "--no-install", "stylelint"])
    config_file: str = ""
    extra_args: List[str] = field(default_factory=list)
    timeout: int = 120


def _parse_report(text: str) -> Optional[list]:
    text = text.strip()
    if not text.startswith("["):
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, list) else None


class StylelintTool(AuditTool):
    id = "stylelint"
    title = "Stylelint"
    description = "Runs stylelint over stylesheets"
    scope = FilesScope(("css", "css_module"))
    config_class = StylelintConfig

    def run(self, ctx: ToolContext, config: StylelintConfig) -> ToolRunResult:
        files = tool_files(ctx, "css", "css_module")
        if not files:
            return ToolRunResult(stats={"filesChecked": 0})

        cmd = [*config.command, "--formatter", "json"]
        if config.config_file:
            cmd += ["--config", config.config_file]
        cmd += [*config.extra_args, *files]
        ctx.log.info(f"Running stylelint on {len(files)} file(s)")

        try:
            proc = subprocess.run(
                cmd,
                cwd=ctx.root,
                capture_output=True,
                text=True,
                timeout=config.timeout,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise ToolExecutionError(f"stylelint not found ({cmd[0]})") from exc
        except subprocess.TimeoutExpired as exc:
            raise ToolExecutionError(f"stylelint timed out after {config.timeout}s") from exc

        # stylelint 16 writes the JSON report to stderr, older versions to stdout
        report = _parse_report(proc.stdout)
        if report is None:
            report = _parse_report(proc.stderr)
        if report is None:
            detail = (proc.stderr or proc.stdout).strip().splitlines()[-1:] or ["no output"]
            raise ToolExecutionError(f"stylelint exited {proc.returncode}: {detail[0]}")

        findings = []
        counter = OccurrenceCounter()
        for file_result in report:
            source = file_result.get("source") or ""
            file = relative_to_root(source, ctx.root) if source else None
            for warning in file_result.get("warnings") or []:
                findings.append(self._to_finding(file, warning, counter))

        return ToolRunResult(findings=findings, stats={"filesChecked": len(files)})

    def _to_finding(self, file: Optional[str], warning: dict[str, Any], counter: OccurrenceCounter):
        rule = warning.get("rule") or "unknown"
        text = warning.get("text") or "Stylelint violation"
        snippet = normalize_snippet(text)
        return self.finding(
            f"stylelint/{rule}",
            "error" if warning.get("severity") == "error" else "warn",
            text,
            file=file,
            identity=(snippet, counter.next((file, rule, snippet))),
            line=warning.get("line"),
            col=warning.get("column"),
            hint=f"Rule: {rule}",
            data={"rule": rule, "severity": warning.get("severity")},
        )
