"""Custom properties defined in the token layer but never read via var()."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import yaml

from styleaudit.findings.models import Finding, ToolRunResult
from styleaudit.tools.models import AuditTool, FilesScope, ToolContext

_DEFINITION = re.compile(r"^\s*--([A-Za-z0-9_-]+)\s*:", re.MULTILINE)
_USE = re.compile(r"var\(\s*--([A-Za-z0-9_-]+)")


@dataclass
class UnusedTokensConfig:
    token_dirs: List[str] = field(default_factory=lambda: ["styles/"])
    allowlist: List[str] = field(default_factory=list)
    allowlist_file: str = "styles/tokens/unused-tokens.allowlist.yaml"


def _allow_pattern(patterns: List[str]) -> Optional[re.Pattern[str]]:
    if not patterns:
        return None
    parts = [re.escape(p.lstrip("-")).replace(r"\*", ".*") for p in patterns]
    return re.compile("^(?:" + "|".join(parts) + ")$")


class UnusedTokensTool(AuditTool):
    id = "css-unused-tokens"
    title = "Unused CSS Tokens"
    description = "Finds custom properties that are defined but never referenced via var(--name)"
    scope = FilesScope(("css",))
    config_class = UnusedTokensConfig

    def baseline_include(self, finding: Finding, ctx: Optional[ToolContext]) -> bool:
        return finding.severity == "warn"

    def _allowlist(self, ctx: ToolContext, config: UnusedTokensConfig) -> List[str]:
        allowed = list(config.allowlist)
        path = ctx.root / config.allowlist_file
        if not path.is_file():
            return allowed
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            ctx.log.warn(f"Ignoring token allowlist {config.allowlist_file}: {exc}")
            return allowed
        if isinstance(data, dict):
            data = data.get("allowed", [])
        if isinstance(data, list):
            allowed.extend(str(item) for item in data)
        return allowed

    def run(self, ctx: ToolContext, config: UnusedTokensConfig) -> ToolRunResult:
        token_dirs = tuple(d.rstrip("/") + "/" for d in config.token_dirs)
        token_files = [f for f in ctx.corpus.files("css") if f.startswith(token_dirs)]
        if not token_files:
            return ToolRunResult(stats={"tokensDefined": 0, "unusedTokens": 0})

        definitions: Dict[str, Tuple[str, int]] = {}
        for path in token_files:
            text = ctx.read_text(path)
            for match in _DEFINITION.finditer(text):
                line = text.count("\n", 0, match.start(1)) + 1
                definitions.setdefault(match.group(1), (path, line))

        used = set()
        for path in ctx.corpus.files("css", "css_module", "ts", "tsx", "js"):
            used.update(_USE.findall(ctx.read_text(path)))

        allow = _allow_pattern(self._allowlist(ctx, config))
        reportable = set(ctx.targets.css_files) if ctx.mode == "changed" else None

        findings = []
        for token in sorted(definitions):
            if token in used or (allow is not None and allow.match(token)):
                continue
            file, line = definitions[token]
            if reportable is not None and file not in reportable:
                continue
            finding = self.finding(
                "css/unused-token",
                "warn",
                f"Unused CSS token: --{token}",
                identity=(token,),
                hint=(
                    "Defined but never referenced via var(). Tokens consumed another way "
                    f"(utility classes, JS) belong in {config.allowlist_file}"
                ),
                data={"token": token},
            )
            # identity is the token name alone; the file is only where it is defined
            finding.file = file
            finding.line = line
            findings.append(finding)

        ctx.log.info(f"Found {len(findings)} unused token(s)")
        return ToolRunResult(
            findings=findings,
            stats={"tokensDefined": len(definitions), "unusedTokens": len(findings)},
        )
