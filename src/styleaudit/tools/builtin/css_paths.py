"""Stylesheet location policies, built in and from YAML rule files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from styleaudit.findings.models import ToolRunResult
from styleaudit.paths import compile_glob
from styleaudit.targets.models import classify
from styleaudit.tools.models import AuditTool, FilesScope, ToolContext, tool_files


@dataclass
class PathPolicy:
    """Files of *kinds* matching *include* must match *allowed* and none of *forbidden*."""

    id: str
    message: str
    kinds: List[str] = field(default_factory=lambda: ["css", "css_module"])
    include: List[str] = field(default_factory=list)
    allowed: List[str] = field(default_factory=list)
    forbidden: List[str] = field(default_factory=list)
    severity: str = "warn"
    hint: Optional[str] = None

    def violates(self, path: str) -> bool:
        if classify(path) not in self.kinds:
            return False
        if self.include and not _starts_with_glob(path, self.include):
            return False
        if self.allowed and not _starts_with_glob(path, self.allowed):
            return True
        return bool(self.forbidden) and _starts_with_glob(path, self.forbidden)


@dataclass
class CssPathsConfig:
    module_dirs: List[str] = field(default_factory=lambda: ["components/**", "app/**"])
    global_dirs: List[str] = field(default_factory=lambda: ["styles/**", "app/*.css"])
    rules_dir: str = ".styleaudit-rules"


def _starts_with_glob(path: str, patterns: List[str]) -> bool:
    return any(compile_glob(p).match(path) for p in patterns)


def load_policy_file(path: Path) -> List[PathPolicy]:
    """Read one YAML file holding a policy mapping or a list of them."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return []
    if not isinstance(data, list):
        data = [data]
    policies = []
    for entry in data:
        if not isinstance(entry, dict) or "id" not in entry:
            raise ValueError(f"{path.name}: every policy needs an 'id'")
        policies.append(
            PathPolicy(
                id=str(entry["id"]),
                message=entry.get("message", f"Stylesheet location violates {entry['id']}"),
                kinds=list(entry.get("kinds", ["css", "css_module"])),
                include=list(entry.get("include", [])),
                allowed=list(entry.get("allowed", [])),
                forbidden=list(entry.get("forbidden", [])),
                severity=entry.get("severity", "warn"),
                hint=entry.get("hint"),
            )
        )
    return policies


class CssPathsTool(AuditTool):
    id = "css-paths"
    title = "CSS Paths"
    description = "Validates where stylesheets live"
    scope = FilesScope(("css", "css_module"))
    config_class = CssPathsConfig

    def builtin_policies(self, config: CssPathsConfig) -> List[PathPolicy]:
        return [
            PathPolicy(
                id="css/module-location",
                message="CSS module outside the component directories",
                kinds=["css_module"],
                allowed=config.module_dirs,
                hint=f"Keep CSS modules next to their components ({', '.join(config.module_dirs)})",
            ),
            PathPolicy(
                id="css/global-location",
                message="Global stylesheet outside the shared style directories",
                kinds=["css"],
                allowed=config.global_dirs,
                hint=f"Global CSS belongs in {', '.join(config.global_dirs)}; use a CSS module otherwise",
            ),
        ]

    def load_policies(self, ctx: ToolContext, config: CssPathsConfig) -> List[PathPolicy]:
        policies = self.builtin_policies(config)
        rules_dir = ctx.root / config.rules_dir
        if not rules_dir.is_dir():
            return policies
        for path in sorted(rules_dir.iterdir()):
            if path.suffix not in (".yaml", ".yml"):
                continue
            try:
                policies.extend(load_policy_file(path))
            except (OSError, ValueError, yaml.YAMLError) as exc:
                ctx.log.warn(f"Skipping policy file {path.name}: {exc}")
        return policies

    def run(self, ctx: ToolContext, config: CssPathsConfig) -> ToolRunResult:
        files = tool_files(ctx, "css", "css_module")
        if not files:
            return ToolRunResult(stats={"filesChecked": 0})

        policies = self.load_policies(ctx, config)
        findings = []
        for path in files:
            for policy in policies:
                if policy.violates(path):
                    findings.append(
                        self.finding(
                            policy.id,
                            policy.severity if policy.severity in ("error", "warn", "info") else "warn",
                            policy.message,
                            file=path,
                            hint=policy.hint,
                            data={"policy": policy.id},
                        )
                    )

        return ToolRunResult(
            findings=findings,
            stats={"filesChecked": len(files), "policies": len(policies)},
        )
