"""Hardcoded colors and spacing in stylesheets and inline styles."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from styleaudit.findings.fingerprint import OccurrenceCounter, normalize_snippet
from styleaudit.findings.models import ToolRunResult
from styleaudit.parsing import ParseError, Stylesheet
from styleaudit.paths import matches_any
from styleaudit.tools.models import AuditTool, FilesScope, ToolContext, tool_files

HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{8}|[0-9a-fA-F]{6}|[0-9a-fA-F]{3,4})\b")
RGB_COLOR = re.compile(r"rgba?\([^)]+\)", re.IGNORECASE)
PIXEL_VALUE = re.compile(r"\b(\d+)px\b")
REM_VALUE = re.compile(r"\b(\d+(?:\.\d+)?)rem\b")
INLINE_STYLE = re.compile(r"style\s*=\s*\{\{.*?\}\}|style\s*=\s*\{[^}]*\}|style\s*=\s*[\"'][^\"']*[\"']")

SPACING_REMS = {"0.5", "1", "1.5", "2", "2.5", "3", "4"}

ALLOWED_INLINE = [
    re.compile(r"width:\s*['\"`]?\d+%"),
    re.compile(r"height:\s*['\"`]?\d+%"),
    re.compile(r"transform:"),
    re.compile(r"opacity:\s*['\"`]?\d+\.?\d*"),
    re.compile(r"z-?index:", re.IGNORECASE),
    re.compile(r"display:\s*['\"`]?(none|block|flex|grid)"),
]


@dataclass
class ValidateStylesConfig:
    token_dirs: List[str] = field(default_factory=lambda: ["styles/tokens/"])
    component_dirs: List[str] = field(default_factory=lambda: ["components/", "app/"])
    ignore: List[str] = field(default_factory=lambda: ["**/*.test.tsx", "**/*.spec.tsx", "**/__tests__/**"])


def stylesheet_violations(sheet: Stylesheet) -> Iterator[Tuple[int, str, str, str]]:
    """Yield (line, rule_id, kind, declaration) for hardcoded declaration values.

    Only values are searched, so selectors such as ``#facade`` never match.
    """
    for decl in sheet.declarations:
        value = decl.value
        if not value or "var(--" in value:
            continue
        text = f"{decl.property}: {value}"
        if HEX_COLOR.search(value):
            yield decl.line, "css/hardcoded-color", "hex", text
        if RGB_COLOR.search(value):
            yield decl.line, "css/hardcoded-color", "rgb", text
        if any(int(px) > 1 for px in PIXEL_VALUE.findall(value)):
            yield decl.line, "css/hardcoded-spacing", "px", text
        if decl.property not in ("font-size", "line-height"):
            if any(rem in SPACING_REMS for rem in REM_VALUE.findall(value)):
                yield decl.line, "css/hardcoded-spacing", "rem", text


def inline_violations(text: str) -> Iterator[Tuple[int, str, str, str]]:
    for lineno, line in enumerate(text.splitlines(), start=1):
        match = INLINE_STYLE.search(line)
        if not match:
            continue
        style = match.group(0)
        if any(p.search(style) for p in ALLOWED_INLINE):
            continue
        if HEX_COLOR.search(style) or RGB_COLOR.search(style):
            yield lineno, "css/inline-style-color", "color", style
        if any(int(px) > 1 for px in PIXEL_VALUE.findall(style)):
            yield lineno, "css/inline-style-spacing", "px", style


_MESSAGES = {
    ("css/hardcoded-color", "hex"): "Hardcoded hex color; use a color token from the token layer",
    ("css/hardcoded-color", "rgb"): "Hardcoded rgb()/rgba() color; use a color token from the token layer",
    ("css/hardcoded-spacing", "px"): "Hardcoded pixel spacing; use a spacing token (var(--space-*))",
    ("css/hardcoded-spacing", "rem"): "Hardcoded rem spacing; use a spacing token (var(--space-*))",
    ("css/inline-style-color", "color"): "Inline style with a hardcoded color; use a CSS class with tokens",
    ("css/inline-style-spacing", "px"): "Inline style with hardcoded pixels; use a CSS class with spacing tokens",
}


class ValidateStylesTool(AuditTool):
    id = "css-validate-styles"
    title = "Validate Styles"
    description = "Flags hardcoded colors and spacing outside the token layer"
    scope = FilesScope(("css", "css_module", "tsx"))
    config_class = ValidateStylesConfig

    def run(self, ctx: ToolContext, config: ValidateStylesConfig) -> ToolRunResult:
        token_dirs = tuple(config.token_dirs)
        component_dirs = tuple(config.component_dirs)

        stylesheets = [f for f in tool_files(ctx, "css", "css_module") if not f.startswith(token_dirs)]
        components = [
            f
            for f in tool_files(ctx, "tsx")
            if f.startswith(component_dirs) and not matches_any(f, config.ignore)
        ]

        violations: List[Tuple[str, Iterator[Tuple[int, str, str, str]]]] = []
        for path in stylesheets:
            try:
                violations.append((path, stylesheet_violations(ctx.parsers.stylesheet(path))))
            except ParseError as exc:
                ctx.log.debug(str(exc))
        for path in components:
            violations.append((path, inline_violations(ctx.read_text(path))))

        findings = []
        for path, found in violations:
            counter = OccurrenceCounter()
            for line, rule_id, kind, snippet in found:
                snippet = normalize_snippet(snippet)
                findings.append(
                    self.finding(
                        rule_id,
                        "warn",
                        _MESSAGES[(rule_id, kind)],
                        file=path,
                        identity=(kind, snippet, counter.next((rule_id, kind, snippet))),
                        line=line,
                        data={"kind": kind, "snippet": snippet[:200]},
                    )
                )

        ctx.log.info(f"Found {len(findings)} style violation(s)")
        return ToolRunResult(
            findings=findings,
            stats={"stylesheets": len(stylesheets), "components": len(components), "violations": len(findings)},
        )
