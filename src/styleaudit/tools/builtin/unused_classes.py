"""Unused CSS module classes.

Usage starts from every source that imports a module (property reads,
string subscripts, destructuring, named imports) and is then propagated
through ``composes`` with a worklist over ``(module, class)`` pairs until
nothing new is reached. Modules that compose from an analyzed module are
analyzed as well, since their usage can keep its classes alive.

A module read through a non-literal key (``styles[variant]``) cannot be
proven to leave a class unused; its findings drop to ``info``.
"""

from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set, Tuple

from styleaudit.findings.models import Finding, ToolRunResult
from styleaudit.parsing import ParseError, Stylesheet, collect_member_usage
from styleaudit.tools.models import AuditTool, EntitiesScope, ToolContext, ToolExecutionError
from styleaudit.workspace.resolver import resolve_specifier

IGNORE_FILE_MARKER = re.compile(r"/\*\s*styleaudit-ignore-file\s+unused-classes\s*\*/")
IGNORE_CLASS_MARKER = re.compile(
    r"/\*\s*styleaudit-ignore\s+unused-class\s*\*/[^.{]*?\.(-?[_a-zA-Z][_a-zA-Z0-9-]*)"
)


@dataclass
class UnusedClassesConfig:
    ignore_class_name_patterns: List[str] = field(default_factory=list)
    ignore_files: List[str] = field(default_factory=list)


@dataclass
class _ModuleUsage:
    used: Set[str] = field(default_factory=set)
    dynamic: bool = False
    failed_importers: List[str] = field(default_factory=list)


def _pattern(patterns: List[str]) -> Optional[re.Pattern[str]]:
    if not patterns:
        return None
    return re.compile("|".join(re.escape(p).replace(r"\*", ".*") for p in patterns))


class UnusedClassesTool(AuditTool):
    id = "css-unused-classes"
    title = "Unused CSS Classes"
    description = "Finds CSS module classes no importer reads"
    scope = EntitiesScope("css_module", ("css_module", "ts", "tsx"))
    config_class = UnusedClassesConfig

    def baseline_include(self, finding: Finding, ctx: Optional[ToolContext]) -> bool:
        return finding.rule_id == "css/unused-class" and finding.severity == "warn"

    # ---- graph ----

    def _stylesheet(self, ctx: ToolContext, module: str, errors: Dict[str, str]) -> Optional[Stylesheet]:
        try:
            sheet = ctx.parsers.stylesheet(module)
        except ParseError as exc:
            errors[module] = str(exc)
            return None
        if sheet.has_errors:
            errors.setdefault(module, sheet.errors[0])
        return sheet

    def _composition_edges(
        self, ctx: ToolContext, sheets: Dict[str, Stylesheet]
    ) -> Dict[str, List[Tuple[List[str], str, List[str]]]]:
        """module -> [(owner classes, target module, composed names)]."""
        aliases = ctx.config.index.aliases
        edges: Dict[str, List[Tuple[List[str], str, List[str]]]] = {}
        for module, sheet in sheets.items():
            for comp in sheet.compositions:
                if comp.source is None:
                    target: Optional[str] = module
                else:
                    target = resolve_specifier(comp.source, module, ctx.root, aliases)
                if target is not None:
                    edges.setdefault(module, []).append((comp.owners, target, comp.names))
        return edges

    def _direct_usage(self, ctx: ToolContext, module: str) -> _ModuleUsage:
        usage = _ModuleUsage()
        index = ctx.index
        for importer in sorted(index.importers_of(module)):
            bindings = index.bindings_for(importer, module)
            for binding in bindings:
                usage.used.update(binding.named)
            object_names = {n for b in bindings for n in b.object_names}
            if not object_names:
                continue
            try:
                tree = ctx.parsers.tree(importer)
            except ParseError:
                usage.failed_importers.append(importer)
                continue
            member = collect_member_usage(tree, object_names)
            usage.used.update(member.names)
            usage.dynamic = usage.dynamic or member.dynamic
        return usage

    # ---- run ----

    def run(self, ctx: ToolContext, config: UnusedClassesConfig) -> ToolRunResult:
        if ctx.index is None:
            raise ToolExecutionError("workspace index was not built")

        ignore_files = set(config.ignore_files)
        analyzed = [m for m in ctx.entities if m not in ignore_files and (ctx.root / m).is_file()]
        if not analyzed:
            return ToolRunResult(stats={"modulesAnalyzed": 0})

        errors: Dict[str, str] = {}
        sheets: Dict[str, Stylesheet] = {}
        for module in ctx.index.artifact_files:
            sheet = self._stylesheet(ctx, module, errors)
            if sheet is not None:
                sheets[module] = sheet

        edges = self._composition_edges(ctx, sheets)
        composed_by: Dict[str, Set[str]] = {}
        for module, module_edges in edges.items():
            for _, target, _ in module_edges:
                if target != module:
                    composed_by.setdefault(target, set()).add(module)

        # every module whose usage can reach an analyzed module
        relevant: Set[str] = set()
        frontier: Deque[str] = deque(analyzed)
        while frontier:
            module = frontier.popleft()
            if module in relevant:
                continue
            relevant.add(module)
            frontier.extend(composed_by.get(module, ()))

        usages = {m: self._direct_usage(ctx, m) for m in sorted(relevant)}

        reached: Set[Tuple[str, str]] = set()
        worklist: Deque[Tuple[str, str]] = deque(
            (m, name) for m, usage in usages.items() for name in sorted(usage.used)
        )
        while worklist:
            pair = worklist.popleft()
            if pair in reached:
                continue
            reached.add(pair)
            module, name = pair
            for owners, target, names in edges.get(module, ()):
                if name in owners:
                    worklist.extend((target, n) for n in names if (target, n) not in reached)

        ignore_names = _pattern(config.ignore_class_name_patterns)
        findings: List[Finding] = []
        for module in analyzed:
            findings.extend(
                self._module_findings(
                    ctx, module, sheets.get(module), usages[module], errors, reached, ignore_names
                )
            )

        ctx.log.info(f"Analyzed {len(analyzed)} CSS module(s), {len(findings)} finding(s)")
        return ToolRunResult(
            findings=findings,
            stats={
                "modulesAnalyzed": len(analyzed),
                "modulesConsidered": len(relevant),
                "classesReached": len(reached),
            },
        )

    def _module_findings(
        self,
        ctx: ToolContext,
        module: str,
        sheet: Optional[Stylesheet],
        usage: _ModuleUsage,
        errors: Dict[str, str],
        reached: Set[Tuple[str, str]],
        ignore_names: Optional[re.Pattern[str]],
    ) -> List[Finding]:
        findings: List[Finding] = []
        if module in errors:
            findings.append(
                self.finding(
                    "css/parse-error",
                    "warn",
                    f"Failed to parse CSS module: {errors[module]}",
                    file=module,
                )
            )
        if sheet is None:
            return findings

        text = ctx.read_text(module)
        if IGNORE_FILE_MARKER.search(text):
            return findings
        suppressed = set(IGNORE_CLASS_MARKER.findall(text))

        if usage.dynamic:
            findings.append(
                self.finding(
                    "css/dynamic-access",
                    "info",
                    "CSS module is read with dynamic keys; unused class detection is incomplete",
                    file=module,
                    hint="Accesses like styles[variant] cannot be resolved statically",
                )
            )

        confident = not usage.dynamic and not usage.failed_importers and module not in errors
        for name, cls in sheet.classes.items():
            if (module, name) in reached or name in suppressed:
                continue
            if ignore_names is not None and ignore_names.fullmatch(name):
                continue
            findings.append(
                self.finding(
                    "css/unused-class",
                    "warn" if confident else "info",
                    f"Unused CSS class: {name}",
                    file=module,
                    identity=(name,),
                    line=cls.line,
                    col=cls.col,
                    hint=(
                        "Remove it or mark it with /* styleaudit-ignore unused-class */"
                        if confident
                        else "May be unused; dynamic access or parse errors lower confidence"
                    ),
                    data={"className": name, "confidence": "high" if confident else "low"},
                )
            )
        return findings
