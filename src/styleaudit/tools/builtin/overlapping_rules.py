"""Duplicate declaration blocks across files and conflicting repeats of one selector."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from styleaudit.findings.models import Finding, ToolRunResult
from styleaudit.parsing import CssRule, ParseError
from styleaudit.tools.models import AuditTool, FilesScope, ToolContext, tool_files


@dataclass
class OverlappingRulesConfig:
    min_declarations: int = 1
    max_listed_files: int = 5


def declaration_signature(declarations: Dict[str, str]) -> str:
    """Canonical, order-independent form of a declaration block."""
    return ";".join(sorted(f"{prop}:{value}" for prop, value in declarations.items()))


@dataclass
class _Block:
    file: str
    rule: CssRule
    signature: str


class OverlappingRulesTool(AuditTool):
    id = "css-overlapping-rules"
    title = "Overlapping/Duplicate Rules"
    description = (
        "Detects identical declaration blocks across files and conflicting declarations "
        "for a repeated selector"
    )
    scope = FilesScope(("css", "css_module"))
    config_class = OverlappingRulesConfig

    def baseline_include(self, finding: Finding, ctx: Optional[ToolContext]) -> bool:
        return finding.severity != "info" or finding.rule_id == "css/duplicate-declarations"

    def run(self, ctx: ToolContext, config: OverlappingRulesConfig) -> ToolRunResult:
        analysis_files = tool_files(ctx, "css", "css_module")
        if not analysis_files:
            return ToolRunResult(stats={"filesAnalyzed": 0})

        # a changed file can duplicate an untouched one, so signatures always
        # cover the whole corpus
        if ctx.mode == "changed":
            corpus_files = sorted(set(ctx.corpus.files("css", "css_module")) | set(analysis_files))
        else:
            corpus_files = analysis_files
        analysis_set = set(analysis_files)

        findings: List[Finding] = []
        blocks_by_file: Dict[str, List[_Block]] = {}
        for path in corpus_files:
            try:
                sheet = ctx.parsers.stylesheet(path)
            except ParseError as exc:
                if path in analysis_set:
                    findings.append(self._parse_error(path, str(exc)))
                continue
            if sheet.has_errors:
                if path in analysis_set:
                    findings.append(self._parse_error(path, sheet.errors[0]))
                continue
            blocks_by_file[path] = [
                _Block(path, rule, declaration_signature(rule.declarations))
                for rule in sheet.rules
                if len(rule.declarations) >= max(config.min_declarations, 1)
            ]

        changed = set(ctx.targets.changed_files) if ctx.mode == "changed" else set()
        findings.extend(self._duplicates(blocks_by_file, changed, config))
        findings.extend(
            self._conflicts({f: b for f, b in blocks_by_file.items() if f in analysis_set})
        )

        ctx.log.info(
            f"Analyzed {len(corpus_files)} stylesheet(s) ({len(analysis_files)} for conflicts), "
            f"{len(findings)} finding(s)"
        )
        return ToolRunResult(
            findings=findings,
            stats={"filesAnalyzed": len(corpus_files), "filesCheckedForConflicts": len(analysis_files)},
        )

    def _parse_error(self, path: str, detail: str) -> Finding:
        return self.finding("css/parse-error", "warn", f"Failed to parse stylesheet: {detail}", file=path)

    def _duplicates(
        self,
        blocks_by_file: Dict[str, List[_Block]],
        changed: Set[str],
        config: OverlappingRulesConfig,
    ) -> List[Finding]:
        groups: Dict[str, List[_Block]] = {}
        for blocks in blocks_by_file.values():
            for block in blocks:
                groups.setdefault(block.signature, []).append(block)

        findings: List[Finding] = []
        for signature in sorted(groups):
            entries = groups[signature]
            files = list(dict.fromkeys(b.file for b in entries))
            selectors = list(dict.fromkeys(b.rule.selector for b in entries))
            if len(entries) < 2 or (len(files) < 2 and len(selectors) < 2):
                continue
            if changed and not changed.intersection(files):
                continue

            severity = "warn" if len(selectors) > 1 else "info"
            message = f"Duplicate declaration block found in {len(files)} file(s)"
            if len(selectors) > 1:
                message += f" with {len(selectors)} different selector(s)"
            listed = ", ".join(files[: config.max_listed_files])
            if len(files) > config.max_listed_files:
                listed += ", ..."
            representative = next((f for f in files if f not in changed), files[0])

            seen: Set[str] = set()
            for block in entries:
                if block.file in seen:
                    continue
                seen.add(block.file)
                findings.append(
                    self.finding(
                        "css/duplicate-declarations",
                        severity,
                        message,
                        file=block.file,
                        identity=(signature,),
                        line=block.rule.line,
                        col=block.rule.col,
                        hint=f"Consolidate into a shared class or token. Found in: {listed}",
                        data={
                            "signature": signature,
                            "fileCount": len(files),
                            "selectorCount": len(selectors),
                            "otherFiles": [f for f in files if f != block.file],
                            "selectors": selectors,
                            "recommendation": (
                                f"Consider consolidating in {representative}"
                                if representative != block.file
                                else "Consider extracting to a shared utility or token"
                            ),
                        },
                    )
                )
        return findings

    def _conflicts(self, blocks_by_file: Dict[str, List[_Block]]) -> List[Finding]:
        findings: List[Finding] = []
        for path in sorted(blocks_by_file):
            by_selector: Dict[Tuple[str, str], List[_Block]] = {}
            for block in blocks_by_file[path]:
                by_selector.setdefault((block.rule.context, block.rule.selector), []).append(block)

            for (context, selector), blocks in by_selector.items():
                if len(blocks) < 2:
                    continue
                values: Dict[str, List[str]] = {}
                for block in blocks:
                    for prop, value in block.rule.declarations.items():
                        seen = values.setdefault(prop, [])
                        if value not in seen:
                            seen.append(value)
                conflicts = [{"property": p, "values": v} for p, v in values.items() if len(v) > 1]
                if not conflicts:
                    continue

                described = "; ".join(f"{c['property']}: {' vs '.join(c['values'])}" for c in conflicts[:3])
                if len(conflicts) > 3:
                    described += f" (and {len(conflicts) - 3} more)"
                where = f" inside {context}" if context else ""
                findings.append(
                    self.finding(
                        "css/conflicting-selector",
                        "warn",
                        f'Selector "{selector}"{where} appears {len(blocks)} times with conflicting '
                        f"declarations ({described})",
                        file=path,
                        identity=(context, selector),
                        line=blocks[0].rule.line,
                        col=blocks[0].rule.col,
                        hint="Consolidate into a single rule",
                        data={
                            "selector": selector,
                            "context": context,
                            "occurrenceCount": len(blocks),
                            "conflicts": conflicts,
                        },
                    )
                )
        return findings
