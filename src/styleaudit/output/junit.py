"""JUnit XML reporter — one testcase per tool, failures for new findings."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any, Dict, List


def _describe(finding: Dict[str, Any]) -> str:
    where = finding.get("file", "")
    if where and finding.get("line"):
        where += f":{finding['line']}"
    text = f"[{finding['severity']}] {finding['ruleId']} {where}\n  {finding['message']}"
    if finding.get("hint"):
        text += f"\n  hint: {finding['hint']}"
    return text


def to_element(report: Dict[str, Any]) -> ET.Element:
    metadata = report["metadata"]
    by_tool: Dict[str, List[Dict[str, Any]]] = {}
    for finding in report.get("findings", []):
        by_tool.setdefault(finding["tool"], []).append(finding)

    tool_ids = list(dict.fromkeys([*metadata["toolsRun"], *metadata["toolsFailed"], *by_tool]))
    failed_tools = set(metadata["toolsFailed"])

    suite = ET.Element(
        "testsuite",
        name="styleaudit",
        tests=str(len(tool_ids)),
        failures=str(sum(1 for t in tool_ids if by_tool.get(t))),
        errors=str(len(failed_tools)),
        timestamp=report["generatedAt"],
    )
    for tool_id in tool_ids:
        stats = metadata.get("toolStats", {}).get(tool_id, {})
        case = ET.SubElement(
            suite,
            "testcase",
            classname="styleaudit",
            name=tool_id,
            time=f"{stats.get('durationMs', 0) / 1000:.3f}",
        )
        if tool_id in failed_tools:
            error = ET.SubElement(case, "error", message=str(stats.get("error", "tool failed")))
            error.text = str(stats.get("error", ""))
        findings = by_tool.get(tool_id, [])
        if findings:
            failure = ET.SubElement(
                case,
                "failure",
                message=f"{len(findings)} new finding(s)",
                type="styleaudit",
            )
            failure.text = "\n".join(_describe(f) for f in findings)
    return suite


def render(report: Dict[str, Any]) -> str:
    """Return the JUnit document as a string."""
    element = to_element(report)
    ET.indent(element)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(element, encoding="unicode")
