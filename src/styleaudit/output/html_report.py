"""Standalone HTML page generated from the report dict."""

from __future__ import annotations

from html import escape
from typing import Any, Dict, List

_STYLE = """
body { font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; color: #1f2937;
       background: #f9fafb; padding: 2rem; line-height: 1.5; }
.container { max-width: 1200px; margin: 0 auto; background: #fff; border-radius: 8px;
             padding: 2rem; box-shadow: 0 1px 3px rgba(0, 0, 0, 0.1); }
.timestamp { color: #6b7280; font-size: 0.875rem; }
.summary { display: grid; grid-template-columns: repeat(auto-fit, minmax(180px, 1fr));
           gap: 1rem; margin: 1.5rem 0; }
.card { border: 1px solid #e5e7eb; border-radius: 6px; padding: 1rem; background: #f9fafb; }
.card h3 { font-size: 0.75rem; color: #6b7280; text-transform: uppercase; margin: 0; }
.card .value { font-size: 1.75rem; font-weight: bold; }
.badge { display: inline-block; padding: 0.1rem 0.5rem; border-radius: 4px;
         font-size: 0.75rem; font-weight: 600; margin-right: 0.5rem; }
.severity-error { background: #fee2e2; color: #991b1b; }
.severity-warn { background: #fef3c7; color: #92400e; }
.severity-info { background: #dbeafe; color: #1e40af; }
.finding { border-left: 4px solid #e5e7eb; padding: 0.75rem 1rem; margin-bottom: 0.75rem;
           background: #f9fafb; border-radius: 4px; }
.finding-error { border-color: #dc2626; }
.finding-warn { border-color: #f59e0b; }
.finding-info { border-color: #3b82f6; }
.file { font-family: Menlo, Monaco, monospace; font-size: 0.85rem; color: #6b7280; }
.hint { margin-top: 0.5rem; font-size: 0.875rem; color: #4b5563; }
.metadata { margin-top: 2rem; border-top: 1px solid #e5e7eb; padding-top: 1rem;
            font-size: 0.875rem; color: #6b7280; }
"""


def _card(title: str, value: Any) -> str:
    return f'<div class="card"><h3>{escape(title)}</h3><div class="value">{escape(str(value))}</div></div>'


def _finding(f: Dict[str, Any]) -> str:
    sev = escape(f["severity"])
    location = ""
    if f.get("file"):
        location = escape(f["file"]) + (f":{f['line']}" if f.get("line") else "")
    parts = [
        f'<div class="finding finding-{sev}">',
        f'<span class="badge severity-{sev}">{sev.upper()}</span>',
        f"<strong>{escape(f['ruleId'])}</strong> {escape(f['message'])}",
    ]
    if location:
        parts.append(f'<div class="file">{location}</div>')
    if f.get("hint"):
        parts.append(f'<div class="hint">{escape(f["hint"])}</div>')
    parts.append("</div>")
    return "".join(parts)


def _by_tool(findings: List[Dict[str, Any]]) -> str:
    if not findings:
        return '<p class="empty">No new findings.</p>'
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for f in findings:
        grouped.setdefault(f["tool"], []).append(f)
    sections = []
    for tool_id in sorted(grouped):
        items = "\n".join(_finding(f) for f in grouped[tool_id])
        sections.append(f"<h3>{escape(tool_id)} ({len(grouped[tool_id])})</h3>\n{items}")
    return "\n".join(sections)


def render(report: Dict[str, Any]) -> str:
    """Return the full HTML document for *report*."""
    metadata = report["metadata"]
    summary = report["summary"]
    sev = summary["bySeverity"]

    cards = "".join(
        [
            _card("New findings", summary["new"]),
            _card("Errors", sev["error"]),
            _card("Warnings", sev["warn"]),
            _card("Info", sev["info"]),
            _card("Baselined", summary["suppressed"]),
        ]
    )
    top_rules = "".join(
        f"<li>{escape(r['ruleId'])}: {r['count']}</li>" for r in summary["topRuleIds"]
    )
    top_files = "".join(f"<li>{escape(r['file'])}: {r['count']}</li>" for r in summary["topFiles"])

    meta_lines = [
        f"Mode: {escape(metadata['mode'])}" + (" (fallback from changed)" if metadata.get("degraded") else ""),
        f"Tools run: {escape(', '.join(metadata['toolsRun']) or 'none')}",
    ]
    if metadata.get("sinceRef"):
        meta_lines.append(f"Since: {escape(metadata['sinceRef'])}")
    if metadata.get("toolsFailed"):
        meta_lines.append(f"Tools failed: {escape(', '.join(metadata['toolsFailed']))}")
    meta_lines.extend(f"Warning: {escape(w)}" for w in metadata.get("warnings", []))

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>styleaudit report</title>
<style>{_STYLE}</style>
</head>
<body>
<div class="container">
<h1>styleaudit report</h1>
<div class="timestamp">Generated {escape(report['generatedAt'])}</div>
<div class="summary">{cards}</div>
<h2>Top rules</h2>
<ul>{top_rules}</ul>
<h2>Top files</h2>
<ul>{top_files}</ul>
<h2>New findings</h2>
{_by_tool(report.get('findings', []))}
<div class="metadata">{'<br>'.join(meta_lines)}</div>
</div>
</body>
</html>
"""
