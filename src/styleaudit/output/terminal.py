"""Rich terminal reporter — summary, findings table, severity pills."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

_SEVERITY_STYLE = {
    "error": "bold white on red",
    "warn": "bold black on yellow",
    "info": "bold black on bright_cyan",
}

_SEVERITY_ICON = {
    "error": "🔴",
    "warn": "🟡",
    "info": "🔵",
}

MAX_ROWS = 50


def _severity_pill(severity: str) -> Text:
    style = _SEVERITY_STYLE.get(severity, "")
    icon = _SEVERITY_ICON.get(severity, "")
    return Text(f" {icon} {severity.upper()} ", style=style)


def _location(finding: Dict[str, Any]) -> str:
    file = finding.get("file")
    if not file:
        return "-"
    line = finding.get("line")
    return f"{file}:{line}" if line else file


def render(
    report: Dict[str, Any],
    *,
    fail_on: str = "error",
    failed: bool = False,
    console: Optional[Console] = None,
) -> None:
    """Print the run summary and new findings to stderr."""
    console = console or Console(stderr=True)
    findings: List[Dict[str, Any]] = report.get("findings", [])
    metadata = report["metadata"]

    console.print()
    if not findings:
        console.print("[bold green]✅ No new style issues.[/bold green]")
    else:
        table = Table(
            title="styleaudit — new findings",
            show_lines=False,
            title_style="bold",
            border_style="dim",
        )
        table.add_column("Severity", justify="center", width=12)
        table.add_column("Rule", style="cyan", min_width=20)
        table.add_column("Location", style="magenta")
        table.add_column("Message")

        for finding in findings[:MAX_ROWS]:
            table.add_row(
                _severity_pill(finding["severity"]),
                finding["ruleId"],
                _location(finding),
                finding["message"],
            )
        console.print(table)
        if len(findings) > MAX_ROWS:
            console.print(f"[dim]… and {len(findings) - MAX_ROWS} more (see the JSON report)[/dim]")

    _print_summary(console, report)

    console.print()
    if failed:
        console.print(f"[bold red]❌ FAILED — new findings at or above '{fail_on}'.[/bold red]")
    elif metadata.get("toolsFailed"):
        console.print("[bold yellow]⚠️  Passed, but some tools failed to run.[/bold yellow]")
    else:
        console.print("[bold green]Passed.[/bold green]")


def _print_summary(console: Console, report: Dict[str, Any]) -> None:
    metadata = report["metadata"]
    summary = report["summary"]
    sev = summary["bySeverity"]

    mode = metadata["mode"]
    if metadata.get("degraded"):
        mode += " (fallback from changed)"
    elif mode == "changed":
        mode += f" since {metadata.get('sinceRef')} ({metadata['changedFilesCount']} file(s))"

    console.print()
    console.print(f"[dim]Mode:[/dim]          {mode}")
    console.print(f"[dim]Tools run:[/dim]     {len(metadata['toolsRun'])}")
    if metadata.get("toolsFailed"):
        console.print(f"[dim]Tools failed:[/dim]  [red]{', '.join(metadata['toolsFailed'])}[/red]")
    console.print(f"[dim]Findings:[/dim]      {summary['totalFindings']}")
    console.print(f"[dim]Baselined:[/dim]     {summary['suppressed']}")
    console.print(
        f"[dim]New:[/dim]           {summary['new']} "
        f"([red]{sev['error']} error[/red], [yellow]{sev['warn']} warn[/yellow], "
        f"[cyan]{sev['info']} info[/cyan])"
    )
    if summary["topRuleIds"]:
        top = ", ".join(f"{r['ruleId']} ({r['count']})" for r in summary["topRuleIds"][:5])
        console.print(f"[dim]Top rules:[/dim]     {top}")
