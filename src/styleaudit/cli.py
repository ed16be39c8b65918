"""styleaudit CLI — Typer application with run, init, and tools commands."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from styleaudit import __version__

app = typer.Typer(
    name="styleaudit",
    help="Incremental static analysis for the styling layer of a web repository.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


def _detect_ci() -> bool:
    """Auto-detect CI environment."""
    return os.environ.get("CI", "").lower() in ("true", "1", "yes")


def _resolve_repo_root() -> Path:
    from styleaudit.paths import find_repo_root

    return find_repo_root(Path.cwd())


# ── run ───────────────────────────────────────────────────────────────────────


@app.command()
def run(
    changed: bool = typer.Option(False, "--changed", help="Only audit files changed since --since"),
    since: Optional[str] = typer.Option(None, "--since", help="Comparison ref for --changed (default HEAD~1)"),
    include: Optional[List[str]] = typer.Option(None, "--include", help="Glob to include (repeatable)"),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", help="Glob to exclude (repeatable)"),
    tools: Optional[str] = typer.Option(None, "--tools", help="Comma-separated tool ids to run"),
    skip_tools: Optional[str] = typer.Option(None, "--skip-tools", help="Comma-separated tool ids to skip"),
    baseline: Optional[str] = typer.Option(None, "--baseline", help="Baseline file path"),
    no_baseline: bool = typer.Option(False, "--no-baseline", help="Report every finding as new"),
    update_baseline: bool = typer.Option(False, "--update-baseline", help="Refresh the baseline from this run"),
    force: bool = typer.Option(False, "--force", help="Allow --update-baseline with --changed"),
    fail_on: Optional[str] = typer.Option(None, "--fail-on", help="Severity threshold: error | warn | info"),
    strict: bool = typer.Option(False, "--strict", help="Same as --fail-on warn"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="JSON report path"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Console output: pretty | json | junit"),
    json_output: bool = typer.Option(False, "--json", help="Shorthand for --format json"),
    junit_output: bool = typer.Option(False, "--junit", help="Shorthand for --format junit"),
    html: bool = typer.Option(False, "--html", help="Also write an HTML report next to the JSON one"),
    ci: bool = typer.Option(False, "--ci", help="CI mode: quiet logs, no pretty summary"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .styleaudit.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Run the selected audit tools and report findings."""
    from styleaudit.baseline.manager import PersistenceError
    from styleaudit.config.loader import ConfigError, load_config
    from styleaudit.config.schema import StyleAuditConfig
    from styleaudit.engine.log import AuditLog
    from styleaudit.engine.options import OptionsError, resolve_options
    from styleaudit.engine.orchestrator import run_audit
    from styleaudit.output import junit, report as json_report, terminal

    repo_root = _resolve_repo_root()
    ci_mode = ci or _detect_ci()
    log = AuditLog(console, quiet=ci_mode, verbose=verbose)

    # --- Load config ---
    try:
        cfg = load_config(repo_root, config)
    except ConfigError as exc:
        log.warn(f"{exc}; using default configuration")
        cfg = StyleAuditConfig()

    if json_output:
        format = "json"
    elif junit_output:
        format = "junit"

    try:
        options = resolve_options(
            repo_root,
            cfg,
            changed=changed,
            since=since,
            include=include,
            exclude=exclude,
            tools=[tools] if tools else None,
            skip_tools=[skip_tools] if skip_tools else None,
            baseline=baseline,
            no_baseline=no_baseline,
            update_baseline=update_baseline,
            force=force,
            fail_on=fail_on,
            strict=strict,
            output=output,
            format=format,
            html=html,
            ci=ci_mode,
            verbose=verbose,
            warn=log.warn,
        )
    except OptionsError as exc:
        log.error(str(exc))
        raise typer.Exit(code=2) from exc

    if verbose:
        log.debug(f"Repo root: {repo_root}")
        log.debug(f"CI mode: {ci_mode}")

    # --- Run ---
    try:
        result = run_audit(repo_root, cfg, options, log)
    except PersistenceError as exc:
        log.error(str(exc))
        raise typer.Exit(code=2) from exc

    # --- Output ---
    if options.format == "json":
        print(json_report.render(result.report))
    elif options.format == "junit":
        print(junit.render(result.report))
    elif not ci_mode:
        terminal.render(result.report, fail_on=options.fail_on, failed=result.failed, console=console)

    if verbose:
        log.debug(f"Report written to {options.output_path}")

    raise typer.Exit(code=result.exit_code)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
) -> None:
    """Generate a starter .styleaudit.toml in the repo root."""
    from styleaudit.config.defaults import DEFAULT_TOML
    from styleaudit.config.loader import CONFIG_FILENAME

    repo_root = _resolve_repo_root()
    config_path = repo_root / CONFIG_FILENAME

    if config_path.exists() and not force:
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── tools ─────────────────────────────────────────────────────────────────────


@app.command("tools")
def list_tools() -> None:
    """List the registered audit tools."""
    from rich.table import Table

    from styleaudit.tools.registry import build_registry

    table = Table(title="styleaudit tools", title_style="bold", border_style="dim")
    table.add_column("Id", style="cyan")
    table.add_column("Category")
    table.add_column("Scope", style="magenta")
    table.add_column("Default", justify="center")
    table.add_column("Description")

    for tool in build_registry().all_tools:
        table.add_row(
            tool.id,
            tool.category,
            tool.describe_scope(),
            "yes" if tool.default_enabled and tool.category == "audit" else "no",
            tool.description,
        )
    Console().print(table)


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"styleaudit {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """styleaudit — Incremental static analysis for stylesheets and their importers."""
