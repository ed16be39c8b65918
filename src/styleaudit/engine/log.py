"""Run log — rich console output on stderr, warnings kept for the report."""

from __future__ import annotations

from typing import List, Optional

from rich.console import Console
from rich.markup import escape


class AuditLog:
    """Progress and diagnostics for one run.

    ``info`` is silenced in quiet (CI) mode; warnings and errors always
    print. Every warning is also kept so it can go into report metadata.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        *,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self.console = console or Console(stderr=True)
        self.quiet = quiet
        self.verbose = verbose
        self.warnings: List[str] = []

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(escape(message))

    def debug(self, message: str) -> None:
        if self.verbose:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        self.console.print(f"[yellow]⚠[/yellow]  {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def scoped(self, prefix: str) -> "ScopedLog":
        return ScopedLog(self, prefix)


class ScopedLog:
    """The same log with every message prefixed by a tool id."""

    def __init__(self, parent: AuditLog, prefix: str) -> None:
        self._parent = parent
        self._prefix = prefix

    def info(self, message: str) -> None:
        self._parent.info(f"[{self._prefix}] {message}")

    def debug(self, message: str) -> None:
        self._parent.debug(f"[{self._prefix}] {message}")

    def warn(self, message: str) -> None:
        self._parent.warn(f"[{self._prefix}] {message}")

    def error(self, message: str) -> None:
        self._parent.error(f"[{self._prefix}] {message}")

    @property
    def warnings(self) -> List[str]:
        return self._parent.warnings
