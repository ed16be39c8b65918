"""Tool plugin contract — scopes, context, and the AuditTool base class."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Literal, Optional, Tuple, Union

from styleaudit.baseline.manager import default_baseline_include
from styleaudit.findings.fingerprint import make_fingerprint
from styleaudit.findings.models import Finding, ToolRunResult

if TYPE_CHECKING:
    from styleaudit.config.schema import StyleAuditConfig
    from styleaudit.engine.log import AuditLog, ScopedLog
    from styleaudit.engine.options import ResolvedCliOptions
    from styleaudit.parsing import SourceParsers
    from styleaudit.targets.builder import FileCorpus
    from styleaudit.targets.models import TargetSet
    from styleaudit.workspace.indexer import WorkspaceIndex

Category = Literal["audit", "fix"]


class ToolExecutionError(Exception):
    """Raised by a tool that cannot do its job (missing binary, bad output)."""


@dataclass(frozen=True)
class FilesScope:
    """Tool receives the run's targets narrowed to *kinds*."""

    kinds: Tuple[str, ...]


@dataclass(frozen=True)
class EntitiesScope:
    """Tool receives index entities (impacted in changed mode, all otherwise)."""

    entity: str
    impacted_by: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GlobalScope:
    """Tool always receives the full tree, even in changed mode."""


Scope = Union[FilesScope, EntitiesScope, GlobalScope]


@dataclass(frozen=True)
class ToolContext:
    """Read-only execution context; one per run, re-scoped per tool."""

    root: Path
    config: "StyleAuditConfig"
    options: "ResolvedCliOptions"
    targets: "TargetSet"
    corpus: "FileCorpus"
    parsers: "SourceParsers"
    log: Union["AuditLog", "ScopedLog"]
    artifacts_dir: Path
    index: Optional["WorkspaceIndex"] = None
    entities: Tuple[str, ...] = ()

    @property
    def mode(self) -> str:
        return self.targets.mode

    def read_text(self, path: str) -> str:
        return (self.root / path).read_text(encoding="utf-8", errors="replace")


@dataclass
class NoConfig:
    """For tools that take no settings."""


class AuditTool:
    """Base class for every analyzer.

    Subclasses set the class attributes and implement :meth:`run`. ``run``
    returns empty findings when there is nothing to do; any exception it
    raises is caught by the orchestrator and the tool counts as failed.
    """

    id: ClassVar[str] = ""
    title: ClassVar[str] = ""
    description: ClassVar[str] = ""
    category: ClassVar[Category] = "audit"
    scope: ClassVar[Scope] = FilesScope(("all",))
    default_enabled: ClassVar[bool] = True
    config_class: ClassVar[type] = NoConfig
    include: ClassVar[Tuple[str, ...]] = ()
    exclude: ClassVar[Tuple[str, ...]] = ()

    def run(self, ctx: ToolContext, config: Any) -> ToolRunResult:
        raise NotImplementedError

    def baseline_include(self, finding: Finding, ctx: Optional[ToolContext]) -> bool:
        return default_baseline_include(finding)

    # ---- helpers for subclasses ----

    def finding(
        self,
        rule_id: str,
        severity: str,
        message: str,
        *,
        file: Optional[str] = None,
        identity: Tuple[object, ...] = (),
        line: Optional[int] = None,
        col: Optional[int] = None,
        hint: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Finding:
        """Build a Finding whose fingerprint covers only *identity*, never the location."""
        return Finding(
            tool=self.id,
            rule_id=rule_id,
            severity=severity,  # type: ignore[arg-type]
            message=message,
            fingerprint=make_fingerprint(self.id, rule_id, file, *identity),
            file=file,
            line=line,
            col=col,
            hint=hint,
            data=data or {},
        )

    def describe_scope(self) -> str:
        scope = self.scope
        if isinstance(scope, FilesScope):
            return f"files({', '.join(scope.kinds)})"
        if isinstance(scope, EntitiesScope):
            return f"entities({scope.entity})"
        if isinstance(scope, GlobalScope):
            return "global"
        raise TypeError(f"Unknown scope {scope!r}")


@dataclass
class ToolOutcome:
    """What the orchestrator records per selected tool."""

    tool_id: str
    ok: bool
    result: ToolRunResult = field(default_factory=ToolRunResult)
    error: Optional[str] = None
    duration_ms: float = 0.0
    targets: int = 0

    def stats(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.result.stats)
        out.setdefault("findings", len(self.result.findings))
        out["targets"] = self.targets
        out["durationMs"] = round(self.duration_ms, 1)
        if self.error:
            out["error"] = self.error
        return out


def tool_files(ctx: ToolContext, *kinds: str) -> List[str]:
    """Scoped target files of *kinds* that still exist on disk."""
    files = sorted({f for k in kinds for f in ctx.targets.files_of(k)})
    return [f for f in files if (ctx.root / f).is_file()]
