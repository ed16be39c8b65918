"""Analyzer plugin contract, registry, and built-in tools."""

from styleaudit.tools.models import (
    AuditTool,
    EntitiesScope,
    FilesScope,
    GlobalScope,
    Scope,
    ToolContext,
    ToolExecutionError,
    ToolOutcome,
)
from styleaudit.tools.registry import ToolRegistry, build_registry

__all__ = [
    "AuditTool",
    "EntitiesScope",
    "FilesScope",
    "GlobalScope",
    "Scope",
    "ToolContext",
    "ToolExecutionError",
    "ToolOutcome",
    "ToolRegistry",
    "build_registry",
]
