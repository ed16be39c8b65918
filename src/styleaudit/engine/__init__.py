"""Audit engine — option resolution, run log, and the orchestrator."""

from styleaudit.engine.log import AuditLog, ScopedLog
from styleaudit.engine.options import OptionsError, ResolvedCliOptions, resolve_options
from styleaudit.engine.orchestrator import AuditRun, compute_exit_code, run_audit

__all__ = [
    "AuditLog",
    "AuditRun",
    "OptionsError",
    "ResolvedCliOptions",
    "ScopedLog",
    "compute_exit_code",
    "resolve_options",
    "run_audit",
]
