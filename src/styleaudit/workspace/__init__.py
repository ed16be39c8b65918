"""Workspace cross-reference index."""

from styleaudit.workspace.indexer import WorkspaceIndex, build_workspace_index
from styleaudit.workspace.resolver import resolve_specifier

__all__ = ["WorkspaceIndex", "build_workspace_index", "resolve_specifier"]
