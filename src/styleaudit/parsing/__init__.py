"""Static-analysis front end — tree-sitter parsers and per-run parse cache."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from styleaudit.parsing.css import (
    Composition,
    CssClass,
    CssDeclaration,
    CssRule,
    Stylesheet,
    normalize_selector,
    parse_stylesheet,
)
from styleaudit.parsing.typescript import ImportBinding, MemberUsage, collect_member_usage, extract_imports

_GRAMMAR_BY_SUFFIX = {
    ".tsx": "tsx",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".jsx": "tsx",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".css": "css",
}


class ParseError(Exception):
    """Raised when a file cannot be read or no grammar fits it."""


class SourceParsers:
    """Grammars and parsed files for one run.

    Parsers are created on first use and trees are cached by path for the
    lifetime of the instance; nothing is shared between runs.
    """

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root
        self._parsers: Dict[str, Any] = {}
        self._trees: Dict[str, Any] = {}
        self._sheets: Dict[str, Stylesheet] = {}

    def parser(self, grammar: str):
        if grammar not in self._parsers:
            from tree_sitter_language_pack import get_parser

            self._parsers[grammar] = get_parser(grammar)
        return self._parsers[grammar]

    @staticmethod
    def grammar_for(path: str) -> Optional[str]:
        for suffix, grammar in _GRAMMAR_BY_SUFFIX.items():
            if path.endswith(suffix):
                return grammar
        return None

    def _read(self, path: str) -> bytes:
        try:
            return (self.repo_root / path).read_bytes()
        except OSError as exc:
            raise ParseError(f"Cannot read {path}: {exc}") from exc

    def tree(self, path: str):
        """Syntax tree for a TS/TSX/JS source file."""
        if path not in self._trees:
            grammar = self.grammar_for(path)
            if grammar is None or grammar == "css":
                raise ParseError(f"No source grammar for {path}")
            self._trees[path] = self.parser(grammar).parse(self._read(path))
        return self._trees[path]

    def stylesheet(self, path: str) -> Stylesheet:
        if path not in self._sheets:
            self._sheets[path] = parse_stylesheet(self.parser("css"), path, self._read(path))
        return self._sheets[path]

    def imports(self, path: str) -> list[ImportBinding]:
        return extract_imports(self.tree(path))


__all__ = [
    "Composition",
    "CssClass",
    "CssDeclaration",
    "CssRule",
    "ImportBinding",
    "MemberUsage",
    "ParseError",
    "SourceParsers",
    "Stylesheet",
    "collect_member_usage",
    "extract_imports",
    "normalize_selector",
    "parse_stylesheet",
]
