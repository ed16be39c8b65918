"""Stable finding identity."""

from __future__ import annotations

import hashlib
import re
from typing import Dict, Hashable, Optional

from styleaudit.paths import normalize_path

FINGERPRINT_LENGTH = 32


def make_fingerprint(tool: str, rule_id: str, file: Optional[str], *parts: object) -> str:
    """Hash tool, rule, file and stable content into a fingerprint.

    Line and column must never be passed in *parts*.
    """
    payload = "|".join(
        [tool, rule_id, normalize_path(file) if file else "", *(str(p) for p in parts)]
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def normalize_snippet(text: str) -> str:
    """Collapse whitespace so re-indentation does not change identity."""
    return re.sub(r"\s+", " ", text).strip()


class OccurrenceCounter:
    """Ordinal per key, for identical content repeated in one file."""

    def __init__(self) -> None:
        self._seen: Dict[Hashable, int] = {}

    def next(self, key: Hashable) -> int:
        n = self._seen.get(key, 0)
        self._seen[key] = n + 1
        return n
