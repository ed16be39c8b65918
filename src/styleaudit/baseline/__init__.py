"""Baseline persistence and reconciliation."""

from styleaudit.baseline.manager import (
    PersistenceError,
    default_baseline_include,
    filter_against_baseline,
    read_baseline,
    update_baseline,
    write_baseline,
)
from styleaudit.baseline.models import Baseline, BaselineEntry

__all__ = [
    "Baseline",
    "BaselineEntry",
    "PersistenceError",
    "default_baseline_include",
    "filter_against_baseline",
    "read_baseline",
    "update_baseline",
    "write_baseline",
]
