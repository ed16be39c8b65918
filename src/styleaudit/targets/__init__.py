"""Target selection — file universe per run."""

from styleaudit.targets.builder import FileCorpus, build_target_set, filter_files
from styleaudit.targets.models import FILE_KINDS, TargetSet, classify

__all__ = [
    "FILE_KINDS",
    "FileCorpus",
    "TargetSet",
    "build_target_set",
    "classify",
    "filter_files",
]
