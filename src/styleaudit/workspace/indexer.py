"""Workspace indexer — which sources import which CSS modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Set

from styleaudit.parsing import ImportBinding, ParseError, SourceParsers
from styleaudit.targets.builder import FileCorpus
from styleaudit.targets.models import TargetSet
from styleaudit.workspace.resolver import resolve_specifier


@dataclass
class WorkspaceIndex:
    """Cross-reference data shared by entity-scoped tools. Read-only once built."""

    importers: Dict[str, Set[str]] = field(default_factory=dict)
    artifact_files: List[str] = field(default_factory=list)
    impacted: Optional[Set[str]] = None  # changed mode only
    # importer -> import declarations that resolved to a CSS module
    bindings: Dict[str, List[tuple[str, ImportBinding]]] = field(default_factory=dict)
    sources_indexed: int = 0
    parse_failures: List[str] = field(default_factory=list)

    def importers_of(self, artifact: str) -> Set[str]:
        return set(self.importers.get(artifact, set()))

    def bindings_for(self, importer: str, artifact: str) -> List[ImportBinding]:
        return [b for target, b in self.bindings.get(importer, []) if target == artifact]

    def entities(self, mode: str) -> List[str]:
        """The impacted set in changed mode, every artifact otherwise."""
        if mode == "changed" and self.impacted is not None:
            return sorted(self.impacted)
        return list(self.artifact_files)


def build_workspace_index(
    repo_root: Path,
    targets: TargetSet,
    corpus: FileCorpus,
    parsers: SourceParsers,
    aliases: Mapping[str, str],
    debug=None,
) -> WorkspaceIndex:
    """Walk every TS/TSX/JS source in the corpus and record CSS module imports."""
    index = WorkspaceIndex(artifact_files=corpus.files("css_module"))
    known_artifacts = set(index.artifact_files)

    for source in corpus.files("ts", "tsx", "js"):
        try:
            declarations = parsers.imports(source)
        except ParseError as exc:
            index.parse_failures.append(source)
            if debug:
                debug(str(exc))
            continue
        index.sources_indexed += 1
        for binding in declarations:
            artifact = resolve_specifier(binding.source, source, repo_root, aliases)
            if artifact is None or artifact not in known_artifacts:
                continue
            index.importers.setdefault(artifact, set()).add(source)
            index.bindings.setdefault(source, []).append((artifact, binding))

    if targets.mode == "changed":
        changed = set(targets.changed_files)
        impacted = {f for f in changed if f in known_artifacts}
        for source in changed:
            for artifact, _ in index.bindings.get(source, []):
                impacted.add(artifact)
        index.impacted = impacted

    return index
