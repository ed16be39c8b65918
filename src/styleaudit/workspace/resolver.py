"""Resolve import specifiers to repo-relative CSS module paths."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Mapping, Optional

CSS_MODULE_SUFFIX = ".module.css"


def _with_module_suffix(spec: str) -> Optional[str]:
    if spec.endswith(CSS_MODULE_SUFFIX):
        return spec
    if spec.endswith(".module"):
        return spec + ".css"
    return None


def resolve_specifier(
    spec: str,
    importer: str,
    repo_root: Path,
    aliases: Mapping[str, str],
    *,
    must_exist: bool = True,
) -> Optional[str]:
    """Return the CSS module *spec* refers to, relative to *repo_root*.

    Relative specifiers resolve against the importer's directory; alias
    prefixes (longest first) resolve against their configured directory.
    Bare package specifiers and anything outside the repo give None.
    """
    target = _with_module_suffix(spec)
    if target is None:
        return None

    if target.startswith(("./", "../")):
        joined = posixpath.join(posixpath.dirname(importer), target)
    else:
        for prefix in sorted(aliases, key=len, reverse=True):
            if target.startswith(prefix):
                joined = posixpath.join(aliases[prefix], target[len(prefix):])
                break
        else:
            return None

    resolved = posixpath.normpath(joined)
    if resolved.startswith("../") or resolved == ".." or posixpath.isabs(resolved):
        return None
    if must_exist and not (repo_root / resolved).is_file():
        return None
    return resolved
