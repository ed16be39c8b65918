"""Shared test fixtures — temp git repos, sample web project trees, tool contexts."""

from __future__ import annotations

import io
import subprocess
import textwrap
from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest
from rich.console import Console

from styleaudit.config.schema import StyleAuditConfig
from styleaudit.engine.log import AuditLog
from styleaudit.engine.options import ResolvedCliOptions
from styleaudit.engine.orchestrator import scoped_context
from styleaudit.parsing import SourceParsers
from styleaudit.targets.builder import FileCorpus
from styleaudit.targets.models import TargetSet
from styleaudit.tools.models import EntitiesScope, ToolContext
from styleaudit.workspace.indexer import build_workspace_index


def git(repo: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, capture_output=True, check=True)


def write_tree(root: Path, files: Dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")


def commit_all(repo: Path, message: str = "update") -> None:
    git(repo, "add", "-A")
    git(repo, "commit", "-m", message)


def quiet_log() -> AuditLog:
    return AuditLog(Console(file=io.StringIO(), width=200), verbose=True)


WEB_PROJECT: Dict[str, str] = {
    "package.json": '{"name": "web"}\n',
    "styles/tokens/colors.css": """\
        :root {
          --color-primary: #0055ff;
          --color-unused: #ff00ff;
        }
    """,
    "styles/globals.css": """\
        body {
          color: var(--color-primary);
        }
    """,
    "components/Button/Button.module.css": """\
        .root {
          display: flex;
        }
        .primary {
          composes: root;
          color: var(--color-primary);
        }
        .orphan {
          opacity: 0.5;
        }
    """,
    "components/Button/Button.tsx": """\
        import styles from './Button.module.css';

        export function Button() {
          return <button className={styles.primary}>Go</button>;
        }
    """,
    "components/Card/Card.module.css": """\
        .card {
          display: grid;
        }
    """,
}


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository for integration tests."""
    subprocess.run(["git", "init", str(tmp_path)], capture_output=True, check=True)
    git(tmp_path, "config", "user.email", "test@test.com")
    git(tmp_path, "config", "user.name", "Test")
    git(tmp_path, "config", "commit.gpgsign", "false")
    # Initial commit
    (tmp_path / "README.md").write_text("# Test\n")
    commit_all(tmp_path, "init")
    return tmp_path


@pytest.fixture
def web_project(tmp_path: Path) -> Path:
    """A small web project tree (no git)."""
    write_tree(tmp_path, WEB_PROJECT)
    return tmp_path


@pytest.fixture
def web_repo(tmp_git_repo: Path) -> Path:
    """The sample web project committed on top of the initial commit."""
    write_tree(tmp_git_repo, WEB_PROJECT)
    commit_all(tmp_git_repo, "add web project")
    return tmp_git_repo


@pytest.fixture
def make_context():
    """Factory for a ToolContext scoped to one tool, without running the orchestrator."""

    def _make(
        root: Path,
        tool=None,
        *,
        changed: Optional[Iterable[str]] = None,
        config: Optional[StyleAuditConfig] = None,
    ) -> ToolContext:
        cfg = config or StyleAuditConfig()
        corpus = FileCorpus(root)
        if changed is None:
            targets = corpus.full_target_set()
        else:
            changed = list(changed)
            targets = TargetSet.from_files(
                changed, mode="changed", since_ref="HEAD~1", changed_files=changed
            )
        parsers = SourceParsers(root)
        index = None
        if tool is not None and isinstance(tool.scope, EntitiesScope):
            index = build_workspace_index(root, targets, corpus, parsers, cfg.index.aliases)
        ctx = ToolContext(
            root=root,
            config=cfg,
            options=ResolvedCliOptions(
                baseline_path=root / "styleaudit.baseline.json",
                output_path=root / "reports" / "styleaudit.json",
            ),
            targets=targets,
            corpus=corpus,
            parsers=parsers,
            log=quiet_log(),
            artifacts_dir=root / "reports" / "artifacts",
            index=index,
        )
        return scoped_context(ctx, tool) if tool is not None else ctx

    return _make
