"""End-to-end tests for the audit orchestrator."""

import json
from pathlib import Path

from styleaudit.baseline.manager import read_baseline, write_baseline
from styleaudit.baseline.models import Baseline, BaselineEntry
from styleaudit.config.schema import StyleAuditConfig
from styleaudit.engine.options import resolve_options
from styleaudit.engine import orchestrator
from styleaudit.engine.orchestrator import compute_exit_code, run_audit
from styleaudit.findings.models import Finding
from styleaudit.tools.builtin.css_paths import CssPathsTool
from styleaudit.tools.models import AuditTool, FilesScope
from styleaudit.tools.registry import ToolRegistry

from conftest import commit_all, quiet_log, write_tree

NOW = "2024-01-01T00:00:00.000Z"


class BoomTool(AuditTool):
    id = "boom"
    title = "Boom"
    scope = FilesScope(("css",))

    def run(self, ctx, config):
        raise RuntimeError("exploded")


def _audit(repo: Path, registry=None, config=None, **flags):
    cfg = config or StyleAuditConfig()
    log = quiet_log()
    options = resolve_options(repo, cfg, warn=log.warn, **flags)
    return run_audit(repo, cfg, options, log, registry=registry, now=NOW), log


def _finding(severity: str) -> Finding:
    return Finding(tool="t", rule_id="r", severity=severity, message="m", fingerprint=severity)


class TestExitCode:
    def test_threshold(self):
        assert compute_exit_code([_finding("warn")], "error") == 0
        assert compute_exit_code([_finding("warn"), _finding("error")], "error") == 1
        assert compute_exit_code([_finding("info")], "warn") == 0
        assert compute_exit_code([], "info") == 0

    def test_warn_only_run_exits_zero(self, web_repo: Path):
        write_tree(web_repo, {"lib/B.module.css": ".b { margin: 0; }\n"})
        run, _ = _audit(web_repo, tools=["css-paths"])
        assert [f.rule_id for f in run.new] == ["css/module-location"]
        assert run.exit_code == 0

    def test_strict_fails_on_warn(self, web_repo: Path):
        write_tree(web_repo, {"lib/B.module.css": ".b { margin: 0; }\n"})
        run, _ = _audit(web_repo, tools=["css-paths"], strict=True)
        assert run.exit_code == 1

    def test_error_finding_exits_one(self, web_repo: Path):
        write_tree(web_repo, {"styles/legacy/old.css": "body { margin: 0; }\n"})
        run, _ = _audit(web_repo, tools=["css-best-practices"])
        assert run.exit_code == 1

    def test_baselined_errors_never_fail(self, web_repo: Path):
        write_tree(web_repo, {"styles/legacy/old.css": "body { margin: 0; }\n"})
        first, _ = _audit(web_repo, tools=["css-best-practices"], update_baseline=True)
        assert first.baseline_updated
        assert (web_repo / "styleaudit.baseline.json").is_file()

        second, _ = _audit(web_repo, tools=["css-best-practices"])
        assert second.exit_code == 0
        assert second.new == []
        assert [f.rule_id for f in second.suppressed] == ["css/forbidden-legacy"]

        unsuppressed, _ = _audit(web_repo, tools=["css-best-practices"], no_baseline=True)
        assert unsuppressed.exit_code == 1


class TestToolFailures:
    def test_failed_tool_is_recorded_and_others_run(self, web_repo: Path):
        write_tree(web_repo, {"lib/B.module.css": ".b { margin: 0; }\n"})
        registry = ToolRegistry()
        registry.register_many([BoomTool(), CssPathsTool()])
        run, log = _audit(web_repo, registry=registry)
        metadata = run.report["metadata"]
        assert metadata["toolsFailed"] == ["boom"]
        assert metadata["toolsRun"] == ["css-paths"]
        assert "exploded" in metadata["toolStats"]["boom"]["error"]
        assert [f.rule_id for f in run.new] == ["css/module-location"]

    def test_failed_tool_entries_survive_refresh(self, web_repo: Path):
        baseline_path = web_repo / "styleaudit.baseline.json"
        write_baseline(
            baseline_path,
            Baseline(entries=[BaselineEntry(fingerprint="f" * 32, tool="boom", rule_id="x", severity="warn")]),
        )
        registry = ToolRegistry()
        registry.register_many([BoomTool(), CssPathsTool()])
        _audit(web_repo, registry=registry, update_baseline=True)
        assert "f" * 32 in read_baseline(baseline_path).fingerprints()

    def test_index_failure_fails_entity_tools_and_keeps_their_entries(self, web_repo: Path, monkeypatch):
        baseline_path = web_repo / "styleaudit.baseline.json"
        entry = BaselineEntry(fingerprint="c" * 32, tool="css-unused-classes", rule_id="css/unused-class", severity="warn")
        write_baseline(baseline_path, Baseline(entries=[entry]))

        def broken_index(*args, **kwargs):
            raise RuntimeError("grammar download failed")

        monkeypatch.setattr(orchestrator, "build_workspace_index", broken_index)
        run, log = _audit(web_repo, tools=["css-unused-classes", "css-paths"], update_baseline=True)

        metadata = run.report["metadata"]
        assert metadata["toolsRun"] == ["css-paths"]
        assert metadata["toolsFailed"] == ["css-unused-classes"]
        assert metadata["toolStats"]["css-unused-classes"]["error"] == orchestrator.INDEX_UNAVAILABLE
        assert any("grammar download failed" in w for w in log.warnings)
        assert "c" * 32 in read_baseline(baseline_path).fingerprints()


class TestSelection:
    def test_skipped_tool_entries_survive_refresh(self, web_repo: Path):
        write_tree(web_repo, {"lib/B.module.css": ".b { margin: 0; }\n"})
        _audit(web_repo, tools=["css-paths"], update_baseline=True)
        baseline_path = web_repo / "styleaudit.baseline.json"
        before = read_baseline(baseline_path).fingerprints()
        assert len(before) == 1

        _audit(
            web_repo,
            tools=["css-paths", "css-best-practices"],
            skip_tools=["css-paths"],
            update_baseline=True,
        )
        assert before <= read_baseline(baseline_path).fingerprints()

    def test_fix_tools_need_explicit_selection(self, web_repo: Path):
        run, _ = _audit(web_repo, skip_tools=["stylelint"])
        assert "css-purge-styles" not in run.report["metadata"]["toolsRun"]
        assert "css-unused-classes" in run.report["metadata"]["toolsRun"]

        explicit, _ = _audit(web_repo, tools=["css-purge-styles"])
        assert explicit.report["metadata"]["toolsRun"] == ["css-purge-styles"]
        assert (web_repo / "components/Card/Card.module.css").exists()

    def test_unknown_tool_warns(self, web_repo: Path):
        run, log = _audit(web_repo, tools=["css-paths", "nope"])
        assert any("nope" in w for w in log.warnings)
        assert run.report["metadata"]["toolsRun"] == ["css-paths"]


class TestModes:
    def test_changed_mode_limits_entities(self, web_repo: Path):
        write_tree(web_repo, {"components/Card/Card.module.css": ".card { display: block; }\n.extra { margin: 0; }\n"})
        commit_all(web_repo)
        run, _ = _audit(web_repo, tools=["css-unused-classes"], changed=True)
        metadata = run.report["metadata"]
        assert metadata["mode"] == "changed"
        assert metadata["sinceRef"] == "HEAD~1"
        assert metadata["changedFilesCount"] == 1
        assert {f.file for f in run.findings} == {"components/Card/Card.module.css"}

    def test_detection_failure_falls_back_to_full(self, tmp_git_repo: Path):
        write_tree(tmp_git_repo, {"lib/B.module.css": ".b { margin: 0; }\n"})
        run, log = _audit(tmp_git_repo, tools=["css-paths"], changed=True, since="does-not-exist")
        metadata = run.report["metadata"]
        assert metadata["mode"] == "full"
        assert metadata["degraded"] is True
        assert any("full audit" in w for w in metadata["warnings"])
        assert [f.file for f in run.new] == ["lib/B.module.css"]


class TestOutputs:
    def test_report_written(self, web_repo: Path):
        run, _ = _audit(web_repo, tools=["css-unused-classes"], html=True)
        report_path = web_repo / "reports" / "styleaudit.json"
        data = json.loads(report_path.read_text())
        assert data["generatedAt"] == NOW
        assert data["summary"]["new"] == len(run.new)
        assert (web_repo / "reports" / "styleaudit.html").is_file()

    def test_custom_output_path(self, web_repo: Path):
        _audit(web_repo, tools=["css-paths"], output="out/audit.json")
        assert (web_repo / "out" / "audit.json").is_file()
