"""Tests for the CLI commands."""

import json
from pathlib import Path

from typer.testing import CliRunner

from conftest import write_tree
from styleaudit import __version__
from styleaudit.cli import app

runner = CliRunner()


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"styleaudit {__version__}" in result.output


class TestInit:
    def test_creates_config(self, tmp_git_repo: Path, monkeypatch):
        monkeypatch.chdir(tmp_git_repo)
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert "[audit]" in (tmp_git_repo / ".styleaudit.toml").read_text()

    def test_refuses_overwrite(self, tmp_git_repo: Path, monkeypatch):
        monkeypatch.chdir(tmp_git_repo)
        (tmp_git_repo / ".styleaudit.toml").write_text("existing")
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 1
        assert (tmp_git_repo / ".styleaudit.toml").read_text() == "existing"

    def test_force_overwrites(self, tmp_git_repo: Path, monkeypatch):
        monkeypatch.chdir(tmp_git_repo)
        (tmp_git_repo / ".styleaudit.toml").write_text("existing")
        result = runner.invoke(app, ["init", "--force"])
        assert result.exit_code == 0
        assert "[audit]" in (tmp_git_repo / ".styleaudit.toml").read_text()


class TestToolsCommand:
    def test_lists_tools(self, monkeypatch):
        monkeypatch.setenv("COLUMNS", "200")
        result = runner.invoke(app, ["tools"])
        assert result.exit_code == 0
        assert "stylelint" in result.output
        assert "css-size" in result.output
        assert "css-purge-styles" in result.output


class TestRun:
    def test_clean_run_writes_report(self, web_repo: Path, monkeypatch):
        monkeypatch.chdir(web_repo)
        result = runner.invoke(app, ["run", "--tools", "css-paths", "--ci"])
        assert result.exit_code == 0
        report = json.loads((web_repo / "reports" / "styleaudit.json").read_text())
        assert report["metadata"]["toolsRun"] == ["css-paths"]
        assert report["findings"] == []

    def test_error_finding_exits_one(self, web_repo: Path, monkeypatch):
        monkeypatch.chdir(web_repo)
        write_tree(web_repo, {"styles/legacy/old.css": "body { margin: 0; }\n"})
        result = runner.invoke(app, ["run", "--tools", "css-best-practices", "--ci"])
        assert result.exit_code == 1
        report = json.loads((web_repo / "reports" / "styleaudit.json").read_text())
        assert [f["ruleId"] for f in report["findings"]] == ["css/forbidden-legacy"]

    def test_json_flag_prints_report(self, web_repo: Path, monkeypatch):
        monkeypatch.chdir(web_repo)
        result = runner.invoke(app, ["run", "--tools", "css-paths", "--json", "--ci"])
        assert result.exit_code == 0
        assert '"toolsRun"' in result.output

    def test_junit_flag_prints_xml(self, web_repo: Path, monkeypatch):
        monkeypatch.chdir(web_repo)
        result = runner.invoke(app, ["run", "--tools", "css-paths", "--junit", "--ci"])
        assert result.exit_code == 0
        assert "<testsuite" in result.output

    def test_pretty_output(self, web_repo: Path, monkeypatch):
        monkeypatch.chdir(web_repo)
        monkeypatch.delenv("CI", raising=False)
        result = runner.invoke(app, ["run", "--tools", "css-paths"])
        assert result.exit_code == 0
        assert "No new style issues" in result.output

    def test_update_baseline_with_changed_refused(self, web_repo: Path, monkeypatch):
        monkeypatch.chdir(web_repo)
        result = runner.invoke(app, ["run", "--changed", "--update-baseline", "--ci"])
        assert result.exit_code == 2
        assert not (web_repo / "styleaudit.baseline.json").exists()

    def test_update_baseline_then_clean(self, web_repo: Path, monkeypatch):
        monkeypatch.chdir(web_repo)
        write_tree(web_repo, {"styles/legacy/old.css": "body { margin: 0; }\n"})
        first = runner.invoke(
            app, ["run", "--tools", "css-best-practices", "--update-baseline", "--ci"]
        )
        assert first.exit_code == 1
        assert (web_repo / "styleaudit.baseline.json").is_file()

        second = runner.invoke(app, ["run", "--tools", "css-best-practices", "--ci"])
        assert second.exit_code == 0

    def test_bad_config_falls_back_to_defaults(self, web_repo: Path, monkeypatch):
        monkeypatch.chdir(web_repo)
        (web_repo / ".styleaudit.toml").write_text("not [valid toml")
        result = runner.invoke(app, ["run", "--tools", "css-paths", "--ci"])
        assert result.exit_code == 0
        assert (web_repo / "reports" / "styleaudit.json").is_file()
