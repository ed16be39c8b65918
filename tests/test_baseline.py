"""Tests for baseline reading, filtering, refresh, and persistence."""

import json
from pathlib import Path

import pytest

from styleaudit.baseline.manager import (
    PersistenceError,
    filter_against_baseline,
    read_baseline,
    serialize_baseline,
    update_baseline,
    write_baseline,
)
from styleaudit.baseline.models import BASELINE_VERSION, Baseline, BaselineEntry
from styleaudit.findings.models import Finding

T1 = "2024-01-01T00:00:00.000Z"
T2 = "2024-06-01T00:00:00.000Z"


def _finding(fp: str, tool: str = "css-paths", severity: str = "warn") -> Finding:
    return Finding(tool=tool, rule_id="css/rule", severity=severity, message="m", fingerprint=fp, file="a.css")


def _entry(fp: str, tool: str = "css-paths") -> BaselineEntry:
    return BaselineEntry(fingerprint=fp, tool=tool, rule_id="css/rule", severity="warn", added_at=T1)


class _InfoAccepting:
    def baseline_include(self, finding, ctx):
        return True


class TestFilter:
    def test_split(self):
        baseline = Baseline(entries=[_entry("A")])
        suppressed, new = filter_against_baseline([_finding("A"), _finding("B")], baseline)
        assert [f.fingerprint for f in suppressed] == ["A"]
        assert [f.fingerprint for f in new] == ["B"]


class TestUpdate:
    def test_drops_fixed_and_adds_new(self):
        baseline = Baseline(generated_at=T1, entries=[_entry("A"), _entry("B")])
        refreshed = update_baseline(baseline, [_finding("A"), _finding("C")], ["css-paths"], now=T2)
        assert [e.fingerprint for e in refreshed.entries] == ["A", "C"]
        assert refreshed.entries[0].added_at == T1
        assert refreshed.entries[1].added_at == T2
        assert refreshed.generated_at == T2

    def test_keeps_entries_of_tools_that_did_not_run(self):
        baseline = Baseline(entries=[_entry("A"), _entry("S", tool="stylelint")])
        refreshed = update_baseline(baseline, [], ["css-paths"], now=T2)
        assert [e.fingerprint for e in refreshed.entries] == ["S"]

    def test_info_findings_excluded_by_default(self):
        refreshed = update_baseline(Baseline(), [_finding("I", severity="info")], ["css-paths"], now=T2)
        assert refreshed.entries == []

    def test_tool_policy(self):
        refreshed = update_baseline(
            Baseline(),
            [_finding("I", severity="info")],
            ["css-paths"],
            tools={"css-paths": _InfoAccepting()},
            now=T2,
        )
        assert [e.fingerprint for e in refreshed.entries] == ["I"]

    def test_idempotent(self):
        findings = [_finding("B"), _finding("A"), _finding("C", tool="stylelint")]
        first = update_baseline(Baseline(), findings, ["css-paths", "stylelint"], now=T1)
        second = update_baseline(first, findings, ["css-paths", "stylelint"], now=T2)
        assert second.generated_at == T1
        assert serialize_baseline(second) == serialize_baseline(first)

    def test_sorted_by_tool_rule_fingerprint(self):
        findings = [_finding("Z", tool="a-tool"), _finding("B", tool="z-tool"), _finding("A", tool="z-tool")]
        refreshed = update_baseline(Baseline(), findings, ["a-tool", "z-tool"], now=T1)
        assert [(e.tool, e.fingerprint) for e in refreshed.entries] == [
            ("a-tool", "Z"),
            ("z-tool", "A"),
            ("z-tool", "B"),
        ]


class TestRead:
    def test_missing_file(self, tmp_path: Path):
        assert read_baseline(tmp_path / "none.json").entries == []

    def test_malformed_file_warns(self, tmp_path: Path):
        path = tmp_path / "b.json"
        path.write_text("{not json")
        warnings = []
        assert read_baseline(path, warn=warnings.append).entries == []
        assert warnings

    def test_current_format(self, tmp_path: Path):
        path = tmp_path / "b.json"
        path.write_text(json.dumps({
            "version": "2.0",
            "generatedAt": T1,
            "entries": [{"fingerprint": "A", "tool": "t", "ruleId": "r", "severity": "warn", "note": "known"}],
        }))
        baseline = read_baseline(path)
        assert baseline.generated_at == T1
        assert baseline.entries[0].note == "known"

    def test_legacy_format_migrated(self, tmp_path: Path):
        path = tmp_path / "b.json"
        path.write_text(json.dumps({
            "timestamp": T1,
            "findings": {
                "css-paths:css/rule:abc123": {"tool": "css-paths", "ruleId": "css/rule", "severity": "warn", "lastSeen": T1},
                "stylelint:x:def": {"fingerprint": "explicit", "tool": "stylelint", "ruleId": "x"},
            },
        }))
        baseline = read_baseline(path)
        assert baseline.version == BASELINE_VERSION
        assert sorted(baseline.fingerprints()) == ["abc123", "explicit"]
        migrated = {e.fingerprint: e for e in baseline.entries}
        assert migrated["abc123"].added_at == T1


class TestWrite:
    def test_round_trip_and_trailing_newline(self, tmp_path: Path):
        path = tmp_path / "nested" / "baseline.json"
        baseline = update_baseline(Baseline(), [_finding("B"), _finding("A")], ["css-paths"], now=T1)
        write_baseline(path, baseline)
        text = path.read_text()
        assert text.endswith("}\n")
        assert [e["fingerprint"] for e in json.loads(text)["entries"]] == ["A", "B"]
        assert read_baseline(path).fingerprints() == {"A", "B"}

    def test_unwritable_raises(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(PersistenceError):
            write_baseline(blocker / "baseline.json", Baseline())
