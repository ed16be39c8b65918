"""Tests for config loading, validation, env var overrides, and option resolution."""

from pathlib import Path

import pytest

from styleaudit.config.loader import ConfigError, load_config
from styleaudit.config.schema import StyleAuditConfig, severity_at_or_above
from styleaudit.engine.options import OptionsError, resolve_options
from styleaudit.tools.registry import build_registry


class TestSeverityComparison:
    def test_at_or_above(self):
        assert severity_at_or_above("error", "warn") is True
        assert severity_at_or_above("warn", "warn") is True
        assert severity_at_or_above("info", "warn") is False

    def test_all_levels(self):
        assert severity_at_or_above("info", "info") is True
        assert severity_at_or_above("warn", "info") is True
        assert severity_at_or_above("error", "info") is True
        assert severity_at_or_above("warn", "error") is False


class TestConfigLoading:
    def test_default_config(self, tmp_path: Path):
        cfg = load_config(tmp_path)
        assert cfg.audit.fail_on == "error"
        assert cfg.audit.since == "HEAD~1"
        assert cfg.index.aliases == {"@/": ""}
        assert cfg.tools == {}

    def test_custom_toml(self, tmp_path: Path):
        (tmp_path / ".styleaudit.toml").write_text(
            'version = "1.0"\n'
            "[audit]\n"
            'fail_on = "warn"\n'
            'exclude = ["**/*.stories.tsx"]\n'
            "unknown_key = 1\n"
            "[index]\n"
            'aliases = { "~/" = "src/" }\n'
            "[tools.css-size]\n"
            "max_total_kb = 300\n"
        )
        cfg = load_config(tmp_path)
        assert cfg.audit.fail_on == "warn"
        assert cfg.audit.exclude == ["**/*.stories.tsx"]
        assert cfg.index.aliases == {"~/": "src/"}
        assert cfg.tools == {"css-size": {"max_total_kb": 300}}

    def test_config_override_path(self, tmp_path: Path):
        (tmp_path / "custom.toml").write_text('[audit]\nfail_on = "info"\n')
        cfg = load_config(tmp_path, config_override="custom.toml")
        assert cfg.audit.fail_on == "info"

    def test_missing_override_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(tmp_path, config_override="/nonexistent/config.toml")

    def test_invalid_toml_raises(self, tmp_path: Path):
        (tmp_path / ".styleaudit.toml").write_text("this is not valid [toml")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_section_must_be_table(self, tmp_path: Path):
        (tmp_path / ".styleaudit.toml").write_text('audit = "nope"\n')
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_list_setting_given_as_string_raises(self, tmp_path: Path):
        (tmp_path / ".styleaudit.toml").write_text('[audit]\ninclude = "components/**"\n')
        with pytest.raises(ConfigError, match="include"):
            load_config(tmp_path)

    def test_wrong_scalar_and_item_types_raise(self, tmp_path: Path):
        (tmp_path / ".styleaudit.toml").write_text("[audit]\nsince = 3\n")
        with pytest.raises(ConfigError, match="since"):
            load_config(tmp_path)
        (tmp_path / ".styleaudit.toml").write_text("[audit]\nexclude = [1, 2]\n")
        with pytest.raises(ConfigError, match="exclude"):
            load_config(tmp_path)
        (tmp_path / ".styleaudit.toml").write_text('[index]\naliases = { "@/" = 1 }\n')
        with pytest.raises(ConfigError, match="aliases"):
            load_config(tmp_path)

    def test_tool_entries_must_be_tables(self, tmp_path: Path):
        (tmp_path / ".styleaudit.toml").write_text('[tools]\ncss-size = 3\n')
        with pytest.raises(ConfigError):
            load_config(tmp_path)


class TestEnvVarOverrides:
    def test_fail_on_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("STYLEAUDIT_FAIL_ON", "info")
        assert load_config(tmp_path).audit.fail_on == "info"

    def test_skip_tools_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("STYLEAUDIT_SKIP_TOOLS", "stylelint, css-size")
        assert load_config(tmp_path).audit.skip_tools == ["stylelint", "css-size"]

    def test_baseline_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("STYLEAUDIT_BASELINE", "ci/baseline.json")
        assert load_config(tmp_path).audit.baseline == "ci/baseline.json"

    def test_invalid_env_ignored(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("STYLEAUDIT_FAIL_ON", "not_a_severity")
        assert load_config(tmp_path).audit.fail_on == "error"  # default unchanged


class TestResolveOptions:
    def test_cli_over_config(self, tmp_path: Path):
        cfg = StyleAuditConfig()
        cfg.audit.exclude = ["legacy/**"]
        cfg.audit.skip_tools = ["stylelint"]
        options = resolve_options(
            tmp_path,
            cfg,
            exclude=["a/**,b/**"],
            skip_tools=["css-size"],
            fail_on="warn",
            output="out.json",
        )
        assert options.exclude == ["legacy/**", "a/**", "b/**"]
        assert options.skip_tools == ["stylelint", "css-size"]
        assert options.fail_on == "warn"
        assert options.output_path == tmp_path / "out.json"
        assert options.baseline_path == tmp_path / "styleaudit.baseline.json"

    def test_invalid_values_fall_back_with_warning(self, tmp_path: Path):
        warnings = []
        options = resolve_options(
            tmp_path, StyleAuditConfig(), fail_on="fatal", format="xml", warn=warnings.append
        )
        assert options.fail_on == "error"
        assert options.format == "pretty"
        assert len(warnings) == 2

    def test_strict_lowers_threshold(self, tmp_path: Path):
        assert resolve_options(tmp_path, StyleAuditConfig(), strict=True).fail_on == "warn"
        assert resolve_options(tmp_path, StyleAuditConfig(), strict=True, fail_on="info").fail_on == "info"

    def test_update_baseline_in_changed_mode_needs_force(self, tmp_path: Path):
        with pytest.raises(OptionsError):
            resolve_options(tmp_path, StyleAuditConfig(), changed=True, update_baseline=True)
        options = resolve_options(tmp_path, StyleAuditConfig(), changed=True, update_baseline=True, force=True)
        assert options.update_baseline


class TestToolConfigs:
    def test_typed_settings(self):
        cfg = StyleAuditConfig(tools={"css-size": {"max_total_kb": 300}})
        warnings = []
        configs = build_registry().build_tool_configs(cfg, warnings.append)
        assert configs["css-size"].max_total_kb == 300
        assert warnings == []

    def test_unknown_tool_and_key_warn(self):
        cfg = StyleAuditConfig(tools={"nope": {}, "css-size": {"max_kb": 1}})
        warnings = []
        build_registry().build_tool_configs(cfg, warnings.append)
        assert any("nope" in w for w in warnings)
        assert any("max_kb" in w for w in warnings)

    def test_wrong_type_uses_default(self):
        cfg = StyleAuditConfig(tools={"css-best-practices": {"allow_global_in": "styles/"}})
        warnings = []
        configs = build_registry().build_tool_configs(cfg, warnings.append)
        assert configs["css-best-practices"].allow_global_in == []
        assert warnings


class TestRegistry:
    def test_registration_order(self):
        assert build_registry().ids() == [
            "stylelint",
            "css-duplicate-styles",
            "css-paths",
            "css-unused-tokens",
            "css-size",
            "css-validate-styles",
            "css-unused-classes",
            "css-overlapping-rules",
            "css-best-practices",
            "css-purge-styles",
        ]

    def test_default_selection_excludes_fix_tools(self):
        selected = build_registry().select([], ["stylelint"], lambda _m: None)
        ids = [t.id for t in selected]
        assert "stylelint" not in ids
        assert "css-purge-styles" not in ids
        assert len(ids) == 8
