"""Load and merge configuration from .styleaudit.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from styleaudit.config.schema import (
    SEVERITY_ORDER,
    AuditConfig,
    IndexConfig,
    StyleAuditConfig,
)

CONFIG_FILENAME = ".styleaudit.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_absolute():
            p = repo_root / p
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = repo_root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _merge_env_overrides(cfg: StyleAuditConfig) -> None:
    """Apply STYLEAUDIT_* environment variable overrides."""
    if val := os.environ.get("STYLEAUDIT_FAIL_ON"):
        if val in SEVERITY_ORDER:
            cfg.audit.fail_on = val  # type: ignore[assignment]
    if val := os.environ.get("STYLEAUDIT_SKIP_TOOLS"):
        cfg.audit.skip_tools.extend(t.strip() for t in val.split(",") if t.strip())
    if val := os.environ.get("STYLEAUDIT_BASELINE"):
        cfg.audit.baseline = val


def _default_type(f: dataclasses.Field) -> Optional[type]:
    if f.default is not dataclasses.MISSING:
        return type(f.default)
    if f.default_factory is not dataclasses.MISSING:  # type: ignore[misc]
        return type(f.default_factory())  # type: ignore[misc]
    return None


def _is_instance(value: Any, expected: type) -> bool:
    """Type check against a field default; list items and table values must be strings."""
    if not isinstance(value, expected):
        return False
    if isinstance(value, list):
        return all(isinstance(v, str) for v in value)
    if isinstance(value, dict):
        return all(isinstance(v, str) for v in value.values())
    return True


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    fields = {f.name: f for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw.items() if k in fields}
    for key, value in filtered.items():
        expected = _default_type(fields[key])
        if expected is not None and not _is_instance(value, expected):
            raise ConfigError(
                f"Invalid [{section}] {key}: expected {expected.__name__}, got {type(value).__name__} {value!r}"
            )
    try:
        return cls(**filtered)
    except TypeError as exc:
        raise ConfigError(f"Invalid [{section}] section: {exc}") from exc


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> StyleAuditConfig:
    """Load, validate, and return a StyleAuditConfig."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = StyleAuditConfig()
    else:
        raw = _parse_toml(config_path)
        tools = raw.get("tools", {})
        if not isinstance(tools, dict) or not all(isinstance(v, dict) for v in tools.values()):
            raise ConfigError("[tools] entries must be tables, e.g. [tools.css-size]")
        cfg = StyleAuditConfig(
            version=str(raw.get("version", "1.0")),
            audit=_build_section(raw, AuditConfig, "audit"),
            index=_build_section(raw, IndexConfig, "index"),
            tools={k: dict(v) for k, v in tools.items()},
        )

    _merge_env_overrides(cfg)
    return cfg
