"""Configuration loading, schema, and defaults."""

from styleaudit.config.loader import ConfigError, load_config
from styleaudit.config.schema import (
    SEVERITY_ORDER,
    Severity,
    StyleAuditConfig,
    severity_at_or_above,
)

__all__ = [
    "ConfigError",
    "SEVERITY_ORDER",
    "Severity",
    "StyleAuditConfig",
    "load_config",
    "severity_at_or_above",
]
