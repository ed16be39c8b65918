"""Tool registry — built-in analyzers, selection, and typed per-tool config."""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Dict, List, Optional

from styleaudit.config.schema import StyleAuditConfig
from styleaudit.tools.models import AuditTool


class ToolRegistry:
    """Central store for analyzers, in registration (execution) order."""

    def __init__(self) -> None:
        self._tools: Dict[str, AuditTool] = {}

    # ---- registration ----

    def register(self, tool: AuditTool) -> None:
        if not tool.id:
            raise ValueError(f"{type(tool).__name__} has no id")
        self._tools[tool.id] = tool

    def register_many(self, tools: list[AuditTool]) -> None:
        for t in tools:
            self.register(t)

    # ---- queries ----

    @property
    def all_tools(self) -> List[AuditTool]:
        return list(self._tools.values())

    def get(self, tool_id: str) -> Optional[AuditTool]:
        return self._tools.get(tool_id)

    def ids(self) -> List[str]:
        return list(self._tools)

    # ---- selection ----

    def select(
        self,
        only: List[str],
        skip: List[str],
        warn: Callable[[str], None],
    ) -> List[AuditTool]:
        """Tools to run, in registration order.

        With *only*, exactly those tools run, ``fix`` tools included; without
        it, every default-enabled ``audit`` tool runs. *skip* always wins.
        """
        for tool_id in [*only, *skip]:
            if tool_id not in self._tools:
                warn(f"Unknown tool id {tool_id!r} (known: {', '.join(self._tools)})")

        selected: List[AuditTool] = []
        for tool in self._tools.values():
            if tool.id in skip:
                continue
            if only:
                if tool.id in only:
                    selected.append(tool)
            elif tool.default_enabled and tool.category == "audit":
                selected.append(tool)
        return selected

    # ---- config ----

    def build_tool_configs(
        self,
        config: StyleAuditConfig,
        warn: Callable[[str], None],
    ) -> Dict[str, Any]:
        """Turn ``[tools.<id>]`` tables into each tool's config dataclass.

        Unknown tool ids and unknown keys are reported, not fatal. A table
        the dataclass rejects falls back to that tool's defaults.
        """
        for tool_id in config.tools:
            if tool_id not in self._tools:
                warn(f"Config has settings for unknown tool {tool_id!r}")

        configs: Dict[str, Any] = {}
        for tool in self._tools.values():
            raw = config.tools.get(tool.id, {})
            cls = tool.config_class
            valid_fields = {f.name for f in dataclasses.fields(cls)}
            unknown = sorted(set(raw) - valid_fields)
            if unknown:
                warn(f"Unknown setting(s) for {tool.id}: {', '.join(unknown)}")
            values: Dict[str, Any] = {}
            for f in dataclasses.fields(cls):
                if f.name not in raw:
                    continue
                if _type_matches(f, raw[f.name]):
                    values[f.name] = raw[f.name]
                else:
                    warn(f"Ignoring {tool.id}.{f.name}: unexpected value {raw[f.name]!r}")
            try:
                configs[tool.id] = cls(**values)
            except (TypeError, ValueError) as exc:
                warn(f"Invalid settings for {tool.id} ({exc}); using defaults")
                configs[tool.id] = cls()
        return configs


def _type_matches(f: dataclasses.Field, value: Any) -> bool:
    """Compare *value* against the type of the field's default."""
    if f.default is not dataclasses.MISSING:
        default = f.default
    elif f.default_factory is not dataclasses.MISSING:  # type: ignore[misc]
        default = f.default_factory()  # type: ignore[misc]
    else:
        return True
    if default is None:
        return True
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, float):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if isinstance(default, int):
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, type(default))


def build_registry() -> ToolRegistry:
    """Create a registry holding every built-in tool."""
    from styleaudit.tools.builtin import ALL_BUILTIN_TOOLS

    registry = ToolRegistry()
    registry.register_many([tool_cls() for tool_cls in ALL_BUILTIN_TOOLS])
    return registry
