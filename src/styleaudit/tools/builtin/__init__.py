"""Built-in tools — registration order is execution order."""

from styleaudit.tools.builtin.best_practices import BestPracticesTool
from styleaudit.tools.builtin.css_paths import CssPathsTool
from styleaudit.tools.builtin.duplicate_styles import DuplicateStylesTool
from styleaudit.tools.builtin.overlapping_rules import OverlappingRulesTool
from styleaudit.tools.builtin.purge_styles import PurgeStylesTool
from styleaudit.tools.builtin.size import CssSizeTool
from styleaudit.tools.builtin.stylelint import StylelintTool
from styleaudit.tools.builtin.unused_classes import UnusedClassesTool
from styleaudit.tools.builtin.unused_tokens import UnusedTokensTool
from styleaudit.tools.builtin.validate_styles import ValidateStylesTool
from styleaudit.tools.models import AuditTool

ALL_BUILTIN_TOOLS: list[type[AuditTool]] = [
    StylelintTool,
    DuplicateStylesTool,
    CssPathsTool,
    UnusedTokensTool,
    CssSizeTool,
    ValidateStylesTool,
    UnusedClassesTool,
    OverlappingRulesTool,
    BestPracticesTool,
    PurgeStylesTool,
]

__all__ = ["ALL_BUILTIN_TOOLS"]
