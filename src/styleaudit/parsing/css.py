"""Stylesheet model built from the tree-sitter CSS grammar."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

# at-rules whose block holds ordinary rule sets
_CONTAINER_STATEMENTS = {"media_statement", "supports_statement", "at_rule"}
_SKIPPED_STATEMENTS = {"keyframes_statement"}

_COMPOSES_FROM = re.compile(r"^(?P<names>.+?)\s+from\s+(?P<source>['\"][^'\"]+['\"]|global)\s*$")


@dataclass
class CssClass:
    name: str
    line: int
    col: int


@dataclass
class CssRule:
    """One rule set with its declarations in source order (last value wins)."""

    selector: str
    declarations: Dict[str, str]
    line: int
    col: int
    context: str = ""  # enclosing at-rule preludes, e.g. "@media (min-width: 40rem)"
    local_classes: List[str] = field(default_factory=list)


@dataclass
class CssDeclaration:
    property: str
    value: str
    line: int
    col: int


@dataclass
class Composition:
    """``composes:`` inside a rule: *owners* gain *names* (from *source*)."""

    owners: List[str]
    names: List[str]
    source: Optional[str] = None  # import specifier, or None for same-file
    line: int = 0


@dataclass
class Stylesheet:
    path: str
    rules: List[CssRule] = field(default_factory=list)
    classes: Dict[str, CssClass] = field(default_factory=dict)  # local classes, first occurrence
    global_classes: Set[str] = field(default_factory=set)
    global_usages: List[Tuple[int, int]] = field(default_factory=list)  # :global( positions
    compositions: List[Composition] = field(default_factory=list)
    declarations: List[CssDeclaration] = field(default_factory=list)  # every rule set, source order
    errors: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


def _text(node) -> str:
    return node.text.decode("utf-8", errors="ignore")


def _squash(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def normalize_selector(selector: str) -> str:
    """Whitespace-insensitive selector form used for grouping."""
    text = _squash(selector)
    text = re.sub(r"\s*([>+~,])\s*", r" \1 ", text)
    return re.sub(r" , ", ", ", text).strip()


def _declaration(node) -> Optional[Tuple[str, str]]:
    prop = None
    for child in node.children:
        if child.type == "property_name":
            prop = _text(child).strip()
            break
    if not prop:
        return None
    raw = _text(node)
    _, _, value = raw.partition(":")
    value = value.strip()
    if value.endswith(";"):
        value = value[:-1]
    return prop, _squash(value)


def _first_error(node) -> Optional[str]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            row, col = current.start_point[0] + 1, current.start_point[1] + 1
            what = "missing token" if current.is_missing else "unexpected input"
            return f"{what} at {row}:{col}"
        stack.extend(reversed(current.children))
    return None


class _SelectorScan:
    """Class names of a selector list, split into local and :global ones."""

    def __init__(self) -> None:
        self.local: List[Tuple[str, int, int]] = []
        self.global_: List[str] = []
        self.global_positions: List[Tuple[int, int]] = []

    def scan(self, selectors_node) -> None:
        for item in selectors_node.children:
            if item.type in (",", "comment"):
                continue
            self._walk(item, in_global=False, state={"bare_global": False})

    def _walk(self, node, in_global: bool, state: dict) -> None:
        if node.type == "pseudo_class_selector":
            name = None
            args = None
            for child in node.children:
                if child.type == "class_name":
                    name = _text(child)
                elif child.type == "arguments":
                    args = child
                elif child.type not in (":",):
                    # the selector the pseudo-class is attached to
                    self._walk(child, in_global, state)
            if name in ("global", "local"):
                if args is not None:
                    if name == "global":
                        self.global_positions.append(
                            (node.start_point[0] + 1, node.start_point[1] + 1)
                        )
                    self._walk(args, name == "global", state)
                else:
                    state["bare_global"] = name == "global"
            elif args is not None:
                self._walk(args, in_global, state)
            return

        if node.type == "class_selector":
            for child in node.children:
                if child.type == "class_name":
                    name = _text(child)
                    if in_global or state["bare_global"]:
                        self.global_.append(name)
                    else:
                        self.local.append((name, node.start_point[0] + 1, node.start_point[1] + 1))
                elif child.type not in (".",):
                    self._walk(child, in_global, state)
            return

        for child in node.children:
            self._walk(child, in_global, state)


def _parse_composes(value: str, owners: List[str], line: int) -> Optional[Composition]:
    match = _COMPOSES_FROM.match(value)
    if match:
        source = match.group("source")
        if source == "global":
            return None
        names = match.group("names").split()
        return Composition(owners=owners, names=names, source=source.strip("'\""), line=line)
    names = value.split()
    if not names:
        return None
    return Composition(owners=owners, names=names, line=line)


class _Builder:
    def __init__(self, sheet: Stylesheet) -> None:
        self.sheet = sheet

    def visit_container(self, node, context: List[str]) -> None:
        for child in node.children:
            if child.type == "rule_set":
                self.visit_rule_set(child, context)
            elif child.type in _SKIPPED_STATEMENTS:
                continue
            elif child.type in _CONTAINER_STATEMENTS:
                prelude = self._prelude(child)
                for sub in child.children:
                    if sub.type == "block":
                        self.visit_container(sub, context + [prelude])

    def _prelude(self, node) -> str:
        parts = []
        for child in node.children:
            if child.type == "block":
                break
            parts.append(_text(child))
        return _squash(" ".join(parts))

    def visit_rule_set(self, node, context: List[str]) -> None:
        selectors_node = None
        block = None
        for child in node.children:
            if child.type == "selectors":
                selectors_node = child
            elif child.type == "block":
                block = child
        if selectors_node is None or block is None:
            return

        scan = _SelectorScan()
        scan.scan(selectors_node)
        for name, line, col in scan.local:
            self.sheet.classes.setdefault(name, CssClass(name, line, col))
        self.sheet.global_classes.update(scan.global_)
        self.sheet.global_usages.extend(scan.global_positions)
        owners = list(dict.fromkeys(name for name, _, _ in scan.local))

        declarations: Dict[str, str] = {}
        for child in block.children:
            if child.type == "declaration":
                pair = _declaration(child)
                if pair is None:
                    continue
                prop, value = pair
                self.sheet.declarations.append(
                    CssDeclaration(prop, value, child.start_point[0] + 1, child.start_point[1] + 1)
                )
                if prop == "composes":
                    comp = _parse_composes(value, owners, child.start_point[0] + 1)
                    if comp is not None:
                        self.sheet.compositions.append(comp)
                declarations[prop] = value
            elif child.type == "rule_set":
                self.visit_rule_set(child, context)
            elif child.type in _CONTAINER_STATEMENTS:
                prelude = self._prelude(child)
                for sub in child.children:
                    if sub.type == "block":
                        self.visit_container(sub, context + [prelude])

        self.sheet.rules.append(
            CssRule(
                selector=normalize_selector(_text(selectors_node)),
                declarations=declarations,
                line=node.start_point[0] + 1,
                col=node.start_point[1] + 1,
                context=" ".join(context),
                local_classes=owners,
            )
        )


def parse_stylesheet(parser, path: str, source: bytes) -> Stylesheet:
    """Parse *source* with a tree-sitter CSS *parser* into a Stylesheet."""
    tree = parser.parse(source)
    sheet = Stylesheet(path=path)
    root = tree.root_node
    if root.has_error:
        sheet.errors.append(_first_error(root) or "syntax error")
    _Builder(sheet).visit_container(root, [])
    sheet.rules.sort(key=lambda r: (r.line, r.col))
    sheet.declarations.sort(key=lambda d: (d.line, d.col))
    return sheet
