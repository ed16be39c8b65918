"""Import and member-access introspection over TS/TSX/JS syntax trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set


@dataclass
class ImportBinding:
    """One ``import ... from "<source>"`` declaration."""

    source: str
    line: int
    default: Optional[str] = None
    namespace: Optional[str] = None
    named: List[str] = field(default_factory=list)  # imported (not local) names
    type_only: bool = False

    @property
    def object_names(self) -> List[str]:
        """Local names bound to the whole module object."""
        return [n for n in (self.default, self.namespace) if n]


@dataclass
class MemberUsage:
    """Property names read off a module object, and whether any key was dynamic."""

    names: Set[str] = field(default_factory=set)
    dynamic: bool = False
    dynamic_lines: List[int] = field(default_factory=list)


def _text(node) -> str:
    return node.text.decode("utf-8", errors="ignore")


def _walk(node) -> Iterator:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _string_value(node) -> Optional[str]:
    """Literal value of a ``string`` or substitution-free ``template_string``."""
    if node.type == "string":
        return "".join(_text(c) for c in node.children if c.type in ("string_fragment", "escape_sequence"))
    if node.type == "template_string":
        if any(c.type == "template_substitution" for c in node.children):
            return None
        return _text(node)[1:-1]
    return None


def extract_imports(tree) -> List[ImportBinding]:
    """Static import declarations at any depth of *tree*."""
    bindings: List[ImportBinding] = []
    for node in _walk(tree.root_node):
        if node.type != "import_statement":
            continue
        source_node = node.child_by_field_name("source")
        if source_node is None:
            continue
        source = _string_value(source_node)
        if not source:
            continue
        binding = ImportBinding(source=source, line=node.start_point[0] + 1)
        binding.type_only = any(c.type == "type" for c in node.children)
        for child in node.children:
            if child.type == "import_clause":
                _read_clause(child, binding)
        bindings.append(binding)
    return bindings


def _read_clause(clause, binding: ImportBinding) -> None:
    for part in clause.children:
        if part.type == "identifier":
            binding.default = _text(part)
        elif part.type == "namespace_import":
            for c in part.children:
                if c.type == "identifier":
                    binding.namespace = _text(c)
        elif part.type == "named_imports":
            for spec in part.children:
                if spec.type != "import_specifier":
                    continue
                name = spec.child_by_field_name("name")
                if name is not None:
                    binding.named.append(_string_value(name) or _text(name))


def _same_node(a, b) -> bool:
    return a is not None and b is not None and a.start_byte == b.start_byte and a.end_byte == b.end_byte


def _pattern_keys(pattern, usage: MemberUsage) -> None:
    for element in pattern.children:
        if element.type == "shorthand_property_identifier_pattern":
            usage.names.add(_text(element))
        elif element.type == "pair_pattern":
            key = element.child_by_field_name("key")
            if key is None:
                continue
            if key.type == "computed_property_name":
                _mark_dynamic(usage, element)
            else:
                usage.names.add(_string_value(key) or _text(key))
        elif element.type == "object_assignment_pattern":
            left = element.child_by_field_name("left")
            if left is not None:
                usage.names.add(_text(left))
        elif element.type == "rest_pattern":
            _mark_dynamic(usage, element)


def _mark_dynamic(usage: MemberUsage, node) -> None:
    usage.dynamic = True
    usage.dynamic_lines.append(node.start_point[0] + 1)


def collect_member_usage(tree, object_names: Set[str]) -> MemberUsage:
    """Names accessed on any identifier in *object_names*.

    Covers ``obj.name``, ``obj["name"]``, ``obj[`name`]`` and
    ``const { a, b: c } = obj``. Computed keys and rest patterns mark the
    usage dynamic. ``obj.fn()`` is a call, not a class read, and is skipped.
    """
    usage = MemberUsage()
    if not object_names:
        return usage

    for node in _walk(tree.root_node):
        if node.type == "member_expression":
            obj = node.child_by_field_name("object")
            if obj is None or obj.type != "identifier" or _text(obj) not in object_names:
                continue
            parent = node.parent
            if parent is not None and parent.type == "call_expression" and _same_node(
                parent.child_by_field_name("function"), node
            ):
                continue
            prop = node.child_by_field_name("property")
            if prop is not None:
                usage.names.add(_text(prop))

        elif node.type == "subscript_expression":
            obj = node.child_by_field_name("object")
            if obj is None or obj.type != "identifier" or _text(obj) not in object_names:
                continue
            index = node.child_by_field_name("index")
            literal = _string_value(index) if index is not None else None
            if literal is not None:
                usage.names.add(literal)
            else:
                _mark_dynamic(usage, node)

        elif node.type == "variable_declarator":
            value = node.child_by_field_name("value")
            name = node.child_by_field_name("name")
            if (
                value is not None
                and value.type == "identifier"
                and _text(value) in object_names
                and name is not None
                and name.type == "object_pattern"
            ):
                _pattern_keys(name, usage)

    return usage
