"""
Composer Kernel: TSX Front End

The transform stage. Uses tree-sitter (TSX grammar) to turn preprocessed
component source into a syntax tree the interpreter walks. Malformed source
and constructs the interpreter does not evaluate are rejected here, as
TransformFailure, before any author code runs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

import tree_sitter_typescript as _ts_mod
from tree_sitter import Language, Node, Parser, Tree

from composer.kernel.errors import TransformFailure

logger = logging.getLogger(__name__)

_LANG = Language(_ts_mod.language_tsx())
_PARSER = Parser(_LANG)

UNSUPPORTED_SYNTAX: dict[str, str] = {
    "class_declaration": "class declarations",
    "class": "class expressions",
    "abstract_class_declaration": "class declarations",
    "generator_function_declaration": "generator functions",
    "generator_function": "generator functions",
    "yield_expression": "generators",
    "with_statement": "with statements",
    "enum_declaration": "enums",
    "decorator": "decorators",
}


# ---------------------------------------------------------------------------
# Public types
# ---------------------------------------------------------------------------


@dataclass
class ParsedProgram:
    """A parsed component module. Keeps the Tree alive for its nodes."""

    source: bytes
    tree: Tree
    top_level_names: list[str] = field(default_factory=list)

    @property
    def root(self) -> Node:
        return self.tree.root_node


def node_text(node: Node) -> str:
    return node.text.decode("utf-8") if node.text is not None else ""


def named_children(node: Node) -> list[Node]:
    """Named children without comments."""
    return [c for c in node.named_children if c.type != "comment"]


def _walk(node: Node) -> Iterator[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _position(node: Node) -> str:
    row, column = node.start_point[0], node.start_point[1]
    return f"line {row + 1}, column {column + 1}"


def _first_error(root: Node) -> Node | None:
    for node in _walk(root):
        if node.type == "ERROR" or node.is_missing:
            return node
    return None


def is_async(node: Node) -> bool:
    """Whether a function node carries the `async` modifier."""
    return any(child.type == "async" for child in node.children)


def _check_supported(root: Node) -> None:
    for node in _walk(root):
        reason = UNSUPPORTED_SYNTAX.get(node.type)
        if reason is not None:
            raise TransformFailure(
                f"Unsupported syntax at {_position(node)}: {reason}",
                detail=node_text(node)[:200],
            )


def _declared_names(statement: Node) -> list[str]:
    if statement.type == "export_statement":
        inner = statement.child_by_field_name("declaration")
        return _declared_names(inner) if inner is not None else []
    if statement.type == "function_declaration":
        name = statement.child_by_field_name("name")
        return [node_text(name)] if name is not None else []
    if statement.type in ("lexical_declaration", "variable_declaration"):
        names = []
        for declarator in named_children(statement):
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                names.append(node_text(name))
        return names
    return []


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_program(code: str) -> ParsedProgram:
    """Parse preprocessed source. Raises TransformFailure on any syntax error."""
    source = code.encode("utf-8")
    tree = _PARSER.parse(source)
    root = tree.root_node
    if root.has_error:
        bad = _first_error(root) or root
        what = f"missing {bad.type}" if bad.is_missing else "unexpected syntax"
        snippet = node_text(bad).splitlines()[0][:120] if node_text(bad) else ""
        raise TransformFailure(f"Syntax error at {_position(bad)}: {what}", detail=snippet or None)
    _check_supported(root)
    names: list[str] = []
    for statement in named_children(root):
        names.extend(_declared_names(statement))
    logger.debug("tsx_parser: parsed %d bytes, top-level %s", len(source), names)
    return ParsedProgram(source=source, tree=tree, top_level_names=names)
