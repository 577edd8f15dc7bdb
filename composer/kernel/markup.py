"""
Composer Kernel: Markup → Node Tree

Turns static markup (rendered fallback templates, cached literal markup) into
the same Node tree the interpreter produces, so the rest of the pipeline
(addressing, serialization, page wrapping) never cares where nodes came from.
"""

from __future__ import annotations

import re
from html.parser import HTMLParser

from composer.kernel.nodes import VOID_ELEMENTS, Node

# html.parser lowercases attribute names; map the ones the tree keys in camelCase
_ATTRIBUTE_NAMES = {"class": "className", "classname": "className", "for": "htmlFor", "htmlfor": "htmlFor"}


def parse_inline_style(text: str) -> dict[str, str]:
    """`background-color: red; padding: 4px` → {"backgroundColor": "red", ...}."""
    style: dict[str, str] = {}
    for declaration in text.split(";"):
        name, sep, value = declaration.partition(":")
        if not sep or not name.strip():
            continue
        name = name.strip()
        if not name.startswith("--"):
            name = re.sub(r"-([a-z])", lambda m: m.group(1).upper(), name.lower())
        style[name] = value.strip()
    return style


class _TreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.root = Node(tag="#root")
        self.stack: list[Node] = [self.root]

    def _open(self, tag: str, attrs: list[tuple[str, str | None]]) -> Node:
        props: dict[str, object] = {}
        for name, value in attrs:
            key = _ATTRIBUTE_NAMES.get(name, name)
            if key == "style" and value:
                props[key] = parse_inline_style(value)
            else:
                props[key] = True if value is None else value
        node = Node(tag=tag, props=props)
        self.stack[-1].children.append(node)
        return node

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        node = self._open(tag, attrs)
        if tag not in VOID_ELEMENTS:
            self.stack.append(node)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._open(tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        for depth in range(len(self.stack) - 1, 0, -1):
            if self.stack[depth].tag == tag:
                del self.stack[depth:]
                return
        # stray closing tag: ignored

    def handle_data(self, data: str) -> None:
        text = re.sub(r"\s+", " ", data)
        if text.strip():
            self.stack[-1].children.append(text)


def parse_markup(text: str) -> list[Node | str]:
    builder = _TreeBuilder()
    builder.feed(text or "")
    builder.close()
    return builder.root.children
