"""
Composer Kernel: Node Tree

The rendering factory's output. A Node is an intrinsic element (tag, props,
children); strings are text. Fragments exist only transiently: the factory
splices them into their parent.

`to_html` serializes a tree. Event handlers and other callables are not
serialized; in the preview they are invoked through `activate`.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from html import escape
from typing import Any

from composer.kernel.errors import RuntimeFailure
from composer.kernel.jsvalues import UNDEFINED, format_number, is_number

FRAGMENT = "#fragment"

VOID_ELEMENTS = {
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "link",
    "meta",
    "source",
    "track",
    "wbr",
}

# CSS properties whose numeric values carry no unit
UNITLESS_STYLES = {
    "opacity",
    "zIndex",
    "fontWeight",
    "lineHeight",
    "flex",
    "flexGrow",
    "flexShrink",
    "order",
    "zoom",
}

_ATTRIBUTE_ALIASES = {"className": "class", "htmlFor": "for"}
_SKIPPED_PROPS = {"children", "key", "ref", "dangerouslySetInnerHTML"}


@dataclass
class Node:
    tag: str
    props: dict[str, Any] = field(default_factory=dict)
    children: list[Node | str] = field(default_factory=list)

    @property
    def class_names(self) -> list[str]:
        value = self.props.get("className")
        return value.split() if isinstance(value, str) else []

    def element_children(self) -> list[Node]:
        return [c for c in self.children if isinstance(c, Node)]

    def text_content(self) -> str:
        parts: list[str] = []
        for child in self.children:
            parts.append(child if isinstance(child, str) else child.text_content())
        return "".join(parts)

    def has_text_child(self) -> bool:
        return any(isinstance(c, str) and c.strip() for c in self.children)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def _flatten_into(out: list[Node | str], value: Any) -> None:
    if value is None or value is UNDEFINED or isinstance(value, bool):
        return
    if isinstance(value, list | tuple):
        for item in value:
            _flatten_into(out, item)
        return
    if isinstance(value, Node):
        if value.tag == FRAGMENT:
            out.extend(value.children)
        else:
            out.append(value)
        return
    if is_number(value):
        out.append(format_number(value))
        return
    if isinstance(value, str):
        if value:
            out.append(value)
        return
    if isinstance(value, dict):
        raise RuntimeFailure("Objects are not valid as a child node")
    if callable(value):
        # functions are not renderable children
        return
    if hasattr(value, "js_get"):
        # script objects: promises, dates, regexes
        raise RuntimeFailure("Objects are not valid as a child node")
    out.append(str(value))


def normalize_children(value: Any) -> list[Node | str]:
    """Flatten arrays, splice fragments and drop null/undefined/booleans."""
    out: list[Node | str] = []
    _flatten_into(out, value)
    return out


def create_element(tag: str, props: dict[str, Any] | None, *children: Any) -> Node:
    """Build an intrinsic element. Component types are resolved by the caller."""
    merged = dict(props or {})
    if children:
        kids = normalize_children(list(children))
    else:
        kids = normalize_children(merged.get("children"))
    merged.pop("children", None)
    return Node(tag=tag, props=merged, children=kids)


# ---------------------------------------------------------------------------
# Activation
# ---------------------------------------------------------------------------


def activation_event(node: Node | None = None, event_type: str = "click") -> dict[str, Any]:
    """A script-visible event object; `preventDefault()` flips defaultPrevented."""
    event: dict[str, Any] = {"type": event_type, "target": node, "defaultPrevented": False}

    def prevent_default(*_args: Any) -> None:
        event["defaultPrevented"] = True

    event["preventDefault"] = prevent_default
    event["stopPropagation"] = lambda *_args: None
    return event


def activate(node: Node, event_type: str = "click") -> dict[str, Any]:
    """Fire a node's handler (onClick by default) and return the event."""
    event = activation_event(node, event_type)
    handler = node.props.get("on" + event_type[:1].upper() + event_type[1:])
    if callable(handler):
        handler(event)
    return event


def clone_tree(nodes: list[Node | str]) -> list[Node | str]:
    """Copy the element structure. Prop values (handlers included) are shared."""
    return [
        Node(tag=n.tag, props=dict(n.props), children=clone_tree(n.children)) if isinstance(n, Node) else n
        for n in nodes
    ]


def iter_nodes(nodes: list[Node | str]):
    """Depth-first walk over every element."""
    stack = [n for n in reversed(nodes) if isinstance(n, Node)]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.element_children()))


# ---------------------------------------------------------------------------
# HTML serialization
# ---------------------------------------------------------------------------


def _kebab(name: str) -> str:
    if name.startswith("--"):
        return name
    return re.sub(r"([A-Z])", lambda m: "-" + m.group(1).lower(), name)


def style_to_css(style: dict[str, Any]) -> str:
    parts = []
    for name, value in style.items():
        if value is None or value is UNDEFINED or value is False or value == "":
            continue
        if is_number(value):
            text = format_number(value)
            if name not in UNITLESS_STYLES and value != 0:
                text += "px"
        else:
            text = str(value)
        parts.append(f"{_kebab(name)}: {text}")
    return "; ".join(parts)


def _is_event_handler(name: str, value: Any) -> bool:
    return callable(value) or (name.startswith("on") and name[2:3].isupper())


def _render_attributes(props: dict[str, Any]) -> str:
    parts: list[str] = []
    for name, value in props.items():
        if name in _SKIPPED_PROPS or _is_event_handler(name, value):
            continue
        if value is None or value is UNDEFINED or value is False:
            continue
        attr = _ATTRIBUTE_ALIASES.get(name, name)
        if value is True:
            parts.append(attr)
            continue
        if name == "style" and isinstance(value, dict):
            text = style_to_css(value)
            if not text:
                continue
        elif is_number(value):
            text = format_number(value)
        elif isinstance(value, list | dict):
            text = json.dumps(value)
        else:
            text = str(value)
        parts.append(f'{attr}="{escape(text, quote=True)}"')
    return (" " + " ".join(parts)) if parts else ""


def _render(node: Node | str, out: list[str]) -> None:
    if isinstance(node, str):
        out.append(escape(node, quote=False))
        return
    if node.tag == FRAGMENT:
        for child in node.children:
            _render(child, out)
        return
    out.append(f"<{node.tag}{_render_attributes(node.props)}>")
    if node.tag in VOID_ELEMENTS:
        return
    inner = node.props.get("dangerouslySetInnerHTML")
    if isinstance(inner, dict) and isinstance(inner.get("__html"), str):
        out.append(inner["__html"])
    else:
        for child in node.children:
            _render(child, out)
    out.append(f"</{node.tag}>")


def to_html(nodes: list[Node | str] | Node | str) -> str:
    if not isinstance(nodes, list):
        nodes = [nodes]
    out: list[str] = []
    for node in nodes:
        _render(node, out)
    return "".join(out)
