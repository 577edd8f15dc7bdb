"""
Composer Kernel: Element Addressing

Walks a rendered node tree depth-first and gives each element a
process-unique id, a category and a child-index path, written onto the node
as data-element-* attributes. Nodes already marked keep their marks, so a
second walk over the same tree returns the same handles.
"""

from __future__ import annotations

import itertools
import json
import logging
from typing import Any

from composer.kernel.nodes import Node
from composer.kernel.types import ElementHandle

logger = logging.getLogger(__name__)

ELEMENT_ID = "data-element-id"
ELEMENT_TYPE = "data-element-type"
ELEMENT_PATH = "data-element-path"

HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
CONTAINER_TAGS = {
    "div",
    "section",
    "header",
    "footer",
    "nav",
    "main",
    "article",
    "aside",
    "ul",
    "ol",
    "li",
    "form",
}
BUTTON_CLASSES = {"btn", "button"}

_counter = itertools.count(1)


def element_category(node: Node) -> str:
    tag = node.tag.lower()
    if tag in HEADING_TAGS:
        return "heading"
    if tag == "p":
        return "paragraph"
    if tag == "button" or BUTTON_CLASSES.intersection(node.class_names):
        return "button"
    if tag == "a":
        return "link"
    if tag == "img":
        return "image"
    if tag in CONTAINER_TAGS:
        return "container"
    return "generic"


def _content(node: Node, category: str) -> str | None:
    if category == "image":
        src = node.props.get("src")
        return src if isinstance(src, str) else None
    if node.has_text_child():
        return node.text_content().strip()
    return None


def _styles(node: Node) -> dict[str, Any]:
    style = node.props.get("style")
    snapshot: dict[str, Any] = dict(style) if isinstance(style, dict) else {}
    class_name = node.props.get("className")
    if isinstance(class_name, str) and class_name:
        snapshot["className"] = class_name
    return snapshot


def _mark(component_id: str, node: Node, path: list[int], handles: list[ElementHandle]) -> None:
    element_id = node.props.get(ELEMENT_ID)
    if not isinstance(element_id, str):
        element_id = f"{component_id}-{next(_counter)}"
        node.props[ELEMENT_ID] = element_id
        node.props[ELEMENT_TYPE] = element_category(node)
        node.props[ELEMENT_PATH] = json.dumps(path)
    category = node.props.get(ELEMENT_TYPE) or element_category(node)
    handles.append(
        ElementHandle(
            element_id=element_id,
            element_type=category,
            path=list(path),
            component_id=component_id,
            content=_content(node, category),
            styles=_styles(node),
        )
    )
    for index, child in enumerate(node.element_children()):
        _mark(component_id, child, [*path, index], handles)


def assign_element_handles(component_id: str, nodes: list[Node | str]) -> list[ElementHandle]:
    handles: list[ElementHandle] = []
    roots = [n for n in nodes if isinstance(n, Node)]
    for index, node in enumerate(roots):
        _mark(component_id, node, [index], handles)
    logger.debug("addressing: %s has %d elements", component_id, len(handles))
    return handles


def find_element(nodes: list[Node | str], path: list[int]) -> Node | None:
    """Resolve a handle path (root index, then element-child indexes)."""
    if not path:
        return None
    siblings = [n for n in nodes if isinstance(n, Node)]
    node: Node | None = None
    for index in path:
        if not 0 <= index < len(siblings):
            return None
        node = siblings[index]
        siblings = node.element_children()
    return node
