"""
Composer Kernel: Component Importer

Builds a ComponentDefinition from uploaded component source: the semantic
type, the property schema, a style map recovered from the first className
and inline style, navigation links and the cached literal markup used when
the source later fails to instantiate.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Any

from composer.kernel.errors import ParseFailure
from composer.kernel.literal import find_balanced, parse_literal
from composer.kernel.properties import extract_property_schema
from composer.kernel.types import DEFAULT_COMPONENT_TYPE, ComponentDefinition, record_from_value

logger = logging.getLogger(__name__)

_EXPORT_DEFAULT = re.compile(r"export\s+default\s+(?:function\s+)?([A-Z][\w$]*)")
_DECLARATION = re.compile(r"\b(?:function|const|let|var)\s+([A-Z][\w$]*)")
_NAV_LINKS = re.compile(r"\b(?:const|let|var)\s+navLinks\s*(?::[^=]+)?=\s*\[")
_CLASS_NAME = re.compile(r"\bclassName=[\"']([^\"']*)[\"']")
_INLINE_STYLE = re.compile(r"\bstyle=\{\{")
_RETURN_PAREN = re.compile(r"\breturn\s*\(")

# checked in order; first keyword found in the source wins
TYPE_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("promo", "PromoBar"),
    ("hero", "Hero"),
    ("navbar", "Header"),
    ("header", "Header"),
    ("feature", "FeatureList"),
    ("image", "ImageBlock"),
    ("button", "Button"),
    ("text", "TextBlock"),
)

FONT_SIZE_SUFFIXES = {"xs", "sm", "base", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl", "7xl", "8xl", "9xl"}
ALIGN_SUFFIXES = {"left", "center", "right", "justify"}


def detect_component_type(source: str) -> str:
    match = _EXPORT_DEFAULT.search(source)
    if match:
        return match.group(1)
    match = _DECLARATION.search(source)
    if match:
        return match.group(1)
    lowered = source.lower()
    for keyword, component_type in TYPE_KEYWORDS:
        if keyword in lowered:
            return component_type
    return DEFAULT_COMPONENT_TYPE


def extract_nav_links(source: str) -> list[Any] | None:
    match = _NAV_LINKS.search(source)
    if match is None:
        return None
    start = match.end() - 1
    end = find_balanced(source, start)
    if end < 0:
        return None
    try:
        links = parse_literal(source[start : end + 1])
    except ParseFailure as exc:
        logger.debug("importer: navLinks unparsable: %s", exc.detail)
        return None
    return links if isinstance(links, list) else None


def _class_category(token: str) -> tuple[str, str] | None:
    if ":" in token:
        return None
    if token.startswith("bg-"):
        return "backgroundColor", token[3:]
    if token.startswith("text-"):
        suffix = token[5:]
        if suffix in ALIGN_SUFFIXES:
            return "textAlign", suffix
        if suffix in FONT_SIZE_SUFFIXES:
            return "fontSize", suffix
        return "textColor", suffix
    if token.startswith("font-"):
        return "fontWeight", token[5:]
    for prefix, category in (("px-", "paddingX"), ("py-", "paddingY"), ("p-", "padding"), ("m-", "margin")):
        if token.startswith(prefix):
            return category, token[len(prefix) :]
    if token == "rounded":
        return "borderRadius", "default"
    if token.startswith("rounded-"):
        return "borderRadius", token[8:]
    if token == "shadow":
        return "shadow", "default"
    if token.startswith("shadow-"):
        return "shadow", token[7:]
    if token == "border":
        return "borderWidth", "default"
    if token.startswith("border-"):
        suffix = token[7:]
        return ("borderWidth", suffix) if suffix.isdigit() else ("borderColor", suffix)
    return None


def class_name_styles(source: str) -> dict[str, str]:
    """Style categories from the first static className; first token per category wins."""
    match = _CLASS_NAME.search(source)
    if match is None:
        return {}
    styles: dict[str, str] = {}
    for token in match.group(1).split():
        found = _class_category(token)
        if found is not None and found[0] not in styles:
            styles[found[0]] = found[1]
    return styles


def inline_styles(source: str) -> dict[str, Any]:
    match = _INLINE_STYLE.search(source)
    if match is None:
        return {}
    start = match.end() - 1
    end = find_balanced(source, start)
    if end < 0:
        return {}
    try:
        parsed = parse_literal(source[start : end + 1])
    except ParseFailure as exc:
        logger.debug("importer: inline style unparsable: %s", exc.detail)
        return {}
    return parsed if isinstance(parsed, dict) else {}


def extract_literal_markup(source: str) -> str | None:
    """The first parenthesized markup a `return (...)` yields, or None."""
    for match in _RETURN_PAREN.finditer(source):
        start = match.end() - 1
        end = find_balanced(source, start)
        if end < 0:
            continue
        markup = source[start + 1 : end].strip()
        if markup.startswith("<"):
            return markup
    return None


def import_component(source: str, component_id: str | None = None) -> ComponentDefinition:
    schema = extract_property_schema(source)
    links = extract_nav_links(source)
    if links and "navLinks" not in schema:
        schema["navLinks"] = record_from_value("navLinks", links)
    style_map: dict[str, Any] = class_name_styles(source)
    for key, value in inline_styles(source).items():
        style_map.setdefault(key, value)
    definition = ComponentDefinition(
        id=component_id or uuid.uuid4().hex,
        type=detect_component_type(source),
        source_text=source,
        property_schema=schema,
        style_map=style_map,
        order_index=0,
        is_custom=True,
        literal_markup=extract_literal_markup(source),
    )
    logger.info("importer: imported %s as %s (%d properties)", definition.id, definition.type, len(schema))
    return definition
