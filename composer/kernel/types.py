"""
Composer Kernel: Shared Types

Data classes used across the extractor, instantiator, addressing, page
assembler and editing bridge. These are the contracts that bind the kernel
together.

`from_dict` accepts the storage envelope (camelCase keys, with `properties`
and `styles` held as JSON strings); `to_dict` writes the same envelope back.
Malformed envelope JSON never raises: it degrades to an empty map.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from composer.kernel.errors import ComponentFailure, ParseFailure
from composer.kernel.literal import parse_literal

if TYPE_CHECKING:
    from composer.kernel.nodes import Node

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Property type registry
# ---------------------------------------------------------------------------

PROPERTY_TYPES: tuple[str, ...] = (
    "text",
    "number",
    "boolean",
    "color",
    "image",
    "email",
    "url",
    "array",
    "object",
)

# Declared types authors commonly write that mean one of ours
TYPE_ALIASES: dict[str, str] = {
    "string": "text",
    "textarea": "text",
    "richtext": "text",
    "bool": "boolean",
    "integer": "number",
    "int": "number",
    "float": "number",
    "list": "array",
    "json": "object",
    "link": "url",
    "href": "url",
    "img": "image",
    "colour": "color",
}

IMAGE_PATTERN = re.compile(r"\.(jpg|jpeg|png|gif|bmp|svg|webp)($|\?)", re.IGNORECASE)
COLOR_PATTERNS = (
    re.compile(r"^#[0-9A-Fa-f]{3,8}$"),
    re.compile(r"^rgba?\(.*\)$"),
    re.compile(r"^hsla?\(.*\)$"),
)
URL_PATTERN = re.compile(r"^https?://")

DEFAULT_COMPONENT_TYPE = "Component"


# ---------------------------------------------------------------------------
# Inference helpers
# ---------------------------------------------------------------------------


def format_label(key: str) -> str:
    """backgroundColor → "Background color", button_text → "Button text"."""
    spaced = re.sub(r"([A-Z])", r" \1", key).replace("_", " ")
    return " ".join(spaced.split()).capitalize()


def _refine_string(value: str) -> str:
    if IMAGE_PATTERN.search(value) or "unsplash.com" in value or "images." in value:
        return "image"
    if any(pattern.match(value) for pattern in COLOR_PATTERNS):
        return "color"
    if "@" in value and "." in value:
        return "email"
    if URL_PATTERN.match(value):
        return "url"
    return "text"


def infer_property_type(value: Any) -> str:
    if value is None:
        return "text"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, str):
        return _refine_string(value)
    if isinstance(value, list | tuple):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "text"


def value_matches_type(type_: str, value: Any) -> bool:
    if type_ in ("text", "color", "image", "email", "url"):
        return isinstance(value, str)
    if type_ == "number":
        return isinstance(value, int | float) and not isinstance(value, bool)
    if type_ == "boolean":
        return isinstance(value, bool)
    if type_ == "array":
        return isinstance(value, list)
    if type_ == "object":
        return isinstance(value, dict)
    return False


def is_structured_entry(raw: Any) -> bool:
    """An entry already in record shape: sibling `type` and `value` keys."""
    return isinstance(raw, dict) and "value" in raw and "type" in raw


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class PropertyRecord:
    """
    A typed, labeled, editability-flagged value. `type` is the discriminator
    and always one of PROPERTY_TYPES; build through coerce_record.
    """

    type: str
    value: Any
    label: str
    editable: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "value": self.value, "label": self.label, "editable": self.editable}


def record_from_value(key: str, value: Any) -> PropertyRecord:
    """Promote a flat `key: literal` entry."""
    if value is None:
        value = ""
    if isinstance(value, tuple):
        value = list(value)
    return PropertyRecord(type=infer_property_type(value), value=value, label=format_label(key))


def record_from_entry(key: str, entry: dict[str, Any]) -> PropertyRecord:
    """Repair a structured entry: fill type, label and editable where missing or wrong."""
    value = entry.get("value")
    if value is None:
        value = ""
    declared = entry.get("type")
    if isinstance(declared, str):
        declared = TYPE_ALIASES.get(declared.lower(), declared.lower())
    if declared in PROPERTY_TYPES and value_matches_type(declared, value):
        type_ = declared
    else:
        type_ = infer_property_type(value)
    label = entry.get("label")
    if not isinstance(label, str) or not label.strip():
        label = format_label(key)
    editable = entry.get("editable", True)
    if not isinstance(editable, bool):
        editable = True
    return PropertyRecord(type=type_, value=value, label=label, editable=editable)


def coerce_record(key: str, raw: Any) -> PropertyRecord:
    if isinstance(raw, PropertyRecord):
        return raw
    if isinstance(raw, dict) and "value" in raw and ("type" in raw or "label" in raw or "editable" in raw):
        return record_from_entry(key, raw)
    return record_from_value(key, raw)


def schema_from_mapping(mapping: dict[str, Any]) -> dict[str, PropertyRecord]:
    """
    Build a schema from a parsed block. A block with any structured entry is
    treated as structured; its non-record entries are promoted as flat values.
    """
    structured = any(is_structured_entry(v) for v in mapping.values())
    schema: dict[str, PropertyRecord] = {}
    for key, raw in mapping.items():
        if structured and isinstance(raw, dict) and "value" in raw:
            schema[str(key)] = record_from_entry(str(key), raw)
        else:
            schema[str(key)] = record_from_value(str(key), raw)
    return schema


def _load_json_field(raw: Any, field_name: str, owner: str) -> dict[str, Any]:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        logger.warning("types: %s.%s is %s, expected JSON text", owner, field_name, type(raw).__name__)
        return {}
    try:
        parsed = parse_literal(raw)
    except ParseFailure as exc:
        logger.warning("types: %s.%s is not valid JSON: %s", owner, field_name, exc.detail)
        return {}
    if not isinstance(parsed, dict):
        logger.warning("types: %s.%s is not an object", owner, field_name)
        return {}
    return parsed


@dataclass
class ComponentDefinition:
    """
    An authorable UI unit. When `source_text` is present it is the rendering
    authority; `property_schema` is the authority for the editing panel.
    Edits replace the whole object (dataclasses.replace), never mutate it.
    """

    id: str
    type: str = DEFAULT_COMPONENT_TYPE
    source_text: str | None = None
    property_schema: dict[str, PropertyRecord] = field(default_factory=dict)
    style_map: dict[str, Any] = field(default_factory=dict)
    order_index: int = 0
    is_custom: bool = False
    literal_markup: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "rawCode": self.source_text,
            "properties": json.dumps({k: r.to_dict() for k, r in self.property_schema.items()}),
            "styles": json.dumps(self.style_map),
            "orderIndex": self.order_index,
            "isCustom": self.is_custom,
            "jsxContent": self.literal_markup,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ComponentDefinition:
        component_id = str(d.get("id", ""))
        properties = _load_json_field(d.get("properties"), "properties", component_id)
        styles = _load_json_field(d.get("styles"), "styles", component_id)
        order_index = d.get("orderIndex", d.get("order_index", 0))
        try:
            order_index = int(order_index)
        except (TypeError, ValueError):
            order_index = 0
        return cls(
            id=component_id,
            type=d.get("type") or DEFAULT_COMPONENT_TYPE,
            source_text=d.get("rawCode", d.get("source_text")),
            property_schema=schema_from_mapping(properties),
            style_map=styles,
            order_index=order_index,
            is_custom=bool(d.get("isCustom", d.get("is_custom", False))),
            literal_markup=d.get("jsxContent", d.get("literal_markup")),
        )


@dataclass
class PageDefinition:
    id: str
    name: str = ""
    path: str = "/"
    is_home_page: bool = False
    components: list[ComponentDefinition] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "isHomePage": self.is_home_page,
            "components": [c.to_dict() for c in self.components],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PageDefinition:
        return cls(
            id=str(d.get("id", "")),
            name=d.get("name") or "",
            path=d.get("path") or "/",
            is_home_page=bool(d.get("isHomePage", d.get("is_home_page", False))),
            components=[ComponentDefinition.from_dict(c) for c in d.get("components", [])],
        )


@dataclass
class Document:
    """A template or project: an ordered list of pages."""

    id: str
    name: str = ""
    pages: list[PageDefinition] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "pages": [p.to_dict() for p in self.pages]}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Document:
        return cls(
            id=str(d.get("id", "")),
            name=d.get("name") or "",
            pages=[PageDefinition.from_dict(p) for p in d.get("pages", [])],
        )


@dataclass
class ElementHandle:
    """Transient reference to one rendered node. Regenerated every pass."""

    element_id: str
    element_type: str
    path: list[int]
    component_id: str
    content: str | None = None
    styles: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "elementId": self.element_id,
            "elementType": self.element_type,
            "path": list(self.path),
            "componentId": self.component_id,
            "content": self.content,
            "styles": dict(self.styles),
        }


@dataclass
class RenderOptions:
    cache_size: int = 128
    max_steps: int = 200_000
    fallback_component_name: str = "DynamicComponent"
    editor_mode: bool = False
    selected_component_id: str | None = None


RENDERED = "rendered"
FALLBACK_RENDERED = "fallback_rendered"


@dataclass
class RenderResult:
    component_id: str
    state: str
    nodes: list[Node | str] = field(default_factory=list)
    error: ComponentFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PageRender:
    page: PageDefinition
    components: list[RenderResult] = field(default_factory=list)
    nodes: list[Node | str] = field(default_factory=list)

    @property
    def errors(self) -> list[ComponentFailure]:
        return [r.error for r in self.components if r.error is not None]
