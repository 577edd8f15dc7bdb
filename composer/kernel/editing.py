"""
Composer Kernel: Editing Bridge

Connects the visual panel and direct element edits to component
definitions. Every edit returns a new ComponentDefinition built with
dataclasses.replace; definitions are never mutated in place.

Panel widgets and value coercion dispatch on PropertyRecord.type through
tables that must cover every entry in PROPERTY_TYPES (checked at import).
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from composer.kernel.errors import ParseFailure
from composer.kernel.literal import parse_literal
from composer.kernel.properties import schema_for
from composer.kernel.types import (
    COLOR_PATTERNS,
    PROPERTY_TYPES,
    ComponentDefinition,
    ElementHandle,
    PropertyRecord,
)

logger = logging.getLogger(__name__)


@dataclass
class PanelField:
    key: str
    label: str
    type: str
    widget: str
    value: Any
    editable: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "type": self.type,
            "widget": self.widget,
            "value": self.value,
            "editable": self.editable,
        }


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def _coerce_text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, dict | list):
        raise ValueError("expected text")
    return str(raw)


def _coerce_number(raw: Any) -> int | float:
    if isinstance(raw, bool):
        raise ValueError("expected a number")
    if isinstance(raw, int | float):
        return raw
    if isinstance(raw, str):
        try:
            number = float(raw.strip())
        except ValueError:
            raise ValueError(f"'{raw}' is not a number") from None
        return int(number) if number.is_integer() else number
    raise ValueError("expected a number")


_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off", ""}


def _coerce_boolean(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"'{raw}' is not a boolean")


def _coerce_color(raw: Any) -> str:
    text = _coerce_text(raw).strip()
    if any(p.match(text) for p in COLOR_PATTERNS) or text.replace("-", "").isalnum():
        return text
    raise ValueError(f"'{raw}' is not a color")


def _coerce_email(raw: Any) -> str:
    text = _coerce_text(raw).strip()
    if text and ("@" not in text or text.startswith("@") or text.endswith("@")):
        raise ValueError(f"'{raw}' is not an email address")
    return text


def _coerce_structured(expected: type, name: str) -> Callable[[Any], Any]:
    def coerce(raw: Any) -> Any:
        if isinstance(raw, str):
            try:
                raw = parse_literal(raw)
            except ParseFailure:
                raise ValueError(f"'{raw}' is not a valid {name}") from None
        if not isinstance(raw, expected):
            raise ValueError(f"expected {name}")
        return raw

    return coerce


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "text": _coerce_text,
    "number": _coerce_number,
    "boolean": _coerce_boolean,
    "color": _coerce_color,
    "image": lambda raw: _coerce_text(raw).strip(),
    "email": _coerce_email,
    "url": lambda raw: _coerce_text(raw).strip(),
    "array": _coerce_structured(list, "array"),
    "object": _coerce_structured(dict, "object"),
}

_WIDGETS: dict[str, str] = {
    "text": "text_input",
    "number": "number_input",
    "boolean": "toggle",
    "color": "color_picker",
    "image": "image_picker",
    "email": "email_input",
    "url": "url_input",
    "array": "list_editor",
    "object": "json_editor",
}

for _table_name, _table in (("_WIDGETS", _WIDGETS), ("_COERCERS", _COERCERS)):
    _missing = set(PROPERTY_TYPES) - set(_table)
    if _missing:
        raise RuntimeError(f"{_table_name} has no entry for property types: {sorted(_missing)}")


# ---------------------------------------------------------------------------
# Panel
# ---------------------------------------------------------------------------


def panel_fields(definition: ComponentDefinition) -> list[PanelField]:
    return [
        PanelField(
            key=key,
            label=record.label,
            type=record.type,
            widget=_WIDGETS[record.type],
            value=record.value,
            editable=record.editable,
        )
        for key, record in schema_for(definition).items()
    ]


def update_property(definition: ComponentDefinition, key: str, raw_value: Any) -> ComponentDefinition:
    """
    Set one property from panel input. Raises KeyError for an unknown key and
    ValueError for a read-only property or a value its type cannot take.
    """
    schema = schema_for(definition)
    record = schema.get(key)
    if record is None:
        raise KeyError(key)
    if not record.editable:
        raise ValueError(f"Property '{key}' is not editable")
    value = _COERCERS[record.type](raw_value)
    updated: dict[str, PropertyRecord] = {**schema, key: dataclasses.replace(record, value=value)}
    logger.debug("editing: %s.%s = %r", definition.id, key, value)
    return dataclasses.replace(definition, property_schema=updated)


# ---------------------------------------------------------------------------
# Element edits
# ---------------------------------------------------------------------------

_CONTENT_KEYS: dict[str, tuple[str, ...]] = {
    "heading": ("heading", "title"),
    "paragraph": ("subheading", "content", "text", "description"),
    "button": ("buttonText",),
    "link": ("linkText",),
    "image": ("imageUrl", "image", "backgroundImage"),
}
_GENERIC_KEYS = ("content", "text", "title", "heading", "subheading", "buttonText", "linkText")


def content_property(schema: dict[str, PropertyRecord], handle: ElementHandle) -> str | None:
    """The property an element's content edit writes to, or None."""
    editable = {k: r for k, r in schema.items() if r.editable}
    if handle.content:
        for key, record in editable.items():
            if isinstance(record.value, str) and record.value.strip() == handle.content.strip():
                return key
    for key in _CONTENT_KEYS.get(handle.element_type, _GENERIC_KEYS):
        if key in editable:
            return key
    return None


def apply_element_edit(
    definition: ComponentDefinition,
    handle: ElementHandle,
    content: Any = None,
    styles: dict[str, Any] | None = None,
) -> ComponentDefinition:
    """Translate a direct element edit into property and style changes."""
    if handle.component_id != definition.id:
        raise ValueError(f"Element {handle.element_id} belongs to {handle.component_id}, not {definition.id}")
    updated = definition
    if content is not None:
        key = content_property(schema_for(definition), handle)
        if key is None:
            logger.info("editing: no property backs %s in %s", handle.element_id, definition.id)
        else:
            updated = update_property(updated, key, content)
    if styles:
        updated = dataclasses.replace(updated, style_map={**updated.style_map, **styles})
    return updated
