"""
Composer Kernel: Property Model Extractor

Recovers an editable property schema from free-text component source.

Tiers, each falling through to the next:
  1. a `props` / `defaultProps` object-literal binding, parsed by
     composer.kernel.literal (structured blocks repaired, flat blocks promoted)
  2. the markup itself: first heading, paragraph, button and image src
  3. a fixed default schema

Pure: no I/O, idempotent, never raises.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any

from composer.kernel.errors import ParseFailure
from composer.kernel.literal import find_balanced, format_literal, parse_literal
from composer.kernel.types import ComponentDefinition, PropertyRecord, format_label, schema_from_mapping

logger = logging.getLogger(__name__)

PROPERTY_BINDING = re.compile(
    r"(?:\b(?:const|let|var)\s+(?:props|defaultProps)|\b[A-Za-z_$][\w$]*\.defaultProps)"
    r"\s*(?::\s*[^=;{]+)?=\s*\{"
)

_HEADING = re.compile(r"<h[1-6][^>]*>(.*?)</h[1-6]>", re.IGNORECASE | re.DOTALL)
_PARAGRAPH = re.compile(r"<p(?:\s[^>]*)?>(.*?)</p>", re.IGNORECASE | re.DOTALL)
_BUTTON = re.compile(r"<button[^>]*>(.*?)</button>", re.IGNORECASE | re.DOTALL)
_IMAGE_SRC = re.compile(r"src=[\"'](.*?)[\"']", re.IGNORECASE)
_TAG = re.compile(r"<[^>]*>")


def default_schema() -> dict[str, PropertyRecord]:
    return {
        "title": PropertyRecord(type="text", value="Component Title", label="Title"),
        "content": PropertyRecord(type="text", value="Component content goes here", label="Content"),
    }


def locate_property_block(source: str) -> str | None:
    """The brace-balanced text of the first property binding, or None."""
    match = PROPERTY_BINDING.search(source)
    if match is None:
        return None
    start = match.end() - 1
    end = find_balanced(source, start)
    if end < 0:
        logger.debug("properties: unbalanced property block at %d", start)
        return None
    return source[start : end + 1]


def _strip_tags(text: str) -> str:
    return _TAG.sub("", text).strip()


def extract_from_markup(source: str) -> dict[str, PropertyRecord]:
    schema: dict[str, PropertyRecord] = {}
    heading = _HEADING.search(source)
    if heading:
        schema["title"] = PropertyRecord(type="text", value=_strip_tags(heading.group(1)), label=format_label("title"))
    paragraph = _PARAGRAPH.search(source)
    if paragraph:
        schema["content"] = PropertyRecord(
            type="text", value=_strip_tags(paragraph.group(1)), label=format_label("content")
        )
    button = _BUTTON.search(source)
    if button:
        schema["buttonText"] = PropertyRecord(
            type="text", value=_strip_tags(button.group(1)), label=format_label("buttonText")
        )
    image = _IMAGE_SRC.search(source)
    if image:
        schema["imageUrl"] = PropertyRecord(type="image", value=image.group(1), label=format_label("imageUrl"))
    return schema or default_schema()


def extract_property_schema(source: str | None) -> dict[str, PropertyRecord]:
    if not isinstance(source, str) or not source.strip():
        return default_schema()
    try:
        block = locate_property_block(source)
        if block is not None:
            try:
                parsed = parse_literal(block)
            except ParseFailure as exc:
                logger.debug("properties: block unparsable, using markup: %s", exc.detail)
                parsed = None
            if isinstance(parsed, dict) and parsed:
                return schema_from_mapping(parsed)
        return extract_from_markup(source)
    except Exception:
        logger.exception("properties: extraction failed, using default schema")
        return default_schema()


def schema_for(definition: ComponentDefinition) -> dict[str, PropertyRecord]:
    """The stored schema, re-derived from source when the store has none."""
    if definition.property_schema:
        return definition.property_schema
    if definition.source_text:
        return extract_property_schema(definition.source_text)
    return {}


def property_values(schema: dict[str, PropertyRecord], overrides: dict[str, Any] | None = None) -> dict[str, Any]:
    """The merged property object: schema values overlaid by render overrides."""
    values = {key: copy.deepcopy(record.value) for key, record in schema.items()}
    if overrides:
        values.update(overrides)
    return values


def format_property_block(schema: dict[str, PropertyRecord], binding: str = "props") -> str:
    """Author-facing text for a schema; extract_property_schema reads it back."""
    body = format_literal({key: record.to_dict() for key, record in schema.items()})
    return f"const {binding} = {body};"
