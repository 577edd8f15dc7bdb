"""
Composer Kernel: the pure engine.

  properties   source text → editable property schema
  styles       style map → utility-class tokens + residual inline styles
  instantiator preprocess → parse → interpret → node tree, with fallbacks
  addressing   element handles over a rendered tree
  pages        page resolution, ordering and isolated page rendering
  session      one preview: navigation, cache, deferred addressing
  editing      panel fields and full-object edits
  importer     uploaded source → ComponentDefinition
"""

from composer.kernel.addressing import assign_element_handles, find_element
from composer.kernel.editing import apply_element_edit, panel_fields, update_property
from composer.kernel.errors import (
    AddressingSkip,
    ComponentFailure,
    PageNotFound,
    ParseFailure,
    ResolutionFailure,
    RuntimeFailure,
    TransformFailure,
)
from composer.kernel.importer import import_component
from composer.kernel.instantiator import ComponentInstantiator, render_component
from composer.kernel.nodes import to_html
from composer.kernel.pages import order_components, render_page, repair_home_pages, resolve_page
from composer.kernel.properties import extract_property_schema, format_property_block
from composer.kernel.session import PreviewSession
from composer.kernel.styles import resolve_style_tokens

__all__ = [
    "render_component",
    "ComponentInstantiator",
    "extract_property_schema",
    "format_property_block",
    "resolve_style_tokens",
    "resolve_page",
    "render_page",
    "order_components",
    "repair_home_pages",
    "assign_element_handles",
    "find_element",
    "PreviewSession",
    "to_html",
    "import_component",
    "panel_fields",
    "update_property",
    "apply_element_edit",
    "ComponentFailure",
    "ParseFailure",
    "TransformFailure",
    "RuntimeFailure",
    "AddressingSkip",
    "ResolutionFailure",
    "PageNotFound",
]
