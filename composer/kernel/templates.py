"""
Composer Kernel: Static Template Library

Type-keyed fallback templates for components whose source cannot be
instantiated. Each template is a Mustache string rendered with chevron
against the merged property object, then parsed into nodes by
composer.kernel.markup.

Buttons and links carry `data-path`; `render_template` attaches an onClick
handler to them that delegates to the navigation capability.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import chevron

from composer.kernel.errors import ComponentFailure
from composer.kernel.markup import parse_markup
from composer.kernel.nodes import Node, iter_nodes
from composer.kernel.styles import color_token, spacing_token, text_align_token

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

HEADER_TEMPLATE = """
<header class="{{bgClass}} {{textClass}} {{paddingClass}} shadow-sm">
  <div class="container mx-auto flex items-center justify-between">
    <a href="#" data-path="/" class="text-xl font-bold">{{title}}</a>
    <nav class="flex gap-4">
      {{#navLinks}}<a href="#" data-path="{{path}}" class="hover:underline">{{text}}</a>{{/navLinks}}
    </nav>
  </div>
</header>
"""

HERO_TEMPLATE = """
<section class="{{bgClass}} {{textClass}} {{paddingClass}} {{alignClass}} relative"{{#imageUrl}} style="background-image: url('{{imageUrl}}'); background-size: cover"{{/imageUrl}}>
  <div class="container mx-auto max-w-4xl">
    <h1 class="text-4xl font-bold mb-4">{{title}}</h1>
    {{#text}}<p class="text-xl mb-8">{{text}}</p>{{/text}}
    <a href="#" data-path="{{buttonLink}}" class="btn inline-block px-6 py-3 rounded-lg bg-blue-600 text-white">{{buttonText}}</a>
  </div>
</section>
"""

TEXT_BLOCK_TEMPLATE = """
<section class="{{bgClass}} {{textClass}} {{paddingClass}} {{alignClass}}">
  <div class="container mx-auto max-w-3xl">
    {{#title}}<h2 class="text-3xl font-bold mb-4">{{title}}</h2>{{/title}}
    <p class="text-lg">{{text}}</p>
  </div>
</section>
"""

IMAGE_BLOCK_TEMPLATE = """
<section class="{{bgClass}} {{paddingClass}} {{alignClass}}">
  <figure class="container mx-auto">
    <img src="{{imageUrl}}" alt="{{alt}}" class="w-full h-auto rounded-lg">
    {{#caption}}<figcaption class="mt-2 text-sm text-gray-500">{{caption}}</figcaption>{{/caption}}
  </figure>
</section>
"""

BUTTON_TEMPLATE = """
<div class="{{paddingClass}} {{alignClass}}">
  <a href="#" data-path="{{buttonLink}}" class="btn inline-block px-6 py-3 rounded-lg {{bgClass}} {{textClass}}">{{buttonText}}</a>
</div>
"""

FEATURE_LIST_TEMPLATE = """
<section class="{{bgClass}} {{textClass}} {{paddingClass}}">
  <div class="container mx-auto">
    {{#title}}<h2 class="text-3xl font-bold mb-8 text-center">{{title}}</h2>{{/title}}
    <div class="grid grid-cols-1 md:grid-cols-3 gap-8">
      {{#features}}
      <div class="p-6 rounded-lg shadow-md">
        <h3 class="text-xl font-semibold mb-2">{{title}}</h3>
        <p>{{description}}</p>
      </div>
      {{/features}}
    </div>
  </div>
</section>
"""

PROMO_BAR_TEMPLATE = """
<div class="{{bgClass}} {{textClass}} py-2 px-4 text-center text-sm">
  <span>{{text}}</span>
  {{#linkText}}<a href="#" data-path="{{buttonLink}}" class="ml-2 underline font-semibold">{{linkText}}</a>{{/linkText}}
</div>
"""

ERROR_TEMPLATE = """
<div class="component-error p-4 border border-red-300 bg-red-50 text-red-700 rounded" data-render-error="true">
  <p class="font-semibold">{{heading}}</p>
  <p class="text-sm">{{message}}</p>
  <details class="mt-2 text-xs">
    <summary>Error details</summary>
    <pre>{{detail}}</pre>
  </details>
</div>
"""

TEMPLATES: dict[str, str] = {
    "header": HEADER_TEMPLATE,
    "hero": HERO_TEMPLATE,
    "text_block": TEXT_BLOCK_TEMPLATE,
    "image_block": IMAGE_BLOCK_TEMPLATE,
    "button": BUTTON_TEMPLATE,
    "feature_list": FEATURE_LIST_TEMPLATE,
    "promo_bar": PROMO_BAR_TEMPLATE,
}

TEMPLATE_TYPES: dict[str, str] = {
    "Header": "header",
    "Hero": "hero",
    "HeroSection": "hero",
    "TextBlock": "text_block",
    "TextSection": "text_block",
    "ImageBlock": "image_block",
    "ImageSection": "image_block",
    "Button": "button",
    "ButtonBlock": "button",
    "FeatureList": "feature_list",
    "Features": "feature_list",
    "PromoBar": "promo_bar",
}

DEFAULT_FEATURES = [
    {"title": "Feature One", "description": "Describe the first feature."},
    {"title": "Feature Two", "description": "Describe the second feature."},
    {"title": "Feature Three", "description": "Describe the third feature."},
]


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


def _first_text(values: dict[str, Any], *keys: str, default: str = "") -> str:
    for key in keys:
        value = values.get(key)
        if isinstance(value, str) and value.strip():
            return value
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
    return default


def _features(values: dict[str, Any]) -> list[dict[str, str]]:
    raw = values.get("features") or values.get("items")
    if not isinstance(raw, list) or not raw:
        return DEFAULT_FEATURES
    features = []
    for item in raw:
        if isinstance(item, dict):
            features.append(
                {
                    "title": _first_text(item, "title", "name", "heading"),
                    "description": _first_text(item, "description", "text", "content"),
                }
            )
        elif isinstance(item, str):
            features.append({"title": item, "description": ""})
    return features or DEFAULT_FEATURES


def _nav_links(values: dict[str, Any]) -> list[dict[str, str]]:
    raw = values.get("navLinks") or values.get("links")
    links = []
    for item in raw if isinstance(raw, list) else []:
        if isinstance(item, dict):
            text = _first_text(item, "text", "label", "name", "title")
            path = _first_text(item, "path", "href", "url", "link", default="/")
            if text:
                links.append({"text": text, "path": path})
    return links


def template_context(values: dict[str, Any]) -> dict[str, Any]:
    """The shared Mustache context every template consumes."""
    return {
        "title": _first_text(values, "title", "heading", "logo", "brandName"),
        "text": _first_text(values, "text", "content", "subtitle", "subheading", "description", "message"),
        "imageUrl": _first_text(values, "imageUrl", "image", "imageSrc", "backgroundImage"),
        "alt": _first_text(values, "alt", "altText", "title", default="Image"),
        "caption": _first_text(values, "caption"),
        "buttonText": _first_text(values, "buttonText", "ctaText", default="Click Me"),
        "buttonLink": _first_text(values, "buttonLink", "ctaLink", "link", "href", default="/"),
        "linkText": _first_text(values, "linkText"),
        "bgClass": color_token("bg", values.get("backgroundColor") or values.get("bgColor")),
        "textClass": color_token("text", values.get("textColor") or values.get("color")),
        "alignClass": text_align_token(values.get("textAlign") or values.get("alignment") or "center"),
        "paddingClass": spacing_token("p", values.get("padding") or "8"),
        "features": _features(values),
        "navLinks": _nav_links(values),
    }


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _navigation_handler(path: str, navigate: Callable[[str], Any] | None) -> Callable[..., Any]:
    def on_click(event: Any = None, *_args: Any) -> bool:
        if isinstance(event, dict) and callable(event.get("preventDefault")):
            event["preventDefault"]()
        if navigate is not None:
            navigate(path)
        return False

    return on_click


def attach_navigation(nodes: list[Node | str], navigate: Callable[[str], Any] | None) -> list[Node | str]:
    for node in iter_nodes(nodes):
        path = node.props.get("data-path")
        if isinstance(path, str) and "onClick" not in node.props:
            node.props["onClick"] = _navigation_handler(path, navigate)
    return nodes


def template_key(component_type: str | None) -> str | None:
    if not component_type:
        return None
    return TEMPLATE_TYPES.get(component_type)


def render_template(
    component_type: str | None,
    values: dict[str, Any],
    navigate: Callable[[str], Any] | None = None,
) -> list[Node | str] | None:
    """Render the static template for a type, or None when the type has none."""
    key = template_key(component_type)
    if key is None:
        return None
    markup = chevron.render(TEMPLATES[key], template_context(values))
    logger.debug("templates: rendered %s for %s", key, component_type)
    return attach_navigation(parse_markup(markup), navigate)


def render_error_placeholder(error: ComponentFailure, component_type: str | None = None) -> list[Node | str]:
    heading = f"Error rendering {component_type}" if component_type else "Error rendering component"
    markup = chevron.render(
        ERROR_TEMPLATE,
        {"heading": heading, "message": error.message, "detail": error.detail},
    )
    return parse_markup(markup)
