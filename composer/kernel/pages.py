"""
Composer Kernel: Page Assembler

Resolves which page of a document to show, orders its components and renders
each one inside its own failure boundary, wrapped with its resolved styles.

Resolution order for a requested path:
  1. exact path match (normalized to a leading "/")
  2. the page flagged as home
  3. the page at "/"
  4. the page named "home" (any case)
  5. the first page
  6. PageNotFound when the document has no pages
"""

from __future__ import annotations

import dataclasses
import logging

from composer.kernel.errors import PageNotFound, RuntimeFailure
from composer.kernel.instantiator import ComponentInstantiator
from composer.kernel.nodes import Node
from composer.kernel.styles import resolve_style_tokens
from composer.kernel.templates import render_error_placeholder
from composer.kernel.types import (
    RENDERED,
    ComponentDefinition,
    Document,
    PageDefinition,
    PageRender,
    RenderOptions,
    RenderResult,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def normalize_path(path: str | None) -> str:
    if not path or not path.strip():
        return "/"
    path = path.strip()
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def resolve_page(document: Document, path: str | None = None) -> PageDefinition:
    pages = document.pages
    if not pages:
        raise PageNotFound(f"Document '{document.id}' has no pages")
    if path:
        target = normalize_path(path)
        for page in pages:
            if normalize_path(page.path) == target:
                return page
        logger.debug("pages: no page at %s in %s, using default", target, document.id)
    for page in pages:
        if page.is_home_page:
            return page
    for page in pages:
        if normalize_path(page.path) == "/":
            return page
    for page in pages:
        if page.name.strip().lower() == "home":
            return page
    return pages[0]


def repair_home_pages(document: Document) -> Document:
    """At most one home page: the first flagged one keeps the flag."""
    seen = False
    pages: list[PageDefinition] = []
    for page in document.pages:
        if page.is_home_page and seen:
            logger.info("pages: clearing extra home flag on %s", page.id)
            page = dataclasses.replace(page, is_home_page=False)
        seen = seen or page.is_home_page
        pages.append(page)
    return dataclasses.replace(document, pages=pages)


def order_components(page: PageDefinition) -> list[ComponentDefinition]:
    """Stable ascending sort by order_index; ties keep document order."""
    return sorted(page.components, key=lambda c: c.order_index)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _render_isolated(instantiator: ComponentInstantiator, component: ComponentDefinition) -> RenderResult:
    try:
        return instantiator.render(component)
    except Exception as exc:
        logger.exception("pages: component %s failed to render", component.id)
        failure = RuntimeFailure(f"Unexpected error rendering component: {exc}", detail=repr(exc))
        return RenderResult(
            component_id=component.id,
            state=RENDERED,
            nodes=render_error_placeholder(failure, component.type),
            error=failure,
        )


def wrap_component(component: ComponentDefinition, result: RenderResult, options: RenderOptions) -> Node:
    resolution = resolve_style_tokens(component.style_map)
    classes = ["component-wrapper"]
    if resolution.class_tokens:
        classes.append(resolution.class_tokens)
    children: list[Node | str] = list(result.nodes)
    if options.editor_mode:
        if component.id == options.selected_component_id:
            classes.append("selected-component")
        children.insert(0, Node(tag="div", props={"className": "component-label"}, children=[component.type]))
    props: dict[str, object] = {"className": " ".join(classes), "data-component-id": component.id}
    if resolution.residual_styles:
        props["style"] = dict(resolution.residual_styles)
    return Node(tag="div", props=props, children=children)


def empty_page_notice() -> Node:
    return Node(
        tag="div",
        props={"className": "empty-page p-8 text-center text-gray-500"},
        children=[
            Node(tag="h2", props={"className": "text-2xl font-semibold mb-2"}, children=["Empty Page"]),
            Node(tag="p", children=["This page has no components to display."]),
        ],
    )


def render_page(
    document: Document,
    path: str | None = None,
    instantiator: ComponentInstantiator | None = None,
) -> PageRender:
    """Render one page. PageNotFound propagates; component failures do not."""
    instantiator = instantiator or ComponentInstantiator()
    page = resolve_page(repair_home_pages(document), path)
    results: list[RenderResult] = []
    wrappers: list[Node | str] = []
    for component in order_components(page):
        result = _render_isolated(instantiator, component)
        results.append(result)
        wrappers.append(wrap_component(component, result, instantiator.options))
    if not wrappers:
        wrappers.append(empty_page_notice())
    container = Node(tag="div", props={"className": "page-container", "data-page-id": page.id}, children=wrappers)
    logger.debug("pages: rendered %s (%d components, %d errors)", page.id, len(results), sum(not r.ok for r in results))
    return PageRender(page=page, components=results, nodes=[container])
