"""
Composer Kernel: Sandboxed Instantiator

Turns a ComponentDefinition into a node tree:

  Idle → Preprocessing → Transforming → Evaluating → Rendered
                                      ↘ Failed → FallbackRendered

Runtime errors from author logic are contained: the result is still
"rendered", with an inline error placeholder in place of the component.
Transform-stage failures (and a missing source) go through the fallback
chain: static template by type, then cached literal markup, then the error
placeholder. A failure never yields a blank region.

Successful renders are cached per instantiator, keyed by (source text,
canonical JSON of the merged properties), in a bounded LRU.
"""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from composer.kernel.errors import ComponentFailure, RuntimeFailure, TransformFailure
from composer.kernel.interpreter import Interpreter
from composer.kernel.markup import parse_markup
from composer.kernel.nodes import Node, clone_tree
from composer.kernel.preprocess import preprocess_source
from composer.kernel.properties import property_values, schema_for
from composer.kernel.templates import render_error_placeholder, render_template
from composer.kernel.tsx_parser import parse_program
from composer.kernel.types import (
    FALLBACK_RENDERED,
    RENDERED,
    ComponentDefinition,
    RenderOptions,
    RenderResult,
)

logger = logging.getLogger(__name__)


class InstantiationState(StrEnum):
    IDLE = "idle"
    PREPROCESSING = "preprocessing"
    TRANSFORMING = "transforming"
    EVALUATING = "evaluating"
    RENDERED = "rendered"
    FAILED = "failed"
    FALLBACK_RENDERED = "fallback_rendered"


def cache_key(source: str, values: dict[str, Any]) -> tuple[str, str]:
    return source, json.dumps(values, sort_keys=True, default=str)


class ComponentInstantiator:
    """
    Renders component definitions for one preview. `navigate` is the
    capability handed to every render (the injected shim and template links
    both call it); None leaves link activation inert.
    """

    def __init__(
        self,
        navigate: Callable[[str], Any] | None = None,
        options: RenderOptions | None = None,
    ) -> None:
        self.navigate = navigate
        self.options = options or RenderOptions()
        self.state = InstantiationState.IDLE
        self._cache: OrderedDict[tuple[str, str], list[Node | str]] = OrderedDict()

    # -- state --------------------------------------------------------------

    def _transition(self, component_id: str, state: InstantiationState) -> None:
        logger.debug("instantiator: %s %s -> %s", component_id, self.state.value, state.value)
        self.state = state

    # -- cache --------------------------------------------------------------

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    def _cached(self, key: tuple[str, str]) -> list[Node | str] | None:
        nodes = self._cache.get(key)
        if nodes is None:
            return None
        self._cache.move_to_end(key)
        return clone_tree(nodes)

    def _store(self, key: tuple[str, str], nodes: list[Node | str]) -> None:
        if self.options.cache_size <= 0:
            return
        self._cache[key] = clone_tree(nodes)
        self._cache.move_to_end(key)
        while len(self._cache) > self.options.cache_size:
            self._cache.popitem(last=False)

    # -- rendering ----------------------------------------------------------

    def render(self, definition: ComponentDefinition, overrides: dict[str, Any] | None = None) -> RenderResult:
        self._transition(definition.id, InstantiationState.IDLE)
        values = property_values(schema_for(definition), overrides)
        source = definition.source_text
        if not source or not source.strip():
            return self._fallback(definition, values, None)

        key = cache_key(source, values)
        cached = self._cached(key)
        if cached is not None:
            logger.debug("instantiator: cache hit for %s", definition.id)
            self._transition(definition.id, InstantiationState.RENDERED)
            return RenderResult(component_id=definition.id, state=RENDERED, nodes=cached)

        try:
            self._transition(definition.id, InstantiationState.PREPROCESSING)
            prepared = preprocess_source(source, self.options.fallback_component_name)
            self._transition(definition.id, InstantiationState.TRANSFORMING)
            program = parse_program(prepared.code)
            self._transition(definition.id, InstantiationState.EVALUATING)
            interpreter = Interpreter(
                program,
                values,
                navigate=self.navigate,
                max_steps=self.options.max_steps,
            )
            nodes = interpreter.render(prepared.component_name)
        except TransformFailure as exc:
            self._transition(definition.id, InstantiationState.FAILED)
            return self._fallback(definition, values, exc)
        except RuntimeFailure as exc:
            logger.info("instantiator: %s raised at runtime: %s", definition.id, exc.message)
            self._transition(definition.id, InstantiationState.RENDERED)
            return RenderResult(
                component_id=definition.id,
                state=RENDERED,
                nodes=render_error_placeholder(exc, definition.type),
                error=exc,
            )

        self._store(key, nodes)
        self._transition(definition.id, InstantiationState.RENDERED)
        return RenderResult(component_id=definition.id, state=RENDERED, nodes=nodes)

    def _fallback(
        self,
        definition: ComponentDefinition,
        values: dict[str, Any],
        error: ComponentFailure | None,
    ) -> RenderResult:
        nodes = render_template(definition.type, values, self.navigate)
        if not nodes and definition.literal_markup and definition.literal_markup.strip():
            nodes = [Node(tag="div", props={"className": "literal-markup"}, children=parse_markup(definition.literal_markup))]
        if not nodes:
            error = error or TransformFailure(
                f"Nothing to render for component type '{definition.type}'",
                detail="The component has no source, no template and no cached markup.",
            )
            nodes = render_error_placeholder(error, definition.type)
        if error is not None:
            logger.warning("instantiator: %s fell back after %s failure: %s", definition.id, error.stage, error.message)
        self._transition(definition.id, InstantiationState.FALLBACK_RENDERED)
        return RenderResult(component_id=definition.id, state=FALLBACK_RENDERED, nodes=nodes, error=error)


def render_component(
    definition: ComponentDefinition,
    overrides: dict[str, Any] | None = None,
    navigate: Callable[[str], Any] | None = None,
    options: RenderOptions | None = None,
) -> RenderResult:
    """One-shot render with a throwaway instantiator."""
    return ComponentInstantiator(navigate=navigate, options=options).render(definition, overrides)
