"""
Composer Kernel: Preview Session

One authoring preview. The session owns its navigation callback, its
instantiator (and render cache) and the set of committed renders. Element
addressing runs deferred, on the next event-loop cycle after a render is
committed, and is skipped when the component has been removed meanwhile.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from composer.kernel.addressing import assign_element_handles
from composer.kernel.errors import AddressingSkip
from composer.kernel.instantiator import ComponentInstantiator
from composer.kernel.pages import render_page
from composer.kernel.types import ComponentDefinition, Document, ElementHandle, PageRender, RenderOptions, RenderResult

logger = logging.getLogger(__name__)


class PreviewSession:
    def __init__(
        self,
        navigate: Callable[[str], Any] | None = None,
        options: RenderOptions | None = None,
    ) -> None:
        self._navigate = navigate
        self.options = options or RenderOptions()
        self.instantiator = ComponentInstantiator(navigate=self._dispatch_navigation, options=self.options)
        self._committed: dict[str, RenderResult] = {}
        self.handles: dict[str, list[ElementHandle]] = {}
        self.closed = False

    def _dispatch_navigation(self, path: Any) -> None:
        if self._navigate is None:
            logger.debug("session: navigation to %s dropped, no callback", path)
            return
        self._navigate(str(path))

    # -- committed renders ----------------------------------------------------

    def committed(self, component_id: str) -> RenderResult | None:
        return self._committed.get(component_id)

    def commit(self, component_id: str, result: RenderResult) -> None:
        self._committed[component_id] = result
        self.handles.pop(component_id, None)

    def remove_component(self, component_id: str) -> None:
        self._committed.pop(component_id, None)
        self.handles.pop(component_id, None)

    def render_component(self, definition: ComponentDefinition, overrides: dict[str, Any] | None = None) -> RenderResult:
        result = self.instantiator.render(definition, overrides)
        self.commit(definition.id, result)
        return result

    def render_page(self, document: Document, path: str | None = None) -> PageRender:
        page_render = render_page(document, path, self.instantiator)
        for result in page_render.components:
            self.commit(result.component_id, result)
        return page_render

    # -- addressing -------------------------------------------------------------

    def address(self, component_id: str) -> list[ElementHandle]:
        """Address a committed render now. Raises AddressingSkip if it is gone."""
        result = self._committed.get(component_id)
        if result is None:
            raise AddressingSkip(f"Component {component_id} is no longer rendered")
        if not result.ok:
            raise AddressingSkip(f"Component {component_id} did not render successfully")
        handles = assign_element_handles(component_id, result.nodes)
        self.handles[component_id] = handles
        return handles

    def _run_addressing(self, component_id: str) -> None:
        try:
            self.address(component_id)
        except AddressingSkip as exc:
            logger.debug("session: addressing skipped: %s", exc.message)

    def schedule_addressing(self, component_id: str) -> asyncio.Handle:
        """Defer addressing to the next loop cycle. Needs a running loop."""
        loop = asyncio.get_running_loop()
        return loop.call_soon(self._run_addressing, component_id)

    def close(self) -> None:
        self._navigate = None
        self._committed.clear()
        self.handles.clear()
        self.instantiator.clear_cache()
        self.closed = True
