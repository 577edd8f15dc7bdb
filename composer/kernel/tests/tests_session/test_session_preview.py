"""
Composer Kernel -- Preview Session Tests

A session owns navigation, the render cache and committed renders. Element
addressing is deferred to the next event-loop cycle and skipped when the
component is gone by then.
"""

import asyncio

import pytest

from composer.kernel.errors import AddressingSkip
from composer.kernel.nodes import activate, iter_nodes
from composer.kernel.session import PreviewSession
from composer.kernel.types import ComponentDefinition, Document, PageDefinition

LINK_SOURCE = """
const props = { target: '/pricing' };
export default function Cta() {
  return <div><a href={props.target}>Pricing</a></div>;
}
"""
THROWING_SOURCE = "export default function Bad() { throw new Error('nope'); }"


def definition(component_id="cta", source=LINK_SOURCE):
    return ComponentDefinition(id=component_id, source_text=source)


# ============================================================================
# Deferred addressing
# ============================================================================


class TestDeferredAddressing:
    @pytest.mark.asyncio
    async def test_addressing_runs_next_cycle(self):
        """Handles appear only after the loop turns once."""
        session = PreviewSession()
        session.render_component(definition())
        session.schedule_addressing("cta")
        assert "cta" not in session.handles
        await asyncio.sleep(0)
        assert [h.element_type for h in session.handles["cta"]] == ["container", "link"]

    @pytest.mark.asyncio
    async def test_removed_component_is_skipped(self):
        """A component removed before the deferred pass is not addressed."""
        session = PreviewSession()
        session.render_component(definition())
        session.schedule_addressing("cta")
        session.remove_component("cta")
        await asyncio.sleep(0)
        assert "cta" not in session.handles

    @pytest.mark.asyncio
    async def test_cancelled_handle(self):
        session = PreviewSession()
        session.render_component(definition())
        handle = session.schedule_addressing("cta")
        handle.cancel()
        await asyncio.sleep(0)
        assert "cta" not in session.handles

    def test_schedule_needs_running_loop(self):
        session = PreviewSession()
        with pytest.raises(RuntimeError):
            session.schedule_addressing("cta")


class TestAddress:
    def test_missing_component_raises_skip(self):
        with pytest.raises(AddressingSkip):
            PreviewSession().address("nothing")

    def test_failed_render_raises_skip(self):
        """Error placeholders are not addressable."""
        session = PreviewSession()
        session.render_component(definition("bad", THROWING_SOURCE))
        with pytest.raises(AddressingSkip):
            session.address("bad")

    def test_new_commit_invalidates_handles(self):
        session = PreviewSession()
        session.render_component(definition())
        session.address("cta")
        session.render_component(definition())
        assert "cta" not in session.handles


# ============================================================================
# Navigation and lifecycle
# ============================================================================


class TestSessionNavigation:
    def test_links_dispatch_to_session_callback(self):
        visited = []
        session = PreviewSession(navigate=visited.append)
        result = session.render_component(definition())
        link = next(n for n in iter_nodes(result.nodes) if n.tag == "a")
        activate(link)
        assert visited == ["/pricing"]

    def test_closed_session_drops_navigation(self):
        """After close, activating a stale tree navigates nowhere."""
        visited = []
        session = PreviewSession(navigate=visited.append)
        result = session.render_component(definition())
        session.close()
        activate(next(n for n in iter_nodes(result.nodes) if n.tag == "a"))
        assert visited == []
        assert session.closed
        assert session.instantiator.cache_size == 0

    def test_render_page_commits_every_component(self):
        session = PreviewSession()
        document = Document(
            id="d",
            pages=[PageDefinition(id="p", components=[definition("one"), definition("two", THROWING_SOURCE)])],
        )
        session.render_page(document)
        assert session.committed("one").ok
        assert not session.committed("two").ok
