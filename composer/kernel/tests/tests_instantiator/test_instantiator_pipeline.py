"""
Composer Kernel -- Instantiator Pipeline Tests

Preprocessing, the TSX front end and the full render path for components
that instantiate successfully, including navigation through the injected
shim and the render cache.
"""

import pytest

from composer.kernel.errors import TransformFailure
from composer.kernel.instantiator import ComponentInstantiator, render_component
from composer.kernel.nodes import Node, activate, iter_nodes, to_html
from composer.kernel.preprocess import (
    NAVIGATION_SHIM,
    detect_component_name,
    inject_navigation_shim,
    preprocess_source,
    remove_imports,
    rewrite_links,
)
from composer.kernel.tsx_parser import parse_program
from composer.kernel.types import RENDERED, ComponentDefinition, RenderOptions

HERO_SOURCE = """
import React from 'react';
import './hero.css';

const props = { title: 'Hello', items: ['a', 'b'] };

export default function Hero() {
  return (
    <section className="hero">
      <h1>{props.title}</h1>
      <ul>{props.items.map((item, i) => <li key={i}>{item}</li>)}</ul>
    </section>
  );
}
"""

NAV_SOURCE = """
const props = { link: '/about' };

export default function Nav() {
  return <a href={props.link} className="nav">About</a>;
}
"""


def definition(source, component_id="c1", component_type="Custom"):
    return ComponentDefinition(id=component_id, type=component_type, source_text=source)


def find_by_tag(nodes, tag):
    return next(n for n in iter_nodes(nodes) if n.tag == tag)


# ============================================================================
# Preprocessing
# ============================================================================


class TestPreprocess:
    def test_shim_injected_before_first_component(self):
        """The navigation shim lands before the first capitalized declaration."""
        result = preprocess_source(NAV_SOURCE)
        assert NAVIGATION_SHIM in result.code
        assert result.code.index("handleNavigation = (e, path)") < result.code.index("function Nav")
        assert result.code.index("const props") < result.code.index("handleNavigation = (e, path)")

    def test_shim_not_injected_twice(self):
        """Running the preprocessor over its own output keeps one shim."""
        once = preprocess_source(NAV_SOURCE).code
        assert preprocess_source(once).code.count("const handleNavigation") == 1

    def test_dynamic_links_rewritten(self):
        """href={expr} routes through the shim; static hrefs are left alone."""
        code = rewrite_links('<a href={item.path}>x</a><a href="/static">y</a>')
        assert 'href="#" data-path={item.path} onClick={(e) => handleNavigation(e, item.path)}' in code
        assert 'href="/static"' in code

    def test_imports_removed_except_styles(self):
        """Module imports are commented out; stylesheet imports survive."""
        code = remove_imports("import React, { useState } from 'react';\nimport './a.css';\n")
        assert "// import React, { useState } from 'react'; - removed for dynamic evaluation" in code
        assert "\nimport './a.css';" in code

    def test_component_name_detection(self):
        """Default-export names are found in both declaration and trailing forms."""
        assert detect_component_name("export default function Hero() {}", "Fallback") == "Hero"
        assert detect_component_name("const Card = () => null;\nexport default Card;", "Fallback") == "Card"
        assert detect_component_name("const x = 1;", "Fallback") == "Fallback"

    def test_anonymous_default_export_gets_fallback_name(self):
        """An anonymous default export is bound to the fallback name."""
        result = preprocess_source("export default () => <div />;", "DynamicComponent")
        assert result.component_name == "DynamicComponent"
        assert "const DynamicComponent = () =>" in result.code
        assert "export" not in result.code

    def test_anonymous_default_export_gets_shim(self):
        result = preprocess_source("export default () => <a href={'/x'}>x</a>;")
        assert NAVIGATION_SHIM in result.code
        assert result.code.index("handleNavigation = ") < result.code.index("const DynamicComponent = ")

    def test_shim_without_declaration_goes_first(self):
        """Source with nothing to anchor on still gets the shim at program scope."""
        assert inject_navigation_shim("const x = 1;").startswith(NAVIGATION_SHIM)


# ============================================================================
# TSX front end
# ============================================================================


class TestParser:
    def test_syntax_error_reports_position(self):
        """Malformed source raises TransformFailure with a line and column."""
        with pytest.raises(TransformFailure) as info:
            parse_program("const X = () => <div>;\n")
        assert info.value.message.startswith("Syntax error at line ")

    def test_class_components_rejected(self):
        """Class syntax is refused before evaluation."""
        with pytest.raises(TransformFailure) as info:
            parse_program("class Widget extends React.Component { render() { return null; } }")
        assert "class declarations" in info.value.message

    def test_async_syntax_accepted(self):
        """async functions and await parse without a transform failure."""
        program = parse_program("const load = async () => { await Promise.resolve(1); };\nasync function Later() { return await load(); }")
        assert program.top_level_names == ["load", "Later"]

    def test_top_level_names(self):
        """Top-level declarations are recorded in order."""
        program = parse_program("const a = 1;\nfunction Card() { return null; }\nlet B = 2;")
        assert program.top_level_names == ["a", "Card", "B"]


# ============================================================================
# Rendering
# ============================================================================


class TestRender:
    def test_renders_node_tree(self):
        """A valid component renders through the factory into nodes."""
        result = render_component(definition(HERO_SOURCE))
        assert result.state == RENDERED
        assert result.ok
        assert to_html(result.nodes) == '<section class="hero"><h1>Hello</h1><ul><li>a</li><li>b</li></ul></section>'

    def test_overrides_reach_the_component(self):
        """Render overrides replace the authored literal's values."""
        result = render_component(definition(HERO_SOURCE), overrides={"title": "Changed"})
        assert find_by_tag(result.nodes, "h1").text_content() == "Changed"

    def test_destructured_component_props(self):
        """Function components receive the merged properties as their argument."""
        source = "export default function Card({ heading = 'Untitled', count }) { return <div>{heading} ({count})</div>; }"
        result = render_component(definition(source), overrides={"count": 3})
        assert to_html(result.nodes) == "<div>Untitled (3)</div>"

    def test_nested_custom_components(self):
        """Capitalized tags resolve to components declared in the same source."""
        source = """
        const Badge = ({ label, children }) => <span className="badge">{label}{children}</span>;
        export default function Card() {
          return <div><Badge label="New">!</Badge></div>;
        }
        """
        result = render_component(definition(source))
        assert to_html(result.nodes) == '<div><span class="badge">New!</span></div>'

    def test_null_return_renders_nothing(self):
        """A component that returns null renders an empty tree without error."""
        result = render_component(definition("export default function Hidden() { return null; }"))
        assert result.state == RENDERED
        assert result.ok
        assert result.nodes == []

    def test_first_capitalized_function_is_the_fallback(self):
        """Without a default export, the first capitalized top-level function renders."""
        source = "const helper = () => 'x';\nfunction Panel() { return <p>{helper()}</p>; }"
        assert to_html(render_component(definition(source)).nodes) == "<p>x</p>"


# ============================================================================
# Navigation
# ============================================================================


class TestNavigation:
    def test_link_activation_calls_navigate(self):
        """Activating a rewritten link prevents default and calls the capability."""
        visited = []
        result = render_component(definition(NAV_SOURCE), navigate=visited.append)
        link = find_by_tag(result.nodes, "a")
        assert link.props["data-path"] == "/about"
        assert link.props["href"] == "#"
        event = activate(link)
        assert visited == ["/about"]
        assert event["defaultPrevented"] is True

    def test_anonymous_export_links_navigate(self):
        """Links in an anonymous default export reach the capability too."""
        visited = []
        source = "export default () => <a href={'/x'}>x</a>;"
        result = render_component(definition(source), navigate=visited.append)
        assert result.ok
        activate(find_by_tag(result.nodes, "a"))
        assert visited == ["/x"]

    def test_without_capability_activation_is_inert(self):
        """With no navigate capability the handler still prevents default."""
        result = render_component(definition(NAV_SOURCE))
        event = activate(find_by_tag(result.nodes, "a"))
        assert event["defaultPrevented"] is True

    def test_handlers_not_serialized(self):
        """onClick handlers never reach serialized markup."""
        html = to_html(render_component(definition(NAV_SOURCE)).nodes)
        assert html == '<a href="#" data-path="/about" class="nav">About</a>'


# ============================================================================
# Cache
# ============================================================================


class TestCache:
    def test_repeat_render_hits_cache(self):
        """Identical source and properties are rendered once."""
        instantiator = ComponentInstantiator()
        first = instantiator.render(definition(HERO_SOURCE))
        second = instantiator.render(definition(HERO_SOURCE))
        assert instantiator.cache_size == 1
        assert to_html(first.nodes) == to_html(second.nodes)

    def test_cached_trees_are_independent(self):
        """Mutating a returned tree does not leak into later renders."""
        instantiator = ComponentInstantiator()
        first = instantiator.render(definition(HERO_SOURCE))
        first.nodes[0].props["className"] = "mutated"
        second = instantiator.render(definition(HERO_SOURCE))
        assert isinstance(second.nodes[0], Node)
        assert second.nodes[0].props["className"] == "hero"

    def test_different_properties_are_different_entries(self):
        """The merged property object is part of the cache key."""
        instantiator = ComponentInstantiator()
        instantiator.render(definition(HERO_SOURCE))
        instantiator.render(definition(HERO_SOURCE), overrides={"title": "Other"})
        assert instantiator.cache_size == 2

    def test_cache_is_bounded(self):
        """Least recently used entries are evicted past the configured size."""
        instantiator = ComponentInstantiator(options=RenderOptions(cache_size=1))
        instantiator.render(definition(HERO_SOURCE))
        instantiator.render(definition(HERO_SOURCE), overrides={"title": "Other"})
        assert instantiator.cache_size == 1
        instantiator.clear_cache()
        assert instantiator.cache_size == 0
