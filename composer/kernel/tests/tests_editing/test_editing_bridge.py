"""
Composer Kernel -- Editing Bridge Tests

Panel fields follow the property schema; every edit returns a new
definition and leaves the original untouched.
"""

import pytest

from composer.kernel.editing import apply_element_edit, content_property, panel_fields, update_property
from composer.kernel.types import PROPERTY_TYPES, ComponentDefinition, ElementHandle, PropertyRecord


def make_definition():
    return ComponentDefinition(
        id="c1",
        type="Hero",
        property_schema={
            "title": PropertyRecord(type="text", value="Welcome", label="Title"),
            "subheading": PropertyRecord(type="text", value="Build faster", label="Subheading"),
            "columns": PropertyRecord(type="number", value=3, label="Columns"),
            "dark": PropertyRecord(type="boolean", value=False, label="Dark"),
            "accent": PropertyRecord(type="color", value="#336699", label="Accent"),
            "items": PropertyRecord(type="array", value=["a"], label="Items"),
            "locked": PropertyRecord(type="text", value="fixed", label="Locked", editable=False),
        },
        style_map={"padding": "small"},
    )


def handle(element_type="heading", content=None, component_id="c1"):
    return ElementHandle(element_id="c1-1", element_type=element_type, path=[0], component_id=component_id, content=content)


# ============================================================================
# Panel
# ============================================================================


class TestPanelFields:
    def test_fields_follow_schema_order(self):
        fields = panel_fields(make_definition())
        assert [f.key for f in fields] == ["title", "subheading", "columns", "dark", "accent", "items", "locked"]

    def test_widgets_by_type(self):
        widgets = {f.key: f.widget for f in panel_fields(make_definition())}
        assert widgets["title"] == "text_input"
        assert widgets["columns"] == "number_input"
        assert widgets["dark"] == "toggle"
        assert widgets["accent"] == "color_picker"
        assert widgets["items"] == "list_editor"

    def test_read_only_flag_carried(self):
        locked = next(f for f in panel_fields(make_definition()) if f.key == "locked")
        assert locked.editable is False
        assert locked.to_dict()["editable"] is False

    def test_every_property_type_has_a_widget(self):
        """Each registered type renders in the panel."""
        schema = {t: PropertyRecord(type=t, value=None, label=t) for t in PROPERTY_TYPES}
        fields = panel_fields(ComponentDefinition(id="all", property_schema=schema))
        assert len(fields) == len(PROPERTY_TYPES)

    def test_schema_derived_from_source_when_missing(self):
        definition = ComponentDefinition(id="s", source_text="const props = { heading: 'Hi' };")
        assert [f.key for f in panel_fields(definition)] == ["heading"]


# ============================================================================
# update_property
# ============================================================================


class TestUpdateProperty:
    def test_returns_new_definition(self):
        original = make_definition()
        updated = update_property(original, "title", "Hello")
        assert updated.property_schema["title"].value == "Hello"
        assert original.property_schema["title"].value == "Welcome"
        assert updated is not original

    def test_number_coercion(self):
        assert update_property(make_definition(), "columns", "4").property_schema["columns"].value == 4
        assert update_property(make_definition(), "columns", "2.5").property_schema["columns"].value == 2.5

    def test_boolean_coercion(self):
        assert update_property(make_definition(), "dark", "yes").property_schema["dark"].value is True
        assert update_property(make_definition(), "dark", "off").property_schema["dark"].value is False

    def test_array_from_literal_text(self):
        updated = update_property(make_definition(), "items", "['a', 'b']")
        assert updated.property_schema["items"].value == ["a", "b"]

    def test_bad_values_rejected(self):
        definition = make_definition()
        with pytest.raises(ValueError):
            update_property(definition, "columns", "lots")
        with pytest.raises(ValueError):
            update_property(definition, "dark", "maybe")
        with pytest.raises(ValueError):
            update_property(definition, "accent", "not a color!")
        with pytest.raises(ValueError):
            update_property(definition, "items", "{ a: 1 }")

    def test_read_only_rejected(self):
        with pytest.raises(ValueError):
            update_property(make_definition(), "locked", "changed")

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            update_property(make_definition(), "nope", "x")


# ============================================================================
# Element edits
# ============================================================================


class TestElementEdits:
    def test_content_matched_by_current_value(self):
        """The property whose value equals the element's text receives the edit."""
        schema = make_definition().property_schema
        assert content_property(schema, handle("paragraph", content="Build faster")) == "subheading"

    def test_content_matched_by_element_type(self):
        schema = make_definition().property_schema
        assert content_property(schema, handle("heading", content="Something else")) == "title"

    def test_no_backing_property(self):
        schema = make_definition().property_schema
        assert content_property(schema, handle("image")) is None

    def test_apply_content_and_styles(self):
        original = make_definition()
        updated = apply_element_edit(original, handle("heading", "Welcome"), content="Hi there", styles={"padding": "large"})
        assert updated.property_schema["title"].value == "Hi there"
        assert updated.style_map == {"padding": "large"}
        assert original.style_map == {"padding": "small"}

    def test_unbacked_content_edit_is_ignored(self):
        original = make_definition()
        updated = apply_element_edit(original, handle("image"), content="/new.png")
        assert updated.property_schema == original.property_schema

    def test_foreign_handle_rejected(self):
        with pytest.raises(ValueError):
            apply_element_edit(make_definition(), handle(component_id="other"), content="x")
