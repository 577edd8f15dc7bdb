"""
Composer Kernel -- Property Model Extractor Tests

The extractor recovers a schema from free text: a props block when present,
then the markup, then a default schema. It never raises.
"""

from composer.kernel.properties import (
    default_schema,
    extract_property_schema,
    format_property_block,
    locate_property_block,
    property_values,
    schema_for,
)
from composer.kernel.types import ComponentDefinition, PropertyRecord, format_label, infer_property_type

STRUCTURED_SOURCE = """
import React from 'react';

const props = {
  title: { type: 'text', value: 'Welcome', label: 'Heading', editable: true },
  accent: { type: 'color', value: '#ff0000' },
  count: { type: 'text', value: 3 },
};

export default function Hero() {
  return <h1>{props.title.value}</h1>;
}
"""

FLAT_SOURCE = """
const defaultProps = {
  title: "Hello",
  contactEmail: "team@example.com",
  heroImage: "https://cdn.test/hero.png",
  showBanner: true,
  columns: 3,
  items: ["a", "b"],
};

const Banner = () => <div>{defaultProps.title}</div>;
"""


# ============================================================================
# Inference and labels
# ============================================================================


class TestInference:
    def test_color(self):
        """Hex strings are colors."""
        assert infer_property_type("#1a2b3c") == "color"

    def test_email(self):
        """Strings with @ and a dot are emails."""
        assert infer_property_type("user@example.com") == "email"

    def test_image(self):
        """URLs ending in an image extension are images."""
        assert infer_property_type("https://x.test/y.png") == "image"

    def test_url(self):
        """Other http(s) URLs are urls."""
        assert infer_property_type("https://x.test/about") == "url"

    def test_boolean_and_number(self):
        """Booleans are not numbers, even though bool subclasses int."""
        assert infer_property_type(True) == "boolean"
        assert infer_property_type(42) == "number"

    def test_plain_text(self):
        """Unmatched strings are text."""
        assert infer_property_type("hello there") == "text"

    def test_containers(self):
        """Lists and dicts are array and object."""
        assert infer_property_type([1]) == "array"
        assert infer_property_type({"a": 1}) == "object"


class TestLabels:
    def test_camel_case(self):
        """backgroundColor → 'Background color'."""
        assert format_label("backgroundColor") == "Background color"

    def test_snake_case(self):
        """button_text → 'Button text'."""
        assert format_label("button_text") == "Button text"


# ============================================================================
# Structured blocks
# ============================================================================


class TestStructuredBlock:
    def test_explicit_fields_are_kept(self):
        """Declared type, value and label survive extraction."""
        schema = extract_property_schema(STRUCTURED_SOURCE)
        assert schema["title"] == PropertyRecord(type="text", value="Welcome", label="Heading", editable=True)

    def test_missing_label_is_derived(self):
        """A record without a label gets one from its key."""
        schema = extract_property_schema(STRUCTURED_SOURCE)
        assert schema["accent"].label == "Accent"
        assert schema["accent"].type == "color"

    def test_mismatched_type_is_reinferred(self):
        """A declared type the value does not fit is replaced by the inferred one."""
        schema = extract_property_schema(STRUCTURED_SOURCE)
        assert schema["count"].type == "number"
        assert schema["count"].value == 3

    def test_key_order_is_preserved(self):
        """Schema keys keep source order."""
        assert list(extract_property_schema(STRUCTURED_SOURCE)) == ["title", "accent", "count"]


class TestFlatBlock:
    def test_flat_entries_are_promoted(self):
        """Flat literals become records with inferred types and derived labels."""
        schema = extract_property_schema(FLAT_SOURCE)
        assert schema["title"] == PropertyRecord(type="text", value="Hello", label="Title")
        assert schema["contactEmail"].type == "email"
        assert schema["heroImage"].type == "image"
        assert schema["showBanner"].type == "boolean"
        assert schema["columns"].type == "number"
        assert schema["items"].type == "array"
        assert schema["contactEmail"].label == "Contact email"

    def test_default_props_assignment(self):
        """`Component.defaultProps = {...}` is a property block too."""
        source = "function Card() { return null; }\nCard.defaultProps = { caption: 'Hi' };"
        assert extract_property_schema(source)["caption"].value == "Hi"


# ============================================================================
# Fallback tiers
# ============================================================================


class TestMarkupFallback:
    def test_markup_heuristics(self):
        """Without a props block, the first heading, paragraph, button and image are used."""
        source = """
        export default function Card() {
          return (
            <div>
              <h2 className="x">Our <b>Story</b></h2>
              <p>Since 1999.</p>
              <button>Read more</button>
              <img src="/story.jpg" />
            </div>
          );
        }
        """
        schema = extract_property_schema(source)
        assert schema["title"].value == "Our Story"
        assert schema["content"].value == "Since 1999."
        assert schema["buttonText"].value == "Read more"
        assert schema["imageUrl"] == PropertyRecord(type="image", value="/story.jpg", label="Image url")

    def test_unparsable_block_falls_through_to_markup(self):
        """A block no pass can read falls back to markup heuristics."""
        source = "const props = { title: ( };\nconst X = () => <h1>Fallback</h1>;"
        assert extract_property_schema(source)["title"].value == "Fallback"

    def test_default_schema(self):
        """Nothing recognizable yields the default schema."""
        assert extract_property_schema("const x = 1;") == default_schema()

    def test_non_string_input(self):
        """Missing or non-string source never raises."""
        assert extract_property_schema(None) == default_schema()
        assert extract_property_schema("   ") == default_schema()


# ============================================================================
# Invariants
# ============================================================================


class TestInvariants:
    def test_idempotent(self):
        """Extracting twice yields identical schemas."""
        assert extract_property_schema(FLAT_SOURCE) == extract_property_schema(FLAT_SOURCE)
        assert extract_property_schema(STRUCTURED_SOURCE) == extract_property_schema(STRUCTURED_SOURCE)

    def test_round_trip_through_authored_text(self):
        """schema → authored text → schema keeps every value and type."""
        original = extract_property_schema(FLAT_SOURCE)
        text = format_property_block(original)
        assert text.startswith("const props = {")
        again = extract_property_schema(text)
        assert set(again) == set(original)
        for key, record in original.items():
            assert again[key].value == record.value
            assert again[key].type == record.type

    def test_locate_block_returns_balanced_text(self):
        """The located block spans exactly the literal."""
        block = locate_property_block("const props = { a: { b: '}' } }; rest")
        assert block == "{ a: { b: '}' } }"


class TestPropertyValues:
    def test_overrides_win(self):
        """Render overrides replace schema values."""
        schema = extract_property_schema(FLAT_SOURCE)
        values = property_values(schema, {"title": "Override"})
        assert values["title"] == "Override"
        assert values["columns"] == 3

    def test_values_are_copies(self):
        """Mutating merged values leaves the schema untouched."""
        schema = extract_property_schema(FLAT_SOURCE)
        values = property_values(schema)
        values["items"].append("c")
        assert schema["items"].value == ["a", "b"]

    def test_schema_for_rederives_from_source(self):
        """An empty stored schema is re-derived from the source text."""
        definition = ComponentDefinition(id="c1", source_text=FLAT_SOURCE)
        assert schema_for(definition)["title"].value == "Hello"
