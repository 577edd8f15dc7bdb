"""
Composer Kernel -- Object-Literal Grammar Tests

Parsing the literals authors actually write, bracket matching that ignores
strings and comments, and formatting values back into the same subset.
"""

import pytest

from composer.kernel.errors import ParseFailure
from composer.kernel.literal import find_balanced, format_literal, parse_literal, strip_comments

# ============================================================================
# parse_literal
# ============================================================================


class TestParseLiteral:
    def test_strict_json(self):
        """Plain JSON parses on the first pass."""
        assert parse_literal('{"a": 1, "b": [true, null]}') == {"a": 1, "b": [True, None]}

    def test_object_literal_subset(self):
        """Single quotes, unquoted keys, comments and trailing commas are accepted."""
        text = "{ title: 'Hello', count: 3, // note\n tags: ['a', 'b',], }"
        assert parse_literal(text) == {"title": "Hello", "count": 3, "tags": ["a", "b"]}

    def test_undefined_becomes_none(self):
        """`undefined` reads as a missing value."""
        assert parse_literal("{ a: undefined }") == {"a": None}

    def test_template_string_without_substitution(self):
        """Backtick strings without `${}` are plain strings."""
        assert parse_literal("{ a: `x y` }") == {"a": "x y"}

    def test_negative_and_float_numbers(self):
        """Signed and fractional numbers keep their values."""
        assert parse_literal("{ a: -2, b: 1.5, c: 0x10 }") == {"a": -2, "b": 1.5, "c": 16}

    def test_nested_structured_entries(self):
        """Structured property entries parse into nested dicts."""
        text = "{ title: { type: 'text', value: 'Hi', label: 'Title', editable: true } }"
        assert parse_literal(text) == {"title": {"type": "text", "value": "Hi", "label": "Title", "editable": True}}

    def test_unparsable_raises_parse_failure(self):
        """When every pass fails the caller gets a ParseFailure with per-pass detail."""
        with pytest.raises(ParseFailure) as info:
            parse_literal("{ a: b c d")
        assert "json" in info.value.detail
        assert info.value.stage == "parse"


# ============================================================================
# Bracket matching
# ============================================================================


class TestFindBalanced:
    def test_ignores_brackets_inside_strings(self):
        """A closing brace inside a string does not close the block."""
        text = '{ a: "}", b: { c: 1 } } tail'
        assert find_balanced(text, 0) == text.index("} tail")

    def test_ignores_brackets_inside_comments(self):
        """Braces in comments are skipped."""
        text = "{ a: 1 // }\n }"
        assert find_balanced(text, 0) == len(text) - 1

    def test_unbalanced_returns_minus_one(self):
        """An unclosed block yields -1."""
        assert find_balanced("{ a: 1", 0) == -1

    def test_non_bracket_start_returns_minus_one(self):
        """Starting anywhere but a bracket yields -1."""
        assert find_balanced("abc", 0) == -1


class TestStripComments:
    def test_keeps_comment_markers_inside_strings(self):
        """`//` inside a string literal is content, not a comment."""
        assert strip_comments("a: 'http://x' // gone") == "a: 'http://x' "


# ============================================================================
# format_literal
# ============================================================================


class TestFormatLiteral:
    def test_identifier_keys_are_unquoted(self):
        """Identifier keys are written bare, others are quoted."""
        assert format_literal({"title": "Hi", "data-x": 1}) == '{\n  title: "Hi",\n  "data-x": 1\n}'

    def test_empty_containers(self):
        """Empty dicts and lists print compactly."""
        assert format_literal({"a": {}, "b": []}) == "{\n  a: {},\n  b: []\n}"

    def test_formatted_text_parses_back(self):
        """Formatted output reads back to the same value."""
        value = {"title": "Hello", "items": [{"name": "a", "on": True}], "count": 2, "ratio": 0.5}
        assert parse_literal(format_literal(value)) == value
