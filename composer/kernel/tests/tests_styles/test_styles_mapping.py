"""
Composer Kernel -- Style Attribute Mapper Tests

Each category mapper is total: unknown values yield "" and never raise.
Resolution joins tokens with single spaces, drops duplicates and passes
unmapped categories through as residual inline styles.
"""

import pytest

from composer.kernel.styles import (
    CATEGORY_MAPPERS,
    color_token,
    font_size_token,
    font_weight_token,
    resolve_style_tokens,
    spacing_token,
    text_align_token,
)

JUNK_VALUES = [None, "", "   ", "not-a-value", 17.25, True, ["bg-red-500"], {"a": 1}, "#zzzzzz"]


# ============================================================================
# Per-category mappers
# ============================================================================


class TestColorTokens:
    def test_palette_name_gets_default_shade(self):
        """A bare palette name maps to its 500 shade."""
        assert color_token("bg", "blue") == "bg-blue-500"

    def test_explicit_shade(self):
        """Name-shade pairs keep their shade, in either spelling."""
        assert color_token("bg", "blue-700") == "bg-blue-700"
        assert color_token("text", "Blue 700") == "text-blue-700"

    def test_reserved_colors(self):
        """white, black and friends have no shade."""
        assert color_token("text", "white") == "text-white"

    def test_already_prefixed(self):
        """A value that is already a token passes through."""
        assert color_token("bg", "bg-rose-100") == "bg-rose-100"

    def test_unknown_color(self):
        """Hex and unknown names yield nothing."""
        assert color_token("bg", "#ff0000") == ""
        assert color_token("bg", "chartreuse") == ""


class TestScalarTokens:
    def test_spacing_buckets_and_scale(self):
        """Named buckets and raw scale steps both map."""
        assert spacing_token("p", "medium") == "p-4"
        assert spacing_token("px", 6) == "px-6"
        assert spacing_token("m", "auto") == "m-auto"
        assert spacing_token("p", "auto") == ""

    def test_text_align(self):
        assert text_align_token("center") == "text-center"
        assert text_align_token("diagonal") == ""

    def test_font_size(self):
        assert font_size_token("large") == "text-lg"
        assert font_size_token("4xl") == "text-4xl"

    def test_font_weight(self):
        """Numeric weights map to names."""
        assert font_weight_token(700) == "font-bold"
        assert font_weight_token("semibold") == "font-semibold"


class TestTotality:
    @pytest.mark.parametrize("category", sorted(CATEGORY_MAPPERS))
    def test_mapper_never_raises_on_junk(self, category):
        """Every mapper returns a string for any input."""
        mapper = CATEGORY_MAPPERS[category]
        for value in JUNK_VALUES:
            assert isinstance(mapper(value), str)


# ============================================================================
# resolve_style_tokens
# ============================================================================


class TestResolve:
    def test_tokens_in_map_order(self):
        """Tokens follow the style map's key order."""
        result = resolve_style_tokens(
            {"backgroundColor": "blue", "padding": "large", "textAlign": "center", "fontWeight": "bold"}
        )
        assert result.class_tokens == "bg-blue-500 p-8 text-center font-bold"
        assert result.residual_styles == {}

    def test_unrecognized_values_are_dropped(self):
        """A known category with an unknown value contributes nothing and leaves no gap."""
        result = resolve_style_tokens({"backgroundColor": "#123456", "padding": "small", "shadow": "enormous"})
        assert result.class_tokens == "p-2"
        assert "  " not in result.class_tokens

    def test_unmapped_categories_become_residual(self):
        """Categories without a mapper pass through as inline styles."""
        result = resolve_style_tokens({"backgroundImage": "url(/a.png)", "opacity": 0.5, "zIndex": 10.0})
        assert result.class_tokens == ""
        assert result.residual_styles == {"backgroundImage": "url(/a.png)", "opacity": "0.5", "zIndex": "10"}

    def test_duplicates_removed(self):
        """Tokens produced twice appear once."""
        result = resolve_style_tokens({"backgroundColor": "red", "bgColor": "red", "className": "bg-red-500 flex"})
        assert result.class_tokens == "bg-red-500 flex"

    def test_empty_and_invalid_input(self):
        """None, non-dicts and empty maps resolve to nothing."""
        for style_map in (None, {}, "bg-red-500", []):
            result = resolve_style_tokens(style_map)
            assert result.class_tokens == ""
            assert result.residual_styles == {}

    def test_whitespace_is_single_spaced(self):
        """Tokens are joined by exactly one space, with no leading or trailing space."""
        result = resolve_style_tokens({"className": "  flex   gap-2 ", "padding": None, "margin": "4"})
        assert result.class_tokens == "flex gap-2 m-4"
        assert result.class_tokens == result.class_tokens.strip()
