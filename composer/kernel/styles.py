"""
Composer Kernel: Style Attribute Mapper

Maps a structured style description to atomic utility-class tokens. Every
category has an independent, total, pure mapper: an unrecognized value yields
"". Entries whose category is not mapped pass through as residual inline
styles.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from typing import Any

# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------

PALETTE: tuple[str, ...] = (
    "slate",
    "gray",
    "zinc",
    "neutral",
    "stone",
    "red",
    "orange",
    "amber",
    "yellow",
    "lime",
    "green",
    "emerald",
    "teal",
    "cyan",
    "sky",
    "blue",
    "indigo",
    "violet",
    "purple",
    "fuchsia",
    "pink",
    "rose",
)
SHADES: tuple[str, ...] = ("50", "100", "200", "300", "400", "500", "600", "700", "800", "900", "950")
RESERVED_COLORS: set[str] = {"white", "black", "transparent", "current", "inherit"}

SPACING_SCALE: set[str] = {
    "0", "px", "0.5", "1", "1.5", "2", "2.5", "3", "3.5", "4", "5", "6", "7", "8", "9", "10", "11",
    "12", "14", "16", "20", "24", "28", "32", "36", "40", "44", "48", "52", "56", "60", "64", "72",
    "80", "96",
}  # fmt: skip
SPACING_BUCKETS: dict[str, str] = {"none": "0", "small": "2", "medium": "4", "large": "8", "xlarge": "12"}

TEXT_ALIGN: set[str] = {"left", "center", "right", "justify", "start", "end"}

FONT_SIZES: tuple[str, ...] = ("xs", "sm", "base", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl", "7xl", "8xl", "9xl")
FONT_SIZE_BUCKETS: dict[str, str] = {"small": "sm", "medium": "base", "normal": "base", "large": "lg", "xlarge": "xl"}

FONT_WEIGHTS: dict[str, str] = {
    "thin": "thin",
    "extralight": "extralight",
    "light": "light",
    "normal": "normal",
    "regular": "normal",
    "medium": "medium",
    "semibold": "semibold",
    "bold": "bold",
    "extrabold": "extrabold",
    "black": "black",
    "100": "thin",
    "200": "extralight",
    "300": "light",
    "400": "normal",
    "500": "medium",
    "600": "semibold",
    "700": "bold",
    "800": "extrabold",
    "900": "black",
}

BORDER_RADIUS: dict[str, str] = {
    "none": "rounded-none",
    "small": "rounded-sm",
    "medium": "rounded-md",
    "large": "rounded-lg",
    "xlarge": "rounded-xl",
    "full": "rounded-full",
    "default": "rounded",
    "sm": "rounded-sm",
    "md": "rounded-md",
    "lg": "rounded-lg",
    "xl": "rounded-xl",
    "2xl": "rounded-2xl",
    "3xl": "rounded-3xl",
}

SHADOWS: dict[str, str] = {
    "none": "shadow-none",
    "small": "shadow-sm",
    "medium": "shadow-md",
    "large": "shadow-lg",
    "xlarge": "shadow-xl",
    "inner": "shadow-inner",
    "default": "shadow",
    "sm": "shadow-sm",
    "md": "shadow-md",
    "lg": "shadow-lg",
    "xl": "shadow-xl",
    "2xl": "shadow-2xl",
}

BORDER_WIDTHS: dict[str, str] = {"0": "border-0", "1": "border", "default": "border", "2": "border-2", "4": "border-4", "8": "border-8"}

SIZE_KEYWORDS: dict[str, str] = {
    "full": "full",
    "auto": "auto",
    "screen": "screen",
    "fit": "fit",
    "min": "min",
    "max": "max",
    "half": "1/2",
    "third": "1/3",
    "quarter": "1/4",
    "1/2": "1/2",
    "1/3": "1/3",
    "2/3": "2/3",
    "1/4": "1/4",
    "3/4": "3/4",
}

MAX_WIDTHS: set[str] = {
    "none", "xs", "sm", "md", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl", "7xl", "full", "prose",
    "screen-sm", "screen-md", "screen-lg", "screen-xl", "screen-2xl",
}  # fmt: skip

DISPLAYS: dict[str, str] = {
    "block": "block",
    "inline": "inline",
    "inline-block": "inline-block",
    "flex": "flex",
    "inline-flex": "inline-flex",
    "grid": "grid",
    "inline-grid": "inline-grid",
    "hidden": "hidden",
    "none": "hidden",
    "contents": "contents",
    "table": "table",
}


# ---------------------------------------------------------------------------
# Per-category mappers
# ---------------------------------------------------------------------------


def _normalize(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return " ".join(str(value).split()).lower()


def _color_name(raw: str) -> str:
    raw = raw.replace(" ", "-")
    if raw in RESERVED_COLORS:
        return raw
    if raw in PALETTE:
        return f"{raw}-500"
    base, _, shade = raw.rpartition("-")
    if base in PALETTE and shade in SHADES:
        return raw
    return ""


def color_token(prefix: str, value: Any) -> str:
    """`blue`, `blue-700`, `blue 700`, `white` or `<prefix>-blue-700` → token."""
    raw = _normalize(value)
    if not raw:
        return ""
    if raw.startswith(prefix + "-"):
        return raw if _color_name(raw[len(prefix) + 1 :]) else ""
    name = _color_name(raw)
    return f"{prefix}-{name}" if name else ""


def spacing_token(prefix: str, value: Any) -> str:
    raw = _normalize(value)
    if not raw:
        return ""
    raw = SPACING_BUCKETS.get(raw, raw)
    if raw.startswith(prefix + "-"):
        raw = raw[len(prefix) + 1 :]
    if raw in SPACING_SCALE or (raw == "auto" and prefix.startswith("m")):
        return f"{prefix}-{raw}"
    return ""


def text_align_token(value: Any) -> str:
    raw = _normalize(value)
    if raw.startswith("text-"):
        raw = raw[5:]
    return f"text-{raw}" if raw in TEXT_ALIGN else ""


def font_size_token(value: Any) -> str:
    raw = _normalize(value)
    if raw.startswith("text-"):
        raw = raw[5:]
    raw = FONT_SIZE_BUCKETS.get(raw, raw)
    return f"text-{raw}" if raw in FONT_SIZES else ""


def font_weight_token(value: Any) -> str:
    raw = _normalize(value)
    if raw.startswith("font-"):
        raw = raw[5:]
    weight = FONT_WEIGHTS.get(raw)
    return f"font-{weight}" if weight else ""


def _vocabulary_token(table: dict[str, str], value: Any) -> str:
    raw = _normalize(value)
    if raw in table:
        return table[raw]
    # already-resolved tokens pass through
    return raw if raw and raw in table.values() else ""


def size_token(prefix: str, value: Any) -> str:
    raw = _normalize(value)
    if raw.startswith(prefix + "-"):
        raw = raw[len(prefix) + 1 :]
    if raw in SIZE_KEYWORDS:
        return f"{prefix}-{SIZE_KEYWORDS[raw]}"
    if raw in SPACING_SCALE:
        return f"{prefix}-{raw}"
    return ""


def max_width_token(value: Any) -> str:
    raw = _normalize(value)
    if raw.startswith("max-w-"):
        raw = raw[6:]
    if raw == "screen":
        raw = "screen-xl"
    return f"max-w-{raw}" if raw in MAX_WIDTHS else ""


def class_list_tokens(value: Any) -> str:
    return " ".join(str(value).split()) if isinstance(value, str) else ""


CATEGORY_MAPPERS: dict[str, Callable[[Any], str]] = {
    "tailwindClasses": class_list_tokens,
    "className": class_list_tokens,
    "backgroundColor": partial(color_token, "bg"),
    "bgColor": partial(color_token, "bg"),
    "textColor": partial(color_token, "text"),
    "color": partial(color_token, "text"),
    "borderColor": partial(color_token, "border"),
    "padding": partial(spacing_token, "p"),
    "paddingX": partial(spacing_token, "px"),
    "paddingY": partial(spacing_token, "py"),
    "paddingTop": partial(spacing_token, "pt"),
    "paddingRight": partial(spacing_token, "pr"),
    "paddingBottom": partial(spacing_token, "pb"),
    "paddingLeft": partial(spacing_token, "pl"),
    "margin": partial(spacing_token, "m"),
    "marginX": partial(spacing_token, "mx"),
    "marginY": partial(spacing_token, "my"),
    "marginTop": partial(spacing_token, "mt"),
    "marginRight": partial(spacing_token, "mr"),
    "marginBottom": partial(spacing_token, "mb"),
    "marginLeft": partial(spacing_token, "ml"),
    "gap": partial(spacing_token, "gap"),
    "textAlign": text_align_token,
    "fontSize": font_size_token,
    "fontWeight": font_weight_token,
    "borderRadius": partial(_vocabulary_token, BORDER_RADIUS),
    "shadow": partial(_vocabulary_token, SHADOWS),
    "borderWidth": partial(_vocabulary_token, BORDER_WIDTHS),
    "width": partial(size_token, "w"),
    "height": partial(size_token, "h"),
    "maxWidth": max_width_token,
    "display": partial(_vocabulary_token, DISPLAYS),
}


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


@dataclass
class StyleResolution:
    class_tokens: str = ""
    residual_styles: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"class_tokens": self.class_tokens, "residual_styles": dict(self.residual_styles)}


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def resolve_style_tokens(style_map: dict[str, Any] | None) -> StyleResolution:
    if not isinstance(style_map, dict):
        return StyleResolution()
    tokens: list[str] = []
    residual: dict[str, str] = {}
    for category, value in style_map.items():
        mapper = CATEGORY_MAPPERS.get(category)
        if mapper is None:
            if value is not None and value != "":
                residual[category] = _stringify(value)
            continue
        for token in mapper(value).split():
            if token and token not in tokens:
                tokens.append(token)
    return StyleResolution(class_tokens=" ".join(tokens), residual_styles=residual)
