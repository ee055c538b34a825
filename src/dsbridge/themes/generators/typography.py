"""
Typography token generation.

The type scale is geometric: ``size = base_size * ratio ** exponent`` with
named steps at fixed exponents (``md`` is the base size). Line height and
letter spacing are derived from the computed size, so larger text comes
out tighter.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dsbridge.core.errors import TokenError
from dsbridge.themes.generators.base import BREAKPOINTS, CategoryGenerator
from dsbridge.themes.token_transforms import format_number

SCALE_EXPONENTS = {"xs": -2, "sm": -1, "md": 0, "lg": 1, "xl": 2, "2xl": 3, "3xl": 4, "4xl": 5}

LINE_HEIGHT_RATIOS = {"body": 1.5, "heading": 1.2, "display": 1.1, "code": 1.4}

RESPONSIVE_MULTIPLIERS = {"sm": 0.875, "md": 1.0, "lg": 1.125, "xl": 1.25}

HEADING_LEVELS = ("h1", "h2", "h3", "h4", "h5", "h6")
DISPLAY_SIZES = ("sm", "md", "lg", "xl")


def px(value: float) -> str:
    return f"{format_number(value)}px"


def line_height(font_size: float, kind: str = "body") -> str:
    """Unitless line height: tighter above 24px, looser below 14px."""
    ratio = LINE_HEIGHT_RATIOS.get(kind, LINE_HEIGHT_RATIOS["body"])
    if font_size > 24:
        ratio *= 0.9
    elif font_size < 14:
        ratio *= 1.1
    return format_number(ratio)


def letter_spacing(font_size: float, tight: bool = False) -> str:
    """Negative tracking for large (or explicitly tight) text, slight positive below 14px."""
    if tight or font_size > 24:
        return f"{format_number(-0.025 * font_size / 16)}em"
    if font_size < 14:
        return "0.01em"
    return "normal"


def font_family(definition: Any) -> str:
    """A family is a string, ``{stack: [...]}``, or ``{primary, fallbacks}``."""
    if isinstance(definition, str):
        return definition
    if isinstance(definition, Mapping):
        if "stack" in definition:
            return ", ".join(definition["stack"])
        if "primary" in definition:
            return ", ".join([definition["primary"], *definition.get("fallbacks", [])])
        return str(definition.get("value", ""))
    raise TokenError(f"Invalid font family definition: {definition!r}")


def text_style(font_size: float, weight: str, kind: str, tight: bool = False) -> dict[str, str]:
    return {
        "fontSize": px(font_size),
        "fontWeight": weight,
        "lineHeight": line_height(font_size, kind),
        "letterSpacing": letter_spacing(font_size, tight),
    }


class TypographyGenerator(CategoryGenerator):
    category = "typography"
    default_options = {
        "generate_scale": True,
        "generate_semantics": True,
        "generate_responsive": True,
        "base_size": 16,
        "scale_ratio": 1.25,
    }

    def build(self, config: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
        typography: dict[str, Any] = {}
        scale_config = config.get("scale")
        if scale_config is True:
            scale_config = {}
        base_size = float((scale_config or {}).get("baseSize") or options["base_size"])

        base = config.get("base") or {}
        if "fontFamilies" in base:
            typography["fontFamilies"] = {
                name: font_family(value) for name, value in base["fontFamilies"].items()
            }
        for key in ("fontWeights", "lineHeights", "letterSpacing"):
            if key in base:
                typography[key] = base[key]

        if options["generate_scale"] and scale_config is not None:
            typography["scale"] = self.type_scale(scale_config, base_size, options)

        semantic = config.get("semantic")
        if options["generate_semantics"] and semantic:
            typography.update(self.semantic_styles(semantic, base_size))

        if options["generate_responsive"] and "scale" in typography:
            typography["responsive"] = {
                bp: {"scale": self.scaled(typography["scale"], RESPONSIVE_MULTIPLIERS[bp])}
                for bp in BREAKPOINTS
            }

        return typography

    def type_scale(
        self, scale_config: Mapping[str, Any], base_size: float, options: dict[str, Any]
    ) -> dict[str, dict[str, str]]:
        ratio = float(scale_config.get("ratio") or options["scale_ratio"])
        exponents = scale_config.get("steps") or SCALE_EXPONENTS
        scale = {}
        for name, exponent in exponents.items():
            size = base_size * ratio**exponent
            scale[name] = {
                "fontSize": px(size),
                "lineHeight": line_height(size),
                "letterSpacing": letter_spacing(size),
            }
        return scale

    def semantic_styles(self, semantic: Mapping[str, Any], base_size: float) -> dict[str, Any]:
        styles: dict[str, Any] = {}

        if semantic.get("headings"):
            weight = str(_section(semantic, "headings").get("fontWeight", "600"))
            styles["headings"] = {}
            for i, level in enumerate(HEADING_LEVELS):
                size = base_size * 1.2 ** (len(HEADING_LEVELS) - i - 1)
                styles["headings"][level] = {
                    **text_style(size, weight, "heading"),
                    "marginBottom": px(base_size * 0.5),
                }

        if semantic.get("body"):
            weight = str(_section(semantic, "body").get("fontWeight", "400"))
            styles["body"] = {
                "default": text_style(base_size, weight, "body"),
                "large": text_style(base_size * 1.125, weight, "body"),
                "small": text_style(base_size * 0.875, weight, "body"),
            }

        if semantic.get("display"):
            weight = str(_section(semantic, "display").get("fontWeight", "700"))
            styles["display"] = {
                size_name: text_style(base_size * 1.5 ** (i + 2), weight, "display", tight=True)
                for i, size_name in enumerate(DISPLAY_SIZES)
            }

        if semantic.get("code"):
            code = _section(semantic, "code")
            family = code.get("fontFamily", "monospace")
            weight = str(code.get("fontWeight", "400"))
            size = base_size * 0.875
            styles["code"] = {
                "inline": {
                    "fontSize": px(size),
                    "fontFamily": family,
                    "fontWeight": weight,
                    "lineHeight": "1",
                    "letterSpacing": "0",
                },
                "block": {
                    "fontSize": px(size),
                    "fontFamily": family,
                    "fontWeight": weight,
                    "lineHeight": line_height(size, "code"),
                    "letterSpacing": "0",
                },
            }

        return styles

    def scaled(self, scale: dict[str, dict[str, str]], multiplier: float) -> dict[str, Any]:
        """Scale font sizes and line heights of a type scale for one breakpoint."""
        result = {}
        for name, style in scale.items():
            step = dict(style)
            step["fontSize"] = px(float(style["fontSize"].removesuffix("px")) * multiplier)
            step["lineHeight"] = format_number(float(style["lineHeight"]) * multiplier)
            result[name] = step
        return result


def _section(semantic: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Semantic sections may be ``True`` or a mapping of overrides."""
    value = semantic.get(key)
    return value if isinstance(value, Mapping) else {}
