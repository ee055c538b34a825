"""
Color token generation.

Config shape::

    {
        "base": {"white": "#ffffff", "brand": {"base": "#3b82f6"}, "gray": {"palette": "#6b7280"}},
        "palette": {"primary": "#3b82f6"},
        "semantic": {"primary": "#3b82f6", "danger": "#ef4444"},
        "transformations": {"muted": fn},
    }
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from dsbridge.core.errors import InvalidColorValue, TokenError
from dsbridge.themes.colors import (
    calculate_luminance,
    darken,
    get_lightness,
    is_color,
    lighten,
    parse_color,
    set_lightness,
)
from dsbridge.themes.generators.base import CategoryGenerator

logger = logging.getLogger(__name__)

STANDARD_SEMANTICS = ("primary", "secondary", "success", "warning", "error", "info")

HIGH_CONTRAST_STEP = 0.3
LUMINANCE_THRESHOLD = 0.5


def step_lightness(step: int) -> float:
    """Palette step to HSL lightness: 50 is near white, 900 is black."""
    return 1 - step / 900


def contrast_color(color: str) -> str:
    """Black text on light colors, white text on dark ones."""
    return "#000000" if calculate_luminance(color) > LUMINANCE_THRESHOLD else "#ffffff"


def on_color(color: str, dark_mode: bool = False) -> str:
    """Foreground for content on a colored background; inverted in dark mode."""
    light_background = calculate_luminance(color) > LUMINANCE_THRESHOLD
    if dark_mode:
        light_background = not light_background
    return "#000000" if light_background else "#ffffff"


def ensure_contrast(color: str) -> str:
    """
    Push a color across the luminance threshold.

    Dark colors are lightened and light colors darkened in fixed steps until
    the threshold flips or lightness saturates. This approximates, and does
    not guarantee, a WCAG contrast ratio.
    """
    lightening = calculate_luminance(color) < LUMINANCE_THRESHOLD
    result = color
    while True:
        adjust = lighten if lightening else darken
        result = adjust(result, HIGH_CONTRAST_STEP)
        flipped = (calculate_luminance(result) >= LUMINANCE_THRESHOLD) == lightening
        lightness = get_lightness(result)
        if flipped or lightness >= 1.0 or lightness <= 0.0:
            return result


class ColorGenerator(CategoryGenerator):
    category = "colors"
    default_options = {
        "generate_palette": True,
        "generate_semantics": True,
        "generate_accessibility": True,
        "palette_steps": [50, 100, 200, 300, 400, 500, 600, 700, 800, 900],
        "dark_mode": False,
    }

    def build(self, config: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
        colors: dict[str, Any] = {}

        for name, value in (config.get("base") or {}).items():
            colors[name] = self.base_color(value, options)

        if options["generate_palette"]:
            for name, value in (config.get("palette") or {}).items():
                colors[name] = self.color_scale(value, options)

        if options["generate_semantics"]:
            semantic = config.get("semantic") or {}
            ordered = [n for n in STANDARD_SEMANTICS if n in semantic]
            ordered += [n for n in semantic if n not in STANDARD_SEMANTICS]
            for name in ordered:
                colors[name] = self.semantic_variants(semantic[name], options)

        if options["generate_accessibility"]:
            for name, value in list(colors.items()):
                if isinstance(value, str) and is_color(value):
                    colors[f"{name}HighContrast"] = ensure_contrast(value)

        for name, transformation in (config.get("transformations") or {}).items():
            colors.update(self._apply_transformation(name, transformation, colors, options))

        return colors

    def base_color(self, value: Any, options: dict[str, Any]) -> Any:
        """Strings are kept; ``{base}`` expands to variants, ``{palette}`` to a scale."""
        if isinstance(value, str):
            return value
        if isinstance(value, Mapping):
            if "base" in value:
                return self.semantic_variants(value["base"], options)
            if "palette" in value:
                return self.color_scale(value["palette"], options)
            return dict(value)
        raise InvalidColorValue(value)

    def color_scale(self, base: Any, options: dict[str, Any]) -> dict[str, str]:
        """One color per palette step, lightness interpolated from the step."""
        parse_color(base)
        steps = options["palette_steps"]
        return {str(step): set_lightness(base, step_lightness(step)) for step in steps}

    def semantic_variants(self, base: Any, options: dict[str, Any]) -> dict[str, str]:
        parse_color(base)
        return {
            "base": base,
            "light": lighten(base, 0.2),
            "lighter": lighten(base, 0.4),
            "dark": darken(base, 0.2),
            "darker": darken(base, 0.4),
            "contrast": contrast_color(base),
            "onColor": on_color(base, options["dark_mode"]),
        }

    def _apply_transformation(
        self,
        name: str,
        transformation: Callable[..., Any] | Any,
        colors: dict[str, Any],
        options: dict[str, Any],
    ) -> dict[str, Any]:
        if not callable(transformation):
            raise TokenError(f"Color transformation '{name}' must be callable")
        result = transformation(dict(colors), options)
        if result is None:
            return {}
        if not isinstance(result, Mapping):
            raise TokenError(
                f"Color transformation '{name}' must return a mapping, got {type(result).__name__}"
            )
        return dict(result)
