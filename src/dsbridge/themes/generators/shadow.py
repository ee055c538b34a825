"""
Shadow token generation.

Each elevation level stacks two layers:
- an ambient layer: soft, wide, offset ``level``px, blur ``2 * level``px
- a direct layer: tight, offset and blur ``1.5 * level``px

Both layers take their opacity from the level, so higher elevations read
as further from the surface. Level 0 is always ``none``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dsbridge.core.errors import TokenError
from dsbridge.themes.colors import with_alpha
from dsbridge.themes.generators.base import CategoryGenerator
from dsbridge.themes.token_transforms import format_number

NAMED_ELEVATIONS = {"none": 0, "xs": 1, "sm": 2, "md": 3, "lg": 4, "xl": 5, "2xl": 6}

CONTEXTUAL_PRESETS: dict[str, dict[str, str]] = {
    "button": {
        "default": "0 2px 4px rgba(0, 0, 0, 0.1)",
        "hover": "0 4px 8px rgba(0, 0, 0, 0.15)",
        "active": "0 1px 2px rgba(0, 0, 0, 0.1)",
        "disabled": "none",
    },
    "card": {
        "default": "0 2px 8px rgba(0, 0, 0, 0.1)",
        "hover": "0 4px 16px rgba(0, 0, 0, 0.15)",
        "active": "0 1px 4px rgba(0, 0, 0, 0.1)",
    },
    "modal": {
        "backdrop": "0 0 0 9999px rgba(0, 0, 0, 0.5)",
        "content": "0 8px 32px rgba(0, 0, 0, 0.3)",
    },
    "dropdown": {
        "default": "0 4px 16px rgba(0, 0, 0, 0.15)",
        "large": "0 8px 32px rgba(0, 0, 0, 0.2)",
    },
    "focus": {
        "default": "0 0 0 3px rgba(59, 130, 246, 0.3)",
        "error": "0 0 0 3px rgba(239, 68, 68, 0.3)",
        "success": "0 0 0 3px rgba(34, 197, 94, 0.3)",
        "warning": "0 0 0 3px rgba(245, 158, 11, 0.3)",
    },
}

COLORED_OPACITIES = (0.1, 0.2, 0.3, 0.4, 0.5)


def adjust_shadow_color(color: str, opacity: float) -> str:
    """
    Re-express a hex, rgb() or rgba() color at the given opacity.

    Raises:
        InvalidColorValue: If the color cannot be parsed
    """
    return with_alpha(color, opacity)


def _px(value: float) -> str:
    return f"{format_number(value)}px"


def elevation_shadow(level: float, base_color: str, ambient: float, direct: float) -> str:
    """Two-layer box-shadow for an elevation level; level 0 is "none"."""
    if level == 0:
        return "none"
    ambient_layer = (
        f"0 {_px(level)} {_px(level * 2)} {_px(level * 0.5)} "
        f"{adjust_shadow_color(base_color, ambient * level / 5)}"
    )
    direct_layer = (
        f"0 {_px(level * 1.5)} {_px(level * 1.5)} 0 "
        f"{adjust_shadow_color(base_color, direct * level / 5)}"
    )
    return f"{ambient_layer}, {direct_layer}"


def shadow_from_components(components: Mapping[str, Any]) -> str:
    """Build ``[inset ]x y blur spread color`` from a component mapping."""
    inset = "inset " if components.get("inset") else ""
    x, y, blur, spread = (
        _px(float(components.get(key, 0))) for key in ("x", "y", "blur", "spread")
    )
    color = components.get("color", "rgba(0, 0, 0, 0.1)")
    return f"{inset}{x} {y} {blur} {spread} {color}"


def combine_layers(layers: list[Any]) -> str:
    return ", ".join(
        layer if isinstance(layer, str) else shadow_from_components(layer) for layer in layers
    )


class ShadowGenerator(CategoryGenerator):
    category = "shadows"
    default_options = {
        "generate_elevation": True,
        "generate_contextual": True,
        "generate_colors": True,
        "base_color": "rgba(0, 0, 0, 0.1)",
        "elevation_steps": [0, 1, 2, 3, 4, 5],
        "ambient_light": 0.4,
        "direct_light": 0.6,
    }

    def build(self, config: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
        shadows: dict[str, Any] = {}

        for name, value in (config.get("base") or {}).items():
            shadows[name] = self.base_shadow(name, value, options)

        if options["generate_elevation"]:
            elevation_config = config.get("elevation")
            if not isinstance(elevation_config, Mapping):
                elevation_config = {}
            shadows["elevation"] = self.elevation_scale(elevation_config, options)

        contextual = config.get("contextual")
        if options["generate_contextual"] and contextual:
            if not isinstance(contextual, Mapping):
                contextual = {}
            shadows.update(
                {
                    name: dict(preset)
                    for name, preset in CONTEXTUAL_PRESETS.items()
                    if contextual.get(name, True) is not False
                }
            )

        colored = config.get("colors")
        if options["generate_colors"] and colored:
            shadows["colored"] = {
                name: {
                    str(round(opacity * 100)): f"0 4px 16px {adjust_shadow_color(color, opacity)}"
                    for opacity in COLORED_OPACITIES
                }
                for name, color in colored.items()
            }

        return shadows

    def elevation_scale(
        self, elevation_config: Mapping[str, Any], options: dict[str, Any]
    ) -> dict[str, str]:
        """Numbered levels, then named aliases for the levels present."""
        steps = list(elevation_config.get("steps") or options["elevation_steps"])
        base_color = elevation_config.get("baseColor") or options["base_color"]
        elevation = {
            format_number(step): elevation_shadow(
                step, base_color, options["ambient_light"], options["direct_light"]
            )
            for step in steps
        }
        for name, step in NAMED_ELEVATIONS.items():
            if step in steps:
                elevation[name] = elevation[format_number(step)]
        return elevation

    def base_shadow(self, name: str, value: Any, options: dict[str, Any]) -> str:
        """A string, ``{elevation}``, ``{layers}``, or ``{x, y, blur, spread, color, inset}``."""
        if isinstance(value, str):
            return value
        if isinstance(value, Mapping):
            if "elevation" in value:
                return elevation_shadow(
                    value["elevation"],
                    value.get("color") or options["base_color"],
                    options["ambient_light"],
                    options["direct_light"],
                )
            if isinstance(value.get("layers"), list):
                return combine_layers(value["layers"])
            if "x" in value or "y" in value:
                return shadow_from_components(value)
        raise TokenError(f"Invalid shadow definition for '{name}': {value!r}")
