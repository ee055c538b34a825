"""
Spacing token generation.

Every spacing value is a multiple of one base unit (4px by default): a
numeric scale, named aliases, and semantic groups for containers,
components, layout, and content.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from dsbridge.themes.generators.base import BREAKPOINTS, CategoryGenerator
from dsbridge.themes.token_transforms import format_number, scale_value

SCALE_STEPS = [0, 1, 2, 3, 4, 5, 6, 8, 10, 12, 16, 20, 24, 32, 40, 48, 56, 64]

NAMED_STEPS = {
    "none": 0,
    "xs": 1,
    "sm": 2,
    "md": 4,
    "lg": 6,
    "xl": 8,
    "2xl": 12,
    "3xl": 16,
    "4xl": 24,
    "5xl": 32,
    "6xl": 40,
    "7xl": 48,
    "8xl": 56,
    "9xl": 64,
}

RESPONSIVE_MULTIPLIERS = {"sm": 0.75, "md": 1.0, "lg": 1.25, "xl": 1.5}

Unit = Callable[..., str]


def _unit_fn(base_unit: float, unit: str) -> Unit:
    """``u(3)`` -> "12px"; ``u(3, 4)`` -> "12px 16px"."""

    def u(*multiples: float) -> str:
        return " ".join(f"{format_number(base_unit * m)}{unit}" for m in multiples)

    return u


def _sized(u: Unit, multiples: Mapping[str, Any]) -> dict[str, str]:
    return {name: u(*m) if isinstance(m, tuple) else u(m) for name, m in multiples.items()}


def container_spacing(u: Unit) -> dict[str, Any]:
    return {
        "padding": _sized(u, {"xs": 2, "sm": 3, "md": 4, "lg": 6, "xl": 8}),
        "margin": _sized(u, {"xs": 2, "sm": 3, "md": 4, "lg": 6, "xl": 8}),
        "gap": _sized(u, {"xs": 1, "sm": 2, "md": 3, "lg": 4, "xl": 6}),
    }


def component_spacing(u: Unit) -> dict[str, Any]:
    control_padding = {"sm": (2, 3), "md": (3, 4), "lg": (4, 6)}
    return {
        "button": {"padding": _sized(u, control_padding), "gap": u(2)},
        "input": {"padding": _sized(u, control_padding)},
        "card": {"padding": _sized(u, {"sm": 4, "md": 6, "lg": 8}), "gap": u(4)},
        "list": {"gap": u(2), "padding": u(1)},
    }


def layout_spacing(u: Unit) -> dict[str, Any]:
    return {
        "section": {
            "margin": _sized(u, {"sm": 8, "md": 12, "lg": 16, "xl": 24}),
            "padding": _sized(u, {"sm": 6, "md": 8, "lg": 12, "xl": 16}),
        },
        "grid": {"gap": _sized(u, {"sm": 4, "md": 6, "lg": 8, "xl": 12})},
        "stack": {"gap": _sized(u, {"xs": 1, "sm": 2, "md": 4, "lg": 6, "xl": 8})},
    }


def content_spacing(u: Unit) -> dict[str, Any]:
    return {
        "paragraph": {"marginBottom": u(4)},
        "heading": {"marginTop": u(6), "marginBottom": u(3)},
        "list": {"marginBottom": u(4), "itemGap": u(1)},
        "blockquote": {"margin": f"{u(6)} 0", "padding": u(4, 6)},
        "codeBlock": {"margin": f"{u(4)} 0", "padding": u(4)},
    }


SEMANTIC_GROUPS: dict[str, Callable[[Unit], dict[str, Any]]] = {
    "container": container_spacing,
    "component": component_spacing,
    "layout": layout_spacing,
    "content": content_spacing,
}


class SpacingGenerator(CategoryGenerator):
    category = "spacing"
    default_options = {
        "generate_scale": True,
        "generate_semantics": True,
        "generate_responsive": True,
        "base_unit": 4,
        "scale_steps": SCALE_STEPS,
        "unit": "px",
    }

    def build(self, config: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
        spacing: dict[str, Any] = {}
        scale_config = config.get("scale") if isinstance(config.get("scale"), Mapping) else {}
        base_unit = float(scale_config.get("baseUnit") or options["base_unit"])
        unit = str(scale_config.get("unit") or options["unit"])

        for name, value in (config.get("base") or {}).items():
            spacing[name] = self.base_value(value, options)

        if options["generate_scale"]:
            steps = scale_config.get("steps") or options["scale_steps"]
            spacing["scale"] = self.spacing_scale(base_unit, unit, steps)

        semantic = config.get("semantic") or {}
        if options["generate_semantics"]:
            u = _unit_fn(base_unit, unit)
            for group, build_group in SEMANTIC_GROUPS.items():
                if semantic.get(group):
                    spacing[group] = build_group(u)

        if options["generate_responsive"] and "scale" in spacing:
            spacing["responsive"] = {
                bp: {
                    "scale": {
                        name: scale_value(value, RESPONSIVE_MULTIPLIERS[bp])
                        for name, value in spacing["scale"].items()
                    }
                }
                for bp in BREAKPOINTS
            }

        return spacing

    def spacing_scale(self, base_unit: float, unit: str, steps: list[float]) -> dict[str, str]:
        """Numeric steps first, then the named aliases."""
        u = _unit_fn(base_unit, unit)
        scale = {format_number(step): u(step) for step in steps}
        scale.update({name: u(step) for name, step in NAMED_STEPS.items()})
        return scale

    def base_value(self, value: Any, options: dict[str, Any]) -> Any:
        """Numbers get the unit; ``{responsive: {...}}`` maps per breakpoint."""
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return f"{format_number(value)}{options['unit']}"
        if isinstance(value, Mapping) and isinstance(value.get("responsive"), Mapping):
            return {bp: self.base_value(v, options) for bp, v in value["responsive"].items()}
        return value
