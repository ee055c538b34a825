"""
Category generators for design tokens.

Usage:
    from dsbridge.themes.generators import ColorGenerator

    colors = ColorGenerator().generate({"palette": {"primary": "#3b82f6"}})
    # colors["primary"]["500"] is the mid-scale shade
"""

from dsbridge.core.cache import CacheLayer
from dsbridge.themes.generators.base import CategoryGenerator
from dsbridge.themes.generators.color import ColorGenerator, ensure_contrast
from dsbridge.themes.generators.shadow import ShadowGenerator, adjust_shadow_color
from dsbridge.themes.generators.spacing import SpacingGenerator
from dsbridge.themes.generators.typography import TypographyGenerator


def default_generators(cache: CacheLayer | None = None) -> dict[str, CategoryGenerator]:
    """One instance of each built-in generator, keyed by the category it fills."""
    generators: list[CategoryGenerator] = [
        ColorGenerator(cache),
        TypographyGenerator(cache),
        SpacingGenerator(cache),
        ShadowGenerator(cache),
    ]
    return {g.category: g for g in generators}


__all__ = [
    "CategoryGenerator",
    "ColorGenerator",
    "ShadowGenerator",
    "SpacingGenerator",
    "TypographyGenerator",
    "adjust_shadow_color",
    "default_generators",
    "ensure_contrast",
]
