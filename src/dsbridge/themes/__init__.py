"""
Design token resolution, generation, and compilation.

Usage:
    from dsbridge.themes import ThemeEngine

    engine = ThemeEngine()
    tokens = await engine.generate_theme_tokens({"colors": {"palette": {"primary": "#3b82f6"}}})
    compiled = await engine.generate_css(tokens)
    compiled.property_table["--ds-colors-primary-500"]
"""

from dsbridge.themes.compiler import CompiledTheme, ThemeCompiler, minify_css
from dsbridge.themes.engine import ThemeEngine
from dsbridge.themes.generators import (
    CategoryGenerator,
    ColorGenerator,
    ShadowGenerator,
    SpacingGenerator,
    TypographyGenerator,
)
from dsbridge.themes.resolver import TokenMap, TokenResolver, is_reference, resolve_reference
from dsbridge.themes.validation import check_theme_config, validate_theme_config

__all__ = [
    "CategoryGenerator",
    "ColorGenerator",
    "CompiledTheme",
    "ShadowGenerator",
    "SpacingGenerator",
    "ThemeCompiler",
    "ThemeEngine",
    "TokenMap",
    "TokenResolver",
    "TypographyGenerator",
    "check_theme_config",
    "is_reference",
    "minify_css",
    "resolve_reference",
    "validate_theme_config",
]
