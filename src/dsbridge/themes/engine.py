"""
Theme engine.

Runs the full theme pipeline over a theme configuration::

    {
        "tokens": {"colors": {"brand": "#3b82f6", "link": "$colors.brand"}},
        "colors": {"palette": {"primary": "#3b82f6"}},
        "spacing": {"scale": {"baseUnit": 4}},
        "computed": {"gutter": {"compute": "spacing.scale.md"}},
        "transformations": {"colors": {"brand": {"type": "darken", "amount": 0.1}}},
    }

Order: resolve ``tokens`` -> substitute references in category configs ->
run generators for configured categories -> overlay explicit tokens on the
generated ones -> resolve ``computed`` -> apply ``transformations``.

The public methods are async so callers can await them next to their own
async config loading; no work is suspended internally.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from dsbridge.core.cache import CacheLayer
from dsbridge.core.config import EngineConfig
from dsbridge.themes.compiler import CompiledTheme, ThemeCompiler
from dsbridge.themes.generators import CategoryGenerator, default_generators
from dsbridge.themes.resolver import TokenMap, TokenResolver, substitute
from dsbridge.themes.token_transforms import apply_token_transform

logger = logging.getLogger(__name__)


class ThemeEngine:
    """Generates token maps and compiled themes from theme configurations."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        cache: CacheLayer | None = None,
        generators: Mapping[str, CategoryGenerator] | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.cache = cache if cache is not None else CacheLayer(enabled=self.config.use_cache)
        self.resolver = TokenResolver(self.cache)
        self.compiler = ThemeCompiler(self.cache)
        self.generators: dict[str, CategoryGenerator] = (
            dict(generators) if generators is not None else default_generators(self.cache)
        )
        self._tokens_generated = 0
        self._css_generated = 0

    def register_generator(
        self, generator: CategoryGenerator, category: str | None = None
    ) -> None:
        """Add or replace the generator for a category (default: its own category)."""
        self.generators[category or generator.category] = generator

    def unregister_generator(self, category: str) -> bool:
        """Remove a category's generator; returns False if none was registered."""
        return self.generators.pop(category, None) is not None

    def generator_options(self, category: str, options: Mapping[str, Any]) -> dict[str, Any]:
        """Options for one generator: engine-level defaults, then the caller's."""
        base = self.config.color_options() if category == "colors" else {}
        return {**base, **options}

    async def generate_theme_tokens(
        self, theme_config: Mapping[str, Any], options: Mapping[str, Any] | None = None
    ) -> TokenMap:
        """
        Build the resolved TokenMap for a theme.

        Args:
            theme_config: Theme configuration (see module docstring)
            options: Generator options, passed to every generator

        Returns:
            Category -> token name -> value, free of references

        Raises:
            CircularReference: If token references form a cycle
            InvalidColorValue: If a color generator receives an unparseable color
            TokenError: If a directive or transform is invalid
        """
        options = options or {}
        token_map = self.resolver.resolve(theme_config.get("tokens") or {})

        for category, generator in self.generators.items():
            category_config = theme_config.get(category)
            if not category_config:
                continue
            logger.debug("Running %s generator", category)
            generated = generator.generate(
                substitute(category_config, token_map),
                self.generator_options(category, options),
            )
            token_map[category] = {**generated, **token_map.get(category, {})}

        computed = theme_config.get("computed")
        if computed:
            token_map = self.resolver.resolve(
                {**token_map, "computed": {**token_map.get("computed", {}), **computed}}
            )

        for category, transforms in (theme_config.get("transformations") or {}).items():
            tokens = token_map.get(category)
            if tokens is None:
                logger.debug("Skipping transformations for missing category '%s'", category)
                continue
            for name, transform in transforms.items():
                if name not in tokens:
                    logger.debug("Skipping transformation for missing token %s.%s", category, name)
                    continue
                tokens[name] = apply_token_transform(
                    tokens[name], transform, {"category": category, "name": name}
                )

        self._tokens_generated += sum(len(tokens) for tokens in token_map.values())
        return token_map

    async def generate_css(
        self, token_map: Mapping[str, Any], options: Mapping[str, Any] | None = None
    ) -> CompiledTheme:
        """Compile a TokenMap; options override the engine config's compile options."""
        compiled = self.compiler.compile(
            token_map, {**self.config.compile_options(), **(options or {})}
        )
        self._css_generated += 1
        return compiled

    async def compile_theme(
        self, theme_config: Mapping[str, Any], options: Mapping[str, Any] | None = None
    ) -> CompiledTheme:
        """generate_theme_tokens followed by generate_css."""
        options = dict(options or {})
        token_map = await self.generate_theme_tokens(theme_config, options.get("generators"))
        return await self.generate_css(token_map, options.get("compile"))

    def clear_cache(self) -> None:
        self.cache.clear()

    def stats(self) -> dict[str, int]:
        return {
            "tokens_generated": self._tokens_generated,
            "css_generated": self._css_generated,
            **self.cache.stats(),
        }
