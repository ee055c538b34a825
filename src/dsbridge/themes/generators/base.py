"""
Base class for design-token category generators.

A generator expands a compact category configuration into a full token set:
- ColorGenerator: palettes, semantic variants, high-contrast variants
- TypographyGenerator: type scale, semantic text styles
- SpacingGenerator: spacing scale, semantic spacing
- ShadowGenerator: elevation scale, contextual and colored shadows

Generators are pure. ``generate`` merges the caller's options over the
generator's defaults and memoizes the result on (config, options).
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

from dsbridge.core.cache import CacheLayer

logger = logging.getLogger(__name__)

# Breakpoint names for responsive variants, smallest first
BREAKPOINTS = ("sm", "md", "lg", "xl")


class CategoryGenerator(ABC):
    """
    Base class for all category generators.

    Example:
        class BorderGenerator(CategoryGenerator):
            category = "borders"
            default_options = {"unit": "px"}

            def build(self, config, options):
                return {name: f"{width}{options['unit']}" for name, width in config.items()}
    """

    category: ClassVar[str] = ""
    default_options: ClassVar[dict[str, Any]] = {}

    def __init__(self, cache: CacheLayer | None = None):
        self.cache = cache if cache is not None else CacheLayer()

    def options(self, overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Defaults with overrides applied; keys not known to this generator are kept."""
        return {**self.default_options, **(overrides or {})}

    def generate(
        self, config: Mapping[str, Any] | None, options: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """
        Generate the category's tokens.

        Args:
            config: Category configuration from the theme
            options: Generation options (merged over the defaults)

        Returns:
            Token name -> value (values may be nested mappings)
        """
        merged = self.options(options)
        config = dict(config or {})
        key = self.cache.key(f"generate:{self.category}", config, merged)

        def run() -> dict[str, Any]:
            logger.debug("Generating %s tokens", self.category)
            return self.build(config, merged)

        return copy.deepcopy(self.cache.get_or_compute(key, run))

    @abstractmethod
    def build(self, config: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
        """Produce the token set; called on cache misses only."""
        pass

    def clear_cache(self) -> None:
        self.cache.clear()
