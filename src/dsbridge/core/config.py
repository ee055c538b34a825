"""
Engine configuration.

One frozen model holds every knob the transformation session, the token
generators, and the theme compiler read. It is usually built from a parsed
manifest section (``[dsbridge]`` in a project manifest) via ``from_manifest``.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", key).replace("-", "_").lower()


class EngineConfig(BaseModel):
    """Settings shared by the transformation and theme pipelines."""

    prefix: str = Field(default="ds", description="Custom property prefix")
    library: str | None = Field(default=None, description="Active UI library identifier")
    use_cache: bool = Field(default=True, description="Memoize transformations and theme output")
    minify: bool = Field(default=False, description="Minify compiled rule text")
    generate_utilities: bool = Field(default=True, description="Emit utility classes")
    generate_components: bool = Field(default=False, description="Emit component styles")
    generate_dark_mode: bool = Field(default=False, description="Emit dark-mode override block")
    root_selector: str = Field(default=":root", description="Selector for the property block")
    palette_steps: list[int] = Field(
        default_factory=lambda: [50, 100, 200, 300, 400, 500, 600, 700, 800, 900],
        description="Palette steps generated for every palette color",
    )
    dark_mode: bool = Field(default=False, description="Generate colors for a dark surface")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_manifest(cls, section: dict[str, Any] | None) -> EngineConfig:
        """
        Build a config from a parsed manifest table.

        Keys may be snake_case, camelCase, or kebab-case. Unknown keys are
        ignored.

        Args:
            section: Parsed manifest section, or None for defaults

        Returns:
            EngineConfig with defaults for anything not given
        """
        if not section:
            return cls()

        known = set(cls.model_fields)
        values: dict[str, Any] = {}
        for key, value in section.items():
            name = _snake(str(key))
            if name in known:
                values[name] = value
            else:
                logger.debug("Ignoring unknown engine config key: %s", key)
        return cls(**values)

    def compile_options(self) -> dict[str, Any]:
        """Options dict consumed by ThemeCompiler."""
        return {
            "prefix": self.prefix,
            "minify": self.minify,
            "generate_utilities": self.generate_utilities,
            "generate_components": self.generate_components,
            "generate_dark_mode": self.generate_dark_mode,
            "root_selector": self.root_selector,
        }

    def color_options(self) -> dict[str, Any]:
        """Options dict consumed by ColorGenerator."""
        return {
            "palette_steps": list(self.palette_steps),
            "dark_mode": self.dark_mode,
        }
