"""
Theme compilation.

Flattens a resolved TokenMap into custom properties and derives utility
rules for the categories present:

    --{prefix}-{kebab(category)}-{kebab(name)}[-{kebab(nested key)}...]

A nested ``{"value": x}`` collapses to ``x``; lists are comma-joined.
Utility rules reference the properties through ``var()``, so the table
and the rule text always agree on names.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dsbridge.core.cache import CacheLayer
from dsbridge.themes.token_transforms import format_number

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS: dict[str, Any] = {
    "prefix": "ds",
    "minify": False,
    "generate_utilities": True,
    "generate_components": False,
    "generate_dark_mode": False,
    "root_selector": ":root",
}

DARK_MODE_SELECTOR = '[data-theme="dark"], .dark'

_UPPER = re.compile(r"[A-Z]")
_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"\s*([{}:;,])\s*")
_TRAILING_SEMICOLONS = re.compile(r";+}")


def kebab(name: Any) -> str:
    """fontSize -> font-size; non-strings are stringified first."""
    return _UPPER.sub(lambda m: f"-{m.group(0).lower()}", str(name))


def css_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(css_value(v) for v in value)
    return str(value)


def minify_css(css: str) -> str:
    """
    Collapse whitespace around CSS punctuation and drop final semicolons.

    Idempotent: ``minify_css(minify_css(x)) == minify_css(x)``.
    """
    text = _WHITESPACE.sub(" ", css)
    text = _PUNCTUATION.sub(r"\1", text)
    text = _TRAILING_SEMICOLONS.sub("}", text)
    return text.strip()


def _flatten(segments: tuple[str, ...], value: Any) -> Iterator[tuple[tuple[str, ...], str]]:
    if value is None:
        return
    if isinstance(value, Mapping):
        if "value" in value:
            yield from _flatten(segments, value["value"])
            return
        for key, nested in value.items():
            yield from _flatten((*segments, kebab(key)), nested)
        return
    yield segments, css_value(value)


class CompiledTheme(BaseModel):
    """Custom-property table plus utility / component rule text."""

    model_config = ConfigDict(frozen=True)

    property_table: dict[str, str] = Field(description="Custom property name -> value")
    rule_text: str = Field(default="", description="Utility, component, and dark-mode rules")
    root_selector: str = Field(default=":root")
    minified: bool = Field(default=False)

    def custom_properties(self, root_selector: str | None = None) -> str:
        """The property table as one declaration block."""
        if not self.property_table:
            return ""
        selector = root_selector or self.root_selector
        lines = [f"  {name}: {value};" for name, value in self.property_table.items()]
        return f"{selector} {{\n" + "\n".join(lines) + "\n}"

    def to_css(self, root_selector: str | None = None) -> str:
        """Full stylesheet text, minified if the theme was compiled with ``minify``."""
        blocks = [self.custom_properties(root_selector), self.rule_text]
        css = "\n\n".join(block for block in blocks if block)
        return minify_css(css) if self.minified else css


class ThemeCompiler:
    """Compiles resolved TokenMaps, memoizing on (token_map, options)."""

    def __init__(self, cache: CacheLayer | None = None) -> None:
        self.cache = cache if cache is not None else CacheLayer()

    def compile(
        self, token_map: Mapping[str, Any], options: Mapping[str, Any] | None = None
    ) -> CompiledTheme:
        """
        Compile a resolved TokenMap.

        Args:
            token_map: Category -> token name -> value
            options: prefix, minify, generate_utilities, generate_components,
                generate_dark_mode, root_selector

        Returns:
            CompiledTheme with the property table and rule text
        """
        opts = {**DEFAULT_OPTIONS, **(options or {})}
        key = self.cache.key("compile", token_map, opts)
        compiled = self.cache.get_or_compute(key, lambda: self._compile(token_map, opts))
        return compiled.model_copy(deep=True)

    def clear_cache(self) -> None:
        self.cache.clear()

    def _compile(self, token_map: Mapping[str, Any], opts: dict[str, Any]) -> CompiledTheme:
        prefix = opts["prefix"]
        table = self.property_table(token_map, prefix)

        blocks: list[str] = []
        if opts["generate_utilities"]:
            blocks.append(self.utility_rules(token_map, prefix))
        if opts["generate_components"]:
            blocks.append(self.component_rules(token_map, prefix))
        if opts["generate_dark_mode"]:
            blocks.append(self.dark_mode_rules(token_map, prefix))
        rule_text = "\n\n".join(block for block in blocks if block)
        if opts["minify"]:
            rule_text = minify_css(rule_text)

        logger.debug("Compiled %d custom properties", len(table))
        return CompiledTheme(
            property_table=table,
            rule_text=rule_text,
            root_selector=opts["root_selector"],
            minified=bool(opts["minify"]),
        )

    def property_table(self, token_map: Mapping[str, Any], prefix: str) -> dict[str, str]:
        table: dict[str, str] = {}
        for category, tokens in token_map.items():
            if not isinstance(tokens, Mapping):
                continue
            for name, value in tokens.items():
                for segments, text in _flatten((kebab(category), kebab(name)), value):
                    table[f"--{prefix}-" + "-".join(segments)] = text
        return table

    # =========================================================================
    # Utility rules
    # =========================================================================

    def utility_rules(self, token_map: Mapping[str, Any], prefix: str) -> str:
        builders = {
            "colors": self.color_utilities,
            "spacing": self.spacing_utilities,
            "typography": self.typography_utilities,
            "shadows": self.shadow_utilities,
        }
        blocks = [
            build(token_map[category], prefix)
            for category, build in builders.items()
            if isinstance(token_map.get(category), Mapping)
        ]
        return "\n\n".join(block for block in blocks if block)

    def color_utilities(self, colors: Mapping[str, Any], prefix: str) -> str:
        names: list[str] = []
        for name, value in colors.items():
            if isinstance(value, Mapping):
                names.extend(
                    f"{kebab(name)}-{kebab(shade)}"
                    for shade, shade_value in value.items()
                    if not isinstance(shade_value, Mapping)
                )
            elif value is not None:
                names.append(kebab(name))

        rules = []
        for utility, css_property in (
            ("text", "color"),
            ("bg", "background-color"),
            ("border", "border-color"),
        ):
            rules.extend(
                f".{prefix}-{utility}-{n} {{ {css_property}: var(--{prefix}-colors-{n}); }}"
                for n in names
            )
        return "\n".join(rules)

    def spacing_utilities(self, spacing: Mapping[str, Any], prefix: str) -> str:
        scale = spacing.get("scale")
        if isinstance(scale, Mapping):
            steps = [(kebab(name), f"scale-{kebab(name)}") for name in scale]
        else:
            steps = [
                (kebab(name), kebab(name))
                for name, value in spacing.items()
                if not isinstance(value, Mapping)
            ]

        sides = {"t": ("top",), "r": ("right",), "b": ("bottom",), "l": ("left",)}
        axes = {"x": ("left", "right"), "y": ("top", "bottom")}
        rules = []
        for step, path in steps:
            var = f"var(--{prefix}-spacing-{path})"
            for css_property, short in (("margin", "m"), ("padding", "p")):
                rules.append(f".{prefix}-{short}-{step} {{ {css_property}: {var}; }}")
                for suffix, directions in {**axes, **sides}.items():
                    body = " ".join(f"{css_property}-{d}: {var};" for d in directions)
                    rules.append(f".{prefix}-{short}{suffix}-{step} {{ {body} }}")
            rules.append(f".{prefix}-gap-{step} {{ gap: {var}; }}")
        return "\n".join(rules)

    def typography_utilities(self, typography: Mapping[str, Any], prefix: str) -> str:
        rules = []
        base = f"--{prefix}-typography"

        scale = typography.get("scale")
        if isinstance(scale, Mapping):
            for size, style in scale.items():
                if not isinstance(style, Mapping):
                    continue
                step = kebab(size)
                lines = [f".{prefix}-text-{step} {{"]
                for key, css_property in (
                    ("fontSize", "font-size"),
                    ("lineHeight", "line-height"),
                    ("letterSpacing", "letter-spacing"),
                ):
                    if style.get(key) is not None:
                        lines.append(f"  {css_property}: var({base}-scale-{step}-{kebab(key)});")
                lines.append("}")
                rules.append("\n".join(lines))

        named_groups = (("fontWeights", "font-weight"), ("fontFamilies", "font-family"))
        for group, css_property in named_groups:
            entries = typography.get(group)
            if isinstance(entries, Mapping):
                rules.extend(
                    f".{prefix}-font-{kebab(name)} {{ {css_property}: "
                    f"var({base}-{kebab(group)}-{kebab(name)}); }}"
                    for name in entries
                )
        return "\n".join(rules)

    def shadow_utilities(self, shadows: Mapping[str, Any], prefix: str) -> str:
        elevation = shadows.get("elevation")
        if not isinstance(elevation, Mapping):
            return ""
        return "\n".join(
            f".{prefix}-shadow-{kebab(level)} "
            f"{{ box-shadow: var(--{prefix}-shadows-elevation-{kebab(level)}); }}"
            for level in elevation
        )

    # =========================================================================
    # Component and dark-mode rules
    # =========================================================================

    def component_rules(self, token_map: Mapping[str, Any], prefix: str) -> str:
        p = prefix
        button = [
            f".{p}-button {{",
            "  display: inline-flex;",
            "  align-items: center;",
            "  justify-content: center;",
            f"  padding: var(--{p}-spacing-component-button-padding-md, 12px 16px);",
            "  border: 1px solid transparent;",
            f"  border-radius: var(--{p}-border-radius-md, 6px);",
            f"  font-size: var(--{p}-typography-scale-md-font-size, 16px);",
            f"  font-weight: var(--{p}-typography-font-weights-medium, 500);",
            "  line-height: 1;",
            "  cursor: pointer;",
            "  transition: all 0.2s ease-in-out;",
            "}",
        ]
        colors = token_map.get("colors")
        if isinstance(colors, Mapping):
            for name, value in colors.items():
                if not (isinstance(value, Mapping) and "base" in value):
                    continue
                c = f"--{p}-colors-{kebab(name)}"
                button += [
                    f".{p}-button--{kebab(name)} {{",
                    f"  background-color: var({c}-base);",
                    f"  color: var({c}-on-color, white);",
                    f"  border-color: var({c}-base);",
                    "}",
                    f".{p}-button--{kebab(name)}:hover {{",
                    f"  background-color: var({c}-dark);",
                    f"  border-color: var({c}-dark);",
                    "}",
                ]

        card = [
            f".{p}-card {{",
            f"  background-color: var(--{p}-colors-surface, white);",
            f"  border: 1px solid var(--{p}-colors-border, #e5e7eb);",
            f"  border-radius: var(--{p}-border-radius-lg, 8px);",
            f"  padding: var(--{p}-spacing-component-card-padding-md, 24px);",
            f"  box-shadow: var(--{p}-shadows-elevation-2);",
            "}",
            f".{p}-card:hover {{",
            f"  box-shadow: var(--{p}-shadows-elevation-3);",
            "}",
        ]

        field = [
            f".{p}-input {{",
            "  display: block;",
            "  width: 100%;",
            f"  padding: var(--{p}-spacing-component-input-padding-md, 12px 16px);",
            f"  border: 1px solid var(--{p}-colors-border, #d1d5db);",
            f"  border-radius: var(--{p}-border-radius-md, 6px);",
            f"  font-size: var(--{p}-typography-scale-md-font-size, 16px);",
            f"  line-height: var(--{p}-typography-scale-md-line-height, 1.5);",
            f"  background-color: var(--{p}-colors-surface, white);",
            "  transition: border-color 0.2s ease-in-out, box-shadow 0.2s ease-in-out;",
            "}",
            f".{p}-input:focus {{",
            "  outline: none;",
            f"  border-color: var(--{p}-colors-primary-base);",
            f"  box-shadow: var(--{p}-shadows-focus-default);",
            "}",
        ]
        return "\n\n".join("\n".join(block) for block in (button, card, field))

    def dark_mode_rules(self, token_map: Mapping[str, Any], prefix: str) -> str:
        """Point each semantic color's base property at its dark variant."""
        colors = token_map.get("colors")
        if not isinstance(colors, Mapping):
            return ""
        lines = [
            f"  --{prefix}-colors-{kebab(name)}-base: {css_value(value['dark'])};"
            for name, value in colors.items()
            if isinstance(value, Mapping) and value.get("dark") is not None
        ]
        if not lines:
            return ""
        return f"{DARK_MODE_SELECTOR} {{\n" + "\n".join(lines) + "\n}"
