"""
Validation of theme configurations.

Runs statically: no compute directive or transform is executed, so a
configuration can be checked before any of its code runs.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from typing import Any

from dsbridge.core.errors import ensure_valid
from dsbridge.themes.colors import is_color
from dsbridge.themes.resolver import is_reference
from dsbridge.themes.token_transforms import TOKEN_TRANSFORM_TYPES

KNOWN_CATEGORIES = {
    "colors",
    "typography",
    "spacing",
    "shadows",
    "borders",
    "borderRadius",
    "animations",
    "zIndex",
    "breakpoints",
    "opacity",
    "computed",
}

_SIZE_RE = re.compile(r"^(-?\d+(\.\d+)?(px|em|rem|%|vh|vw|vmin|vmax)|0)$")


def _references(value: Any) -> Iterator[str]:
    """Every reference string inside a value, at any depth."""
    if is_reference(value):
        yield value
    elif isinstance(value, Mapping):
        for nested in value.values():
            yield from _references(nested)
    elif isinstance(value, (list, tuple)):
        for nested in value:
            yield from _references(nested)


def find_reference_cycle(tokens: Mapping[str, Any]) -> list[str] | None:
    """
    Find a cycle among token references.

    Returns:
        The cycle as ["a.b", "c.d", "a.b"], or None
    """
    graph: dict[str, list[str]] = {}
    for category, entries in tokens.items():
        if not isinstance(entries, Mapping):
            continue
        for name, value in entries.items():
            edges = []
            for ref in _references(value):
                segments = ref[1:].split(".")
                if len(segments) >= 2:
                    edges.append(f"{segments[0]}.{segments[1]}")
            graph[f"{category}.{name}"] = edges

    done: set[str] = set()

    def visit(node: str, stack: list[str]) -> list[str] | None:
        if node in stack:
            return stack[stack.index(node) :] + [node]
        if node in done or node not in graph:
            return None
        stack.append(node)
        for edge in graph[node]:
            cycle = visit(edge, stack)
            if cycle:
                return cycle
        stack.pop()
        done.add(node)
        return None

    for node in graph:
        cycle = visit(node, [])
        if cycle:
            return cycle
    return None


def validate_theme_config(config: Mapping[str, Any]) -> tuple[list[str], list[str]]:
    """
    Validate a theme configuration.

    Checks:
    - ``tokens`` and each token category are mappings
    - Token categories are known (warning otherwise)
    - References point at existing categories (warning otherwise)
    - References do not form a cycle
    - Palette and semantic colors parse
    - Spacing base values are sizes (warning otherwise)
    - Transformations use a known transform type

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    tokens = config.get("tokens", {})
    if not isinstance(tokens, Mapping):
        errors.append("Theme tokens must be a mapping of category to tokens")
        tokens = {}

    for category, entries in tokens.items():
        if category not in KNOWN_CATEGORIES:
            warnings.append(f"Unknown token category '{category}'")
        if not isinstance(entries, Mapping):
            errors.append(f"Token category '{category}' must be a mapping")

    categories = set(tokens) | {"computed"}
    for category in ("colors", "typography", "spacing", "shadows"):
        if config.get(category):
            categories.add(category)
    for ref in _references({**tokens, "computed": config.get("computed") or {}}):
        target = ref[1:].split(".")[0]
        if target not in categories:
            warnings.append(f"Reference {ref} points at unknown category '{target}'")

    cycle = find_reference_cycle({**tokens, "computed": config.get("computed") or {}})
    if cycle:
        errors.append(f"Circular token reference: {' -> '.join(cycle)}")

    _validate_colors(config.get("colors"), errors)
    _validate_spacing(config.get("spacing"), warnings)
    _validate_transformations(config.get("transformations"), errors)

    return errors, warnings


def _validate_colors(colors: Any, errors: list[str]) -> None:
    if not isinstance(colors, Mapping):
        return
    for section in ("palette", "semantic"):
        for name, value in (colors.get(section) or {}).items():
            if not is_reference(value) and not is_color(value):
                errors.append(f"Invalid color value {value!r} for colors.{section}.{name}")
    for name, value in (colors.get("base") or {}).items():
        if isinstance(value, Mapping):
            for key in ("base", "palette"):
                inner = value.get(key)
                if inner is not None and not is_reference(inner) and not is_color(inner):
                    errors.append(f"Invalid color value {inner!r} for colors.base.{name}.{key}")


def _validate_spacing(spacing: Any, warnings: list[str]) -> None:
    if not isinstance(spacing, Mapping):
        return
    for name, value in (spacing.get("base") or {}).items():
        if isinstance(value, str) and not is_reference(value) and not _SIZE_RE.match(value):
            warnings.append(f"Spacing value {value!r} for spacing.base.{name} is not a size")


def _validate_transformations(transformations: Any, errors: list[str]) -> None:
    if transformations is None:
        return
    if not isinstance(transformations, Mapping):
        errors.append("Transformations must be a mapping of category to token transforms")
        return
    for category, transforms in transformations.items():
        if not isinstance(transforms, Mapping):
            errors.append(f"Transformations for '{category}' must be a mapping")
            continue
        for name, transform in transforms.items():
            if callable(transform):
                continue
            kind = transform.get("type") if isinstance(transform, Mapping) else None
            if kind not in TOKEN_TRANSFORM_TYPES:
                errors.append(f"Unknown transform type {kind!r} for {category}.{name}")


def check_theme_config(config: Mapping[str, Any]) -> list[str]:
    """
    Validate a theme configuration, raising on any error.

    Returns:
        Warnings found

    Raises:
        ValidationFailure: With every error found
    """
    errors, warnings = validate_theme_config(config)
    ensure_valid(errors, warnings)
    return warnings
