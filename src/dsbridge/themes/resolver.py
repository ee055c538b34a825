"""
Design token resolution.

Turns a raw token tree into a TokenMap in which every value is concrete:

- ``"$colors.primary"``: a reference, replaced by the referenced value
  (``None`` when any path segment is missing)
- ``{"compute": fn}``: called as ``fn(tokens, TokenLocation)``, where
  ``tokens`` is a read-only view of the map that resolves entries on access
- ``{"compute": "spacing.base * 2"}``: an expression with the categories
  as variables
- ``{"value": ..., "transform": {...}}``: a value (or reference) passed
  through a token transform

Resolution runs in two passes. Constants are copied first; everything else
is resolved depth first and on demand, with an in-progress stack so that a
reference cycle raises CircularReference instead of recursing forever.
Shared dependencies (diamonds) are resolved once.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Iterator, Mapping
from typing import Any

from dsbridge.core.cache import CacheLayer
from dsbridge.core.errors import CircularReference, ExpressionError, TokenError, TokenLocation
from dsbridge.core.expression_lang import compile_expr, evaluate
from dsbridge.themes.token_transforms import apply_token_transform

logger = logging.getLogger(__name__)

TokenMap = dict[str, dict[str, Any]]

_REFERENCE_RE = re.compile(r"^\$[A-Za-z_][\w-]*(?:\.[\w-]+)*$")


def is_reference(value: Any) -> bool:
    """True for strings like ``$colors.primary`` or ``$spacing.scale.4``."""
    return isinstance(value, str) and bool(_REFERENCE_RE.match(value))


def is_directive(value: Any) -> bool:
    """True for compute or value/transform directives."""
    return isinstance(value, dict) and (
        "compute" in value or ("value" in value and "transform" in value)
    )


def needs_resolution(value: Any) -> bool:
    """True if the value contains a reference or directive at any depth."""
    if is_reference(value) or is_directive(value):
        return True
    if isinstance(value, dict):
        return any(needs_resolution(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return any(needs_resolution(v) for v in value)
    return False


def _walk(value: Any, segments: list[str]) -> Any:
    for segment in segments:
        if isinstance(value, Mapping):
            if segment in value:
                value = value[segment]
            elif segment.isdigit() and int(segment) in value:
                value = value[int(segment)]
            else:
                return None
        elif isinstance(value, (list, tuple)) and segment.isdigit() and int(segment) < len(value):
            value = value[int(segment)]
        else:
            return None
    return value


def resolve_reference(ref: str, token_map: Mapping[str, Any]) -> Any:
    """
    Look up a ``$category.name[.further]`` reference in a resolved map.

    Returns:
        The referenced value, or None if any segment is missing
    """
    if not is_reference(ref):
        return None
    return _walk(token_map, ref[1:].split("."))


def substitute(value: Any, token_map: Mapping[str, Any]) -> Any:
    """Replace every reference inside a value with its target in token_map."""
    if is_reference(value):
        return resolve_reference(value, token_map)
    if isinstance(value, dict):
        return {k: substitute(v, token_map) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute(v, token_map) for v in value]
    return value


class TokenResolver:
    """Resolves raw token trees, memoizing on the canonical form of the tree."""

    def __init__(self, cache: CacheLayer | None = None) -> None:
        self.cache = cache if cache is not None else CacheLayer()

    def resolve(self, raw_tree: Mapping[str, Any], use_cache: bool = True) -> TokenMap:
        """
        Resolve a raw token tree.

        Args:
            raw_tree: ``{category: {name: value}}``, optionally with a
                top-level ``computed`` map treated as its own category

        Returns:
            A new TokenMap with the same category and name order

        Raises:
            CircularReference: If references form a cycle
            TokenError: If a category is not a mapping or a directive fails
        """
        if not use_cache:
            return _Resolution(raw_tree).run()
        key = self.cache.key("tokens", raw_tree)
        result = self.cache.get_or_compute(key, lambda: _Resolution(raw_tree).run())
        return copy.deepcopy(result)

    def clear_cache(self) -> None:
        self.cache.clear()


# =============================================================================
# Resolution state
# =============================================================================


class _Resolution:
    """One resolve() call: raw entries, resolved entries, in-progress stack."""

    def __init__(self, raw_tree: Mapping[str, Any]) -> None:
        self.raw: dict[str, dict[str, Any]] = {}
        for category, entries in raw_tree.items():
            if not isinstance(entries, Mapping):
                raise TokenError(
                    f"Token category '{category}' must be a mapping, got {type(entries).__name__}"
                )
            self.raw[str(category)] = dict(entries)
        self.resolved: dict[tuple[str, str], Any] = {}
        self.stack: list[tuple[str, str]] = []
        self.view = _TokenView(self)

    def run(self) -> TokenMap:
        pending: list[tuple[str, str]] = []
        for category, entries in self.raw.items():
            for name, value in entries.items():
                if needs_resolution(value):
                    pending.append((category, name))
                else:
                    self.resolved[(category, name)] = copy.deepcopy(value)

        logger.debug(
            "Resolving tokens: %d constant(s), %d pending",
            len(self.resolved),
            len(pending),
        )
        for category, name in pending:
            self.entry(category, name)

        return {
            category: {name: self.resolved[(category, name)] for name in entries}
            for category, entries in self.raw.items()
        }

    def entry(self, category: str, name: str) -> Any:
        """Resolve (or fetch) one entry, detecting cycles."""
        key = (category, name)
        if key in self.resolved:
            return self.resolved[key]
        if key in self.stack:
            cycle = self.stack[self.stack.index(key) :] + [key]
            raise CircularReference([f"{c}.{n}" for c, n in cycle])

        self.stack.append(key)
        try:
            value = self.value(self.raw[category][name], TokenLocation(category, name))
        finally:
            self.stack.pop()
        self.resolved[key] = value
        return value

    def value(self, value: Any, location: TokenLocation) -> Any:
        if is_reference(value):
            return self.lookup(value)

        if isinstance(value, dict):
            if "compute" in value:
                return self.value(self.compute(value["compute"], location), location)
            if "value" in value and "transform" in value:
                inner = self.value(value["value"], location)
                options = {"category": location.category, "name": location.name}
                return apply_token_transform(inner, value["transform"], options)
            return {k: self.value(v, location) for k, v in value.items()}

        if isinstance(value, (list, tuple)):
            return [self.value(v, location) for v in value]

        return value

    def compute(self, directive: Any, location: TokenLocation) -> Any:
        if callable(directive):
            return directive(self.view, location)
        if isinstance(directive, str):
            try:
                return evaluate(compile_expr(directive), self.view)
            except ExpressionError as e:
                raise TokenError(
                    f"Invalid compute expression {directive!r}: {e.message}", location
                ) from e
        raise TokenError(
            f"compute must be a callable or expression string, got {type(directive).__name__}",
            location,
        )

    def lookup(self, ref: str) -> Any:
        segments = ref[1:].split(".")
        category = segments[0]
        if category not in self.raw:
            logger.debug("Unresolved token reference %s (no category '%s')", ref, category)
            return None
        if len(segments) == 1:
            return copy.deepcopy(dict(self.view[category]))
        name = segments[1]
        if name not in self.raw[category]:
            logger.debug("Unresolved token reference %s", ref)
            return None
        return copy.deepcopy(_walk(self.entry(category, name), segments[2:]))


class _TokenView(Mapping):
    """Read-only view of a resolution; categories resolve entries on access."""

    def __init__(self, resolution: _Resolution) -> None:
        self._resolution = resolution

    def __getitem__(self, category: str) -> _CategoryView:
        if category not in self._resolution.raw:
            raise KeyError(category)
        return _CategoryView(self._resolution, category)

    def __contains__(self, category: object) -> bool:
        return category in self._resolution.raw

    def __iter__(self) -> Iterator[str]:
        return iter(self._resolution.raw)

    def __len__(self) -> int:
        return len(self._resolution.raw)


class _CategoryView(Mapping):
    def __init__(self, resolution: _Resolution, category: str) -> None:
        self._resolution = resolution
        self._category = category

    def __getitem__(self, name: str) -> Any:
        if name not in self._resolution.raw[self._category]:
            raise KeyError(name)
        return self._resolution.entry(self._category, name)

    def __contains__(self, name: object) -> bool:
        return name in self._resolution.raw[self._category]

    def __iter__(self) -> Iterator[str]:
        return iter(self._resolution.raw[self._category])

    def __len__(self) -> int:
        return len(self._resolution.raw[self._category])
