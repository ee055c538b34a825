"""
Registry of named custom transformations.

Every RuleEvaluator owns one registry (or is handed a shared one). Built-in
transformations are registered when the registry is created; callers extend
it with ``register`` and restore the built-ins with ``reset``.

A transformation is a callable ``(value, all_inputs, context) -> output``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

from dsbridge.transform.context import TransformContext

logger = logging.getLogger(__name__)

TransformFn = Callable[[Any, dict[str, Any], TransformContext], Any]


# =============================================================================
# Built-in transformations
# =============================================================================


def _separator(context: TransformContext) -> str:
    return str(context.options.get("separator", ","))


def _uppercase(value: Any, inputs: dict[str, Any], context: TransformContext) -> Any:
    return value.upper() if isinstance(value, str) else value


def _lowercase(value: Any, inputs: dict[str, Any], context: TransformContext) -> Any:
    return value.lower() if isinstance(value, str) else value


def _capitalize(value: Any, inputs: dict[str, Any], context: TransformContext) -> Any:
    if isinstance(value, str) and value:
        return value[0].upper() + value[1:]
    return value


def _to_string(value: Any, inputs: dict[str, Any], context: TransformContext) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_number(value: Any, inputs: dict[str, Any], context: TransformContext) -> float | int | None:
    """Numbers pass through; numeric strings convert; anything else becomes None."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
        return int(number) if number.is_integer() else number
    return None


def _join(value: Any, inputs: dict[str, Any], context: TransformContext) -> Any:
    if isinstance(value, (list, tuple)):
        return _separator(context).join(_to_string(v, inputs, context) for v in value)
    return value


def _split(value: Any, inputs: dict[str, Any], context: TransformContext) -> Any:
    if isinstance(value, str):
        return value.split(_separator(context))
    return value


def _negate(value: Any, inputs: dict[str, Any], context: TransformContext) -> bool:
    return not value


def _to_boolean(value: Any, inputs: dict[str, Any], context: TransformContext) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "false", "0", "no", "off")
    return bool(value)


BUILTIN_TRANSFORMS: dict[str, TransformFn] = {
    "uppercase": _uppercase,
    "lowercase": _lowercase,
    "capitalize": _capitalize,
    "toString": _to_string,
    "toNumber": _to_number,
    "join": _join,
    "split": _split,
    "negate": _negate,
    "toBoolean": _to_boolean,
}


# =============================================================================
# Registry
# =============================================================================


class TransformRegistry:
    """Named custom transformations available to ``custom`` rules."""

    def __init__(self, transforms: dict[str, TransformFn] | None = None) -> None:
        self._transforms: dict[str, TransformFn] = dict(BUILTIN_TRANSFORMS)
        if transforms:
            self._transforms.update(transforms)

    def register(self, name: str, fn: TransformFn) -> None:
        """Add or replace a transformation."""
        if not callable(fn):
            raise TypeError(f"Transformation {name!r} must be callable")
        if name in self._transforms:
            logger.debug("Replacing transformation: %s", name)
        self._transforms[name] = fn

    def unregister(self, name: str) -> bool:
        """Remove a transformation. Returns True if it existed."""
        return self._transforms.pop(name, None) is not None

    def reset(self) -> None:
        """Drop caller registrations and restore the built-ins."""
        self._transforms = dict(BUILTIN_TRANSFORMS)

    def get(self, name: str) -> TransformFn | None:
        return self._transforms.get(name)

    def names(self) -> list[str]:
        return sorted(self._transforms)

    def __contains__(self, name: object) -> bool:
        return name in self._transforms

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._transforms)
