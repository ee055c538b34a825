"""
Value transforms applied to individual design tokens.

Used by ``{"value": ..., "transform": {...}}`` token directives and by a
theme's top-level ``transformations`` table. A transform is either a
callable ``(value, options) -> value`` or a dict with a ``type`` of
``scale``, ``darken``, ``lighten`` or ``alpha``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

from dsbridge.core.errors import TokenError
from dsbridge.themes.colors import darken, lighten, with_alpha

_DIMENSION_RE = re.compile(r"^(-?\d+(?:\.\d+)?)(px|rem|em|%)$")

TOKEN_TRANSFORM_TYPES = ("scale", "darken", "lighten", "alpha")


def format_number(value: float) -> str:
    """Compact number text: 24.0 -> "24", 1.5 -> "1.5", 0.3333333 -> "0.3333"."""
    rounded = round(value, 4)
    if float(rounded).is_integer():
        return str(int(rounded))
    return f"{rounded:.4f}".rstrip("0").rstrip(".")


def scale_value(value: Any, factor: float) -> Any:
    """Multiply a number or a dimension string ("16px", "1.5rem"); other values pass through."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        result = value * factor
        return int(result) if float(result).is_integer() else result
    if isinstance(value, str):
        m = _DIMENSION_RE.match(value.strip())
        if m:
            return f"{format_number(float(m.group(1)) * factor)}{m.group(2)}"
    return value


def apply_token_transform(
    value: Any,
    transform: Callable[..., Any] | dict[str, Any],
    options: dict[str, Any] | None = None,
) -> Any:
    """
    Apply one transform to a token value.

    Raises:
        TokenError: If the transform type is not recognized
        InvalidColorValue: If a color transform receives a non-color
    """
    if callable(transform):
        return transform(value, options or {})

    kind = transform.get("type")
    if kind == "scale":
        return scale_value(value, float(transform.get("factor", 1)))
    if kind == "darken":
        return darken(value, float(transform.get("amount", 0.1)))
    if kind == "lighten":
        return lighten(value, float(transform.get("amount", 0.1)))
    if kind == "alpha":
        return with_alpha(value, float(transform.get("alpha", 1)))

    raise TokenError(
        f"Unknown token transform type: {kind!r} "
        f"(expected one of {', '.join(TOKEN_TRANSFORM_TYPES)})"
    )
