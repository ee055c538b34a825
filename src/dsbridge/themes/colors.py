"""
Color parsing and manipulation.

Accepts hex (#rgb, #rgba, #rrggbb, #rrggbbaa), rgb() and rgba() strings.
Lightness adjustments work in HSL; luminance follows the sRGB relative
luminance definition (WCAG coefficients 0.2126 / 0.7152 / 0.0722).
"""

from __future__ import annotations

import colorsys
import re
from dataclasses import dataclass

from dsbridge.core.errors import InvalidColorValue

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_RGB_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*[, ]\s*(\d{1,3})\s*[, ]\s*(\d{1,3})\s*(?:[,/]\s*([\d.]+%?)\s*)?\)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class RGBA:
    """An sRGB color with 0-255 channels and 0-1 alpha."""

    r: int
    g: int
    b: int
    a: float = 1.0


def _format_alpha(alpha: float) -> str:
    text = f"{alpha:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def parse_color(value: object) -> RGBA:
    """
    Parse a color string.

    Raises:
        InvalidColorValue: If the value is not a hex, rgb() or rgba() color
    """
    if not isinstance(value, str):
        raise InvalidColorValue(value)
    text = value.strip()

    m = _HEX_RE.match(text)
    if m:
        digits = m.group(1)
        if len(digits) in (3, 4):
            digits = "".join(c * 2 for c in digits)
        r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
        a = int(digits[6:8], 16) / 255 if len(digits) == 8 else 1.0
        return RGBA(r, g, b, round(a, 3))

    m = _RGB_RE.match(text)
    if m:
        r, g, b = (int(m.group(i)) for i in (1, 2, 3))
        if max(r, g, b) > 255:
            raise InvalidColorValue(value)
        alpha_text = m.group(4)
        if alpha_text is None:
            a = 1.0
        elif alpha_text.endswith("%"):
            a = float(alpha_text[:-1]) / 100
        else:
            a = float(alpha_text)
        return RGBA(r, g, b, min(1.0, max(0.0, a)))

    raise InvalidColorValue(value)


def is_color(value: object) -> bool:
    """True if ``parse_color`` accepts the value."""
    try:
        parse_color(value)
    except InvalidColorValue:
        return False
    return True


def format_color(color: RGBA) -> str:
    """Lowercase #rrggbb for opaque colors, rgba() otherwise."""
    if color.a >= 1.0:
        return f"#{color.r:02x}{color.g:02x}{color.b:02x}"
    return f"rgba({color.r}, {color.g}, {color.b}, {_format_alpha(color.a)})"


def to_hsl(color: str) -> tuple[float, float, float]:
    """Hue, saturation, lightness, each 0-1."""
    rgba = parse_color(color)
    h, l, s = colorsys.rgb_to_hls(rgba.r / 255, rgba.g / 255, rgba.b / 255)
    return h, s, l


def set_lightness(color: str, lightness: float) -> str:
    """Return the color with its HSL lightness replaced (clamped to 0-1)."""
    rgba = parse_color(color)
    h, l, s = colorsys.rgb_to_hls(rgba.r / 255, rgba.g / 255, rgba.b / 255)
    r, g, b = colorsys.hls_to_rgb(h, min(1.0, max(0.0, lightness)), s)
    return format_color(RGBA(round(r * 255), round(g * 255), round(b * 255), rgba.a))


def get_lightness(color: str) -> float:
    return to_hsl(color)[2]


def lighten(color: str, amount: float) -> str:
    return set_lightness(color, get_lightness(color) + amount)


def darken(color: str, amount: float) -> str:
    return set_lightness(color, get_lightness(color) - amount)


def with_alpha(color: str, alpha: float) -> str:
    """Re-express a color at the given opacity as rgba()."""
    rgba = parse_color(color)
    alpha = min(1.0, max(0.0, alpha))
    return f"rgba({rgba.r}, {rgba.g}, {rgba.b}, {_format_alpha(alpha)})"


def _linearize(channel: int) -> float:
    c = channel / 255
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def calculate_luminance(color: str) -> float:
    """
    Relative luminance of a color.

    Returns:
        0.0 for black through 1.0 for white
    """
    rgba = parse_color(color)
    return (
        0.2126 * _linearize(rgba.r) + 0.7152 * _linearize(rgba.g) + 0.0722 * _linearize(rgba.b)
    )


def contrast_ratio(first: str, second: str) -> float:
    """WCAG contrast ratio between two colors (1.0 to 21.0)."""
    lighter, darker = sorted(
        (calculate_luminance(first), calculate_luminance(second)), reverse=True
    )
    return (lighter + 0.05) / (darker + 0.05)
