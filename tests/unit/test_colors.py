"""Tests for color parsing, manipulation, and token value transforms."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from dsbridge.core.errors import InvalidColorValue, TokenError
from dsbridge.themes.colors import (
    RGBA,
    calculate_luminance,
    contrast_ratio,
    darken,
    format_color,
    get_lightness,
    is_color,
    lighten,
    parse_color,
    set_lightness,
    with_alpha,
)
from dsbridge.themes.token_transforms import apply_token_transform, format_number, scale_value

hex_colors = st.tuples(
    st.integers(0, 255), st.integers(0, 255), st.integers(0, 255)
).map(lambda rgb: "#{:02x}{:02x}{:02x}".format(*rgb))


# =============================================================================
# Parsing
# =============================================================================


class TestParseColor:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("#fff", RGBA(255, 255, 255)),
            ("#3b82f6", RGBA(59, 130, 246)),
            ("#3B82F6", RGBA(59, 130, 246)),
            ("#00000080", RGBA(0, 0, 0, 0.502)),
            ("rgb(59, 130, 246)", RGBA(59, 130, 246)),
            ("rgba(0, 0, 0, 0.1)", RGBA(0, 0, 0, 0.1)),
            ("rgba(0 0 0 / 50%)", RGBA(0, 0, 0, 0.5)),
        ],
    )
    def test_valid(self, text: str, expected: RGBA) -> None:
        assert parse_color(text) == expected

    @pytest.mark.parametrize("text", ["blue", "#12", "#gggggg", "rgb(300, 0, 0)", "", None, 12])
    def test_invalid(self, text: object) -> None:
        with pytest.raises(InvalidColorValue):
            parse_color(text)
        assert not is_color(text)

    def test_format_round_trip(self) -> None:
        assert format_color(parse_color("#3B82F6")) == "#3b82f6"
        assert format_color(RGBA(0, 0, 0, 0.25)) == "rgba(0, 0, 0, 0.25)"


# =============================================================================
# Luminance and contrast
# =============================================================================


class TestLuminance:
    def test_white_and_black(self) -> None:
        assert calculate_luminance("#ffffff") == pytest.approx(1.0)
        assert calculate_luminance("#000000") == pytest.approx(0.0)

    def test_contrast_extremes(self) -> None:
        assert contrast_ratio("#ffffff", "#000000") == pytest.approx(21.0)
        assert contrast_ratio("#777777", "#777777") == pytest.approx(1.0)

    def test_contrast_is_symmetric(self) -> None:
        assert contrast_ratio("#3b82f6", "#ffffff") == contrast_ratio("#ffffff", "#3b82f6")

    @given(hex_colors)
    @settings(max_examples=100)
    def test_luminance_range(self, color: str) -> None:
        """Invariant: luminance stays within 0..1 for any color."""
        assert 0.0 <= calculate_luminance(color) <= 1.0


# =============================================================================
# Lightness
# =============================================================================


class TestLightness:
    def test_set_lightness_extremes(self) -> None:
        assert set_lightness("#3b82f6", 1.0) == "#ffffff"
        assert set_lightness("#3b82f6", 0.0) == "#000000"

    def test_lighten_and_darken(self) -> None:
        base = get_lightness("#3b82f6")
        assert get_lightness(lighten("#3b82f6", 0.1)) > base
        assert get_lightness(darken("#3b82f6", 0.1)) < base

    def test_clamped(self) -> None:
        assert lighten("#ffffff", 0.5) == "#ffffff"
        assert darken("#000000", 0.5) == "#000000"

    def test_alpha_is_preserved(self) -> None:
        assert set_lightness("rgba(59, 130, 246, 0.5)", 0.5).startswith("rgba(")

    def test_with_alpha(self) -> None:
        assert with_alpha("#000", 0.1) == "rgba(0, 0, 0, 0.1)"
        assert with_alpha("#000", 2) == "rgba(0, 0, 0, 1)"


# =============================================================================
# Token value transforms
# =============================================================================


class TestTokenTransforms:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(24.0, "24"), (1.5, "1.5"), (1 / 3, "0.3333"), (-2.0, "-2")],
    )
    def test_format_number(self, value: float, expected: str) -> None:
        assert format_number(value) == expected

    @pytest.mark.parametrize(
        ("value", "factor", "expected"),
        [
            (4, 2, 8),
            (1.5, 2, 3),
            ("16px", 1.5, "24px"),
            ("1.5rem", 2, "3rem"),
            ("-4px", 0.5, "-2px"),
            ("auto", 2, "auto"),
            (True, 2, True),
        ],
    )
    def test_scale_value(self, value: object, factor: float, expected: object) -> None:
        assert scale_value(value, factor) == expected

    def test_dict_transforms(self) -> None:
        assert apply_token_transform("8px", {"type": "scale", "factor": 2}) == "16px"
        assert apply_token_transform("#000000", {"type": "alpha", "alpha": 0.5}) == (
            "rgba(0, 0, 0, 0.5)"
        )
        assert apply_token_transform("#3b82f6", {"type": "darken"}) == darken("#3b82f6", 0.1)
        assert apply_token_transform("#3b82f6", {"type": "lighten", "amount": 0.2}) == lighten(
            "#3b82f6", 0.2
        )

    def test_callable_receives_options(self) -> None:
        result = apply_token_transform(
            "x", lambda value, options: f"{options['name']}={value}", {"name": "brand"}
        )
        assert result == "brand=x"

    def test_unknown_type(self) -> None:
        with pytest.raises(TokenError, match="Unknown token transform type"):
            apply_token_transform("x", {"type": "sparkle"})

    def test_color_transform_on_non_color(self) -> None:
        with pytest.raises(InvalidColorValue):
            apply_token_transform("16px", {"type": "darken"})
