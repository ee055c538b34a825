"""Tests for ThemeCompiler and CSS minification."""

from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from dsbridge.core.cache import CacheLayer
from dsbridge.themes.compiler import (
    DARK_MODE_SELECTOR,
    CompiledTheme,
    ThemeCompiler,
    css_value,
    kebab,
    minify_css,
)


@pytest.fixture
def compiler() -> ThemeCompiler:
    return ThemeCompiler()


TOKENS: dict[str, Any] = {
    "colors": {
        "primary": {"500": "#3b82f6", "600": "#2563eb"},
        "white": "#ffffff",
    },
    "spacing": {"scale": {"4": "16px", "md": "16px"}},
    "typography": {
        "scale": {"md": {"fontSize": "16px", "lineHeight": "1.5"}},
        "fontWeights": {"bold": 700},
    },
    "shadows": {"elevation": {"0": "none", "1": "0 1px 2px black"}},
}


class TestHelpers:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("fontSize", "font-size"), ("onColor", "on-color"), ("2xl", "2xl"), (500, "500")],
    )
    def test_kebab(self, name: Any, expected: str) -> None:
        assert kebab(name) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(16, "16"), (1.5, "1.5"), (True, "true"), (["Inter", "sans-serif"], "Inter, sans-serif")],
    )
    def test_css_value(self, value: Any, expected: str) -> None:
        assert css_value(value) == expected


# =============================================================================
# Property table
# =============================================================================


class TestPropertyTable:
    def test_names(self, compiler: ThemeCompiler) -> None:
        table = compiler.compile(TOKENS).property_table
        assert table["--ds-colors-primary-500"] == "#3b82f6"
        assert table["--ds-colors-white"] == "#ffffff"
        assert table["--ds-spacing-scale-4"] == "16px"
        assert table["--ds-typography-scale-md-font-size"] == "16px"
        assert table["--ds-typography-font-weights-bold"] == "700"

    def test_prefix(self, compiler: ThemeCompiler) -> None:
        table = compiler.compile({"colors": {"white": "#fff"}}, {"prefix": "acme"}).property_table
        assert table == {"--acme-colors-white": "#fff"}

    def test_value_wrapper_collapses(self, compiler: ThemeCompiler) -> None:
        table = compiler.compile({"radii": {"md": {"value": "6px", "note": "x"}}}).property_table
        assert table == {"--ds-radii-md": "6px"}

    def test_none_is_skipped(self, compiler: ThemeCompiler) -> None:
        table = compiler.compile({"colors": {"a": None, "b": "#000"}}).property_table
        assert table == {"--ds-colors-b": "#000"}

    def test_lists_are_joined(self, compiler: ThemeCompiler) -> None:
        table = compiler.compile({"fonts": {"sans": ["Inter", "sans-serif"]}}).property_table
        assert table == {"--ds-fonts-sans": "Inter, sans-serif"}

    def test_empty_map(self, compiler: ThemeCompiler) -> None:
        compiled = compiler.compile({})
        assert compiled.property_table == {}
        assert compiled.to_css() == ""


# =============================================================================
# Utilities
# =============================================================================


class TestUtilities:
    def test_color_utilities(self, compiler: ThemeCompiler) -> None:
        rules = compiler.compile(TOKENS).rule_text
        assert ".ds-text-primary-500 { color: var(--ds-colors-primary-500); }" in rules
        assert ".ds-bg-white { background-color: var(--ds-colors-white); }" in rules
        assert ".ds-border-primary-600 { border-color: var(--ds-colors-primary-600); }" in rules

    def test_spacing_utilities(self, compiler: ThemeCompiler) -> None:
        rules = compiler.compile(TOKENS).rule_text
        assert ".ds-m-4 { margin: var(--ds-spacing-scale-4); }" in rules
        assert (
            ".ds-px-md { padding-left: var(--ds-spacing-scale-md); "
            "padding-right: var(--ds-spacing-scale-md); }"
        ) in rules
        assert ".ds-gap-4 { gap: var(--ds-spacing-scale-4); }" in rules

    def test_flat_spacing_utilities(self, compiler: ThemeCompiler) -> None:
        rules = compiler.compile({"spacing": {"gutter": "24px"}}).rule_text
        assert ".ds-mt-gutter { margin-top: var(--ds-spacing-gutter); }" in rules

    def test_typography_utilities(self, compiler: ThemeCompiler) -> None:
        rules = compiler.compile(TOKENS).rule_text
        assert "  font-size: var(--ds-typography-scale-md-font-size);" in rules
        assert "  line-height: var(--ds-typography-scale-md-line-height);" in rules
        assert "letter-spacing" not in rules
        assert ".ds-font-bold { font-weight: var(--ds-typography-font-weights-bold); }" in rules

    def test_shadow_utilities(self, compiler: ThemeCompiler) -> None:
        rules = compiler.compile(TOKENS).rule_text
        assert ".ds-shadow-1 { box-shadow: var(--ds-shadows-elevation-1); }" in rules

    def test_only_present_categories(self, compiler: ThemeCompiler) -> None:
        rules = compiler.compile({"colors": {"white": "#fff"}}).rule_text
        assert ".ds-bg-white" in rules
        assert ".ds-m-" not in rules
        assert ".ds-shadow-" not in rules

    def test_utility_vars_exist_in_table(self, compiler: ThemeCompiler) -> None:
        compiled = compiler.compile(TOKENS)
        for name in compiled.property_table:
            assert name.startswith("--ds-")
        for ref in ("--ds-colors-primary-500", "--ds-spacing-scale-md", "--ds-shadows-elevation-1"):
            assert f"var({ref})" in compiled.rule_text
            assert ref in compiled.property_table

    def test_utilities_disabled(self, compiler: ThemeCompiler) -> None:
        assert compiler.compile(TOKENS, {"generate_utilities": False}).rule_text == ""


# =============================================================================
# Components, dark mode, output
# =============================================================================


class TestOptionalBlocks:
    def test_components(self, compiler: ThemeCompiler) -> None:
        tokens = {"colors": {"primary": {"base": "#3b82f6", "dark": "#1d4ed8"}}}
        rules = compiler.compile(tokens, {"generate_components": True}).rule_text
        assert ".ds-button {" in rules
        assert ".ds-button--primary {" in rules
        assert "color: var(--ds-colors-primary-on-color, white);" in rules
        assert ".ds-card {" in rules
        assert ".ds-input:focus {" in rules

    def test_dark_mode(self, compiler: ThemeCompiler) -> None:
        tokens = {"colors": {"primary": {"base": "#3b82f6", "dark": "#1d4ed8"}, "white": "#fff"}}
        rules = compiler.compile(tokens, {"generate_dark_mode": True}).rule_text
        assert f"{DARK_MODE_SELECTOR} {{\n  --ds-colors-primary-base: #1d4ed8;\n}}" in rules

    def test_dark_mode_without_variants(self, compiler: ThemeCompiler) -> None:
        rules = compiler.compile(
            {"colors": {"white": "#fff"}}, {"generate_dark_mode": True, "generate_utilities": False}
        ).rule_text
        assert rules == ""


class TestCompiledTheme:
    def test_custom_properties_block(self) -> None:
        theme = CompiledTheme(property_table={"--ds-colors-white": "#fff"})
        assert theme.custom_properties() == ":root {\n  --ds-colors-white: #fff;\n}"
        assert theme.custom_properties(".light").startswith(".light {")

    def test_root_selector_option(self, compiler: ThemeCompiler) -> None:
        compiled = compiler.compile({"colors": {"white": "#fff"}}, {"root_selector": ":host"})
        assert compiled.to_css().startswith(":host {")

    def test_minified(self, compiler: ThemeCompiler) -> None:
        compiled = compiler.compile({"colors": {"white": "#fff"}}, {"minify": True})
        css = compiled.to_css()
        assert "\n" not in css
        assert css.startswith(":root{--ds-colors-white:#fff}")

    def test_memoized(self) -> None:
        cache = CacheLayer()
        compiler = ThemeCompiler(cache)
        first = compiler.compile(TOKENS)
        assert compiler.compile(TOKENS) == first
        assert cache.stats()["hits"] == 1

    def test_cached_result_is_not_shared(self, compiler: ThemeCompiler) -> None:
        first = compiler.compile(TOKENS, {"prefix": "ds"})
        first.property_table["--ds-colors-primary-500"] = "hacked"
        second = compiler.compile(TOKENS, {"prefix": "ds"})
        assert second.property_table["--ds-colors-primary-500"] == "#3b82f6"


class TestMinify:
    def test_basic(self) -> None:
        css = ".a {\n  color: red;\n  margin: 0 auto;\n}\n\n.b { gap: 4px; }"
        assert minify_css(css) == ".a{color:red;margin:0 auto}.b{gap:4px}"

    @given(
        st.lists(
            st.sampled_from(
                [".a", " ", "\n", "{", "}", ":", ";", ",", "color", "red", "0 auto", "var(--x)"]
            ),
            max_size=40,
        ).map("".join)
    )
    @settings(max_examples=200)
    def test_idempotent(self, css: str) -> None:
        """Invariant: minifying twice equals minifying once."""
        assert minify_css(minify_css(css)) == minify_css(css)
