"""
Tests for RuleEvaluator.

One test class per rule variant, plus the cross-cutting behaviors:
library scoping, determinism, and computed-rule caching.
"""

from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from dsbridge.core.cache import CacheLayer
from dsbridge.core.errors import RuleLocation, TransformError, UnknownCustomTransform
from dsbridge.core.ir.rules import DirectRule, MappingRule
from dsbridge.transform.context import TransformContext
from dsbridge.transform.evaluator import RuleEvaluator, render_template
from dsbridge.transform.registry import TransformRegistry


def with_inputs(context: TransformContext, **inputs: Any) -> TransformContext:
    return context.with_inputs(inputs)


# =============================================================================
# Direct / mapping / template
# =============================================================================


class TestDirect:
    def test_passes_value_through(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        assert evaluator.evaluate({"type": "direct"}, "lg", context) == "lg"

    def test_mapper(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        rule = DirectRule(mapper=lambda value, ctx: f"{ctx.library}:{value}")
        assert evaluator.evaluate(rule, "lg", context) == "vuetify:lg"


class TestMapping:
    def test_hit(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        rule = {"type": "mapping", "mapping": {"primary": "elevated"}}
        assert evaluator.evaluate(rule, "primary", context) == "elevated"

    def test_miss_returns_value(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        rule = {"type": "mapping", "mapping": {"a": "X"}}
        assert evaluator.evaluate(rule, "b", context) == "b"

    def test_miss_returns_default(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = {"type": "mapping", "mapping": {"a": "X"}, "default": "Y"}
        assert evaluator.evaluate(rule, "b", context) == "Y"

    def test_explicit_none_default(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = MappingRule(mapping={"a": "X"}, default=None)
        assert evaluator.evaluate(rule, "b", context) is None

    def test_boolean_value_matches_string_key(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = {"type": "mapping", "mapping": {"true": "block", "false": "inline"}}
        assert evaluator.evaluate(rule, True, context) == "block"

    def test_unhashable_value_misses(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = {"type": "mapping", "mapping": {"a": "X"}}
        assert evaluator.evaluate(rule, ["a"], context) == ["a"]

    def test_nested_rule_output(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        rule = {
            "type": "mapping",
            "mapping": {"check": {"type": "template", "template": "mdi-${value}"}},
        }
        assert evaluator.evaluate(rule, "check", context) == "mdi-check"


class TestTemplate:
    def test_value_and_inputs(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        ctx = with_inputs(context, size="lg")
        rule = {"type": "template", "template": "btn-${value}-${size}"}
        assert evaluator.evaluate(rule, "primary", ctx) == "btn-primary-lg"

    def test_missing_placeholder_renders_empty(self) -> None:
        assert render_template("a-${missing}-b", None, {}) == "a--b"

    def test_nested_inputs(self) -> None:
        assert render_template("${theme.mode}", None, {"theme": {"mode": "dark"}}) == "dark"


# =============================================================================
# Conditional
# =============================================================================


class TestConditional:
    def test_first_match_wins(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        rule = {
            "type": "conditional",
            "conditions": [{"if": True, "then": "first"}, {"if": True, "then": "second"}],
        }
        assert evaluator.evaluate(rule, None, context) == "first"

    def test_else(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        rule = {"type": "conditional", "conditions": [{"if": False, "then": 1}], "else": 2}
        assert evaluator.evaluate(rule, None, context) == 2

    def test_no_match_and_no_else_returns_value(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = {"type": "conditional", "conditions": [{"if": False, "then": 1}]}
        assert evaluator.evaluate(rule, "keep", context) == "keep"

    def test_short_circuit(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        calls: list[str] = []

        def later(value: Any, inputs: dict[str, Any], ctx: TransformContext) -> bool:
            calls.append("later")
            return True

        rule = {
            "type": "conditional",
            "conditions": [{"if": True, "then": "hit"}, {"if": later, "then": "miss"}],
        }
        assert evaluator.evaluate(rule, None, context) == "hit"
        assert calls == []

    def test_branch_transform(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        rule = {
            "type": "conditional",
            "conditions": [{"if": 'value === "lg"', "transform": {"type": "custom", "name": "uppercase"}}],
        }
        assert evaluator.evaluate(rule, "lg", context) == "LG"

    def test_condition_on_sibling_input(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        ctx = with_inputs(context, icon="check", iconPosition="right")
        rule = {
            "type": "conditional",
            "conditions": [{"if": {"prop": "iconPosition", "value": "right"}, "then": "append"}],
            "else": "prepend",
        }
        assert evaluator.evaluate(rule, "check", ctx) == "append"


# =============================================================================
# Computed
# =============================================================================


class TestComputed:
    def test_expression(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        ctx = with_inputs(context, base=4)
        assert evaluator.evaluate({"type": "computed", "compute": "px(base * value)"}, 2, ctx) == "8px"

    def test_callable(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        rule = {"type": "computed", "compute": lambda value, inputs, ctx: value * 10}
        assert evaluator.evaluate(rule, 3, context) == 30

    def test_failed_expression_is_transform_error(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        with pytest.raises(TransformError) as exc:
            evaluator.evaluate(
                {"type": "computed", "compute": "value / 0"}, 1, context, RuleLocation("size")
            )
        assert exc.value.location == RuleLocation("size")

    def test_results_are_cached(self, context: TransformContext) -> None:
        cache = CacheLayer()
        evaluator = RuleEvaluator(cache=cache)
        calls: list[Any] = []

        def compute(value: Any, inputs: dict[str, Any], ctx: TransformContext) -> Any:
            calls.append(value)
            return value

        rule = {"type": "computed", "compute": compute}
        evaluator.evaluate(rule, 1, context)
        evaluator.evaluate(rule, 1, context)
        evaluator.evaluate(rule, 2, context)
        assert calls == [1, 2]
        assert cache.stats()["hits"] == 1

    def test_uncacheable_runs_every_time(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        calls: list[Any] = []

        def compute(value: Any, inputs: dict[str, Any], ctx: TransformContext) -> Any:
            calls.append(value)
            return value

        rule = {"type": "computed", "compute": compute, "cacheable": False}
        evaluator.evaluate(rule, 1, context)
        evaluator.evaluate(rule, 1, context)
        assert calls == [1, 1]

    def test_cache_key_includes_sibling_inputs(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = {"type": "computed", "compute": "value + size"}
        assert evaluator.evaluate(rule, "a", with_inputs(context, size="-lg")) == "a-lg"
        assert evaluator.evaluate(rule, "a", with_inputs(context, size="-sm")) == "a-sm"

    def test_failures_are_not_cached(self, context: TransformContext) -> None:
        cache = CacheLayer()
        evaluator = RuleEvaluator(cache=cache)

        def boom(value: Any, inputs: dict[str, Any], ctx: TransformContext) -> Any:
            raise ValueError("boom")

        with pytest.raises(ValueError):
            evaluator.evaluate({"type": "computed", "compute": boom}, 1, context)
        assert len(cache) == 0


# =============================================================================
# Multi-value / custom / chain
# =============================================================================


class TestMultiValue:
    def test_combiner_receives_selected_sources(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        ctx = with_inputs(context, icon="check", iconPosition="right")
        rule = {
            "type": "multiValue",
            "sources": ["icon", "iconPosition"],
            "combiner": lambda selected, c: {
                ("appendIcon" if selected["iconPosition"] == "right" else "prependIcon"): selected[
                    "icon"
                ]
            },
        }
        result = evaluator.evaluate(rule, "check", ctx, RuleLocation("icon"))
        assert result == {"appendIcon": "check"}

    def test_combiner_defaults_to_own_input(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = {"type": "multiValue", "combiner": lambda selected, c: dict(selected)}
        assert evaluator.evaluate(rule, 5, context, RuleLocation("gap")) == {"gap": 5}

    def test_outputs_map(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        rule = {
            "type": "multiValue",
            "outputs": {
                "label": {"type": "custom", "name": "capitalize"},
                "variant": "text",
                "length": lambda value, inputs, ctx: len(value),
            },
        }
        result = evaluator.evaluate(rule, "save", context)
        assert result == {"label": "Save", "variant": "text", "length": 4}


class TestCustom:
    def test_builtin(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        assert evaluator.evaluate({"type": "custom", "name": "uppercase"}, "lg", context) == "LG"

    def test_options_are_merged_into_context(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = {"type": "custom", "name": "join", "options": {"separator": " "}}
        assert evaluator.evaluate(rule, ["a", "b"], context) == "a b"

    def test_registered(
        self, registry: TransformRegistry, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        registry.register("double", lambda value, inputs, ctx: value * 2)
        assert evaluator.evaluate({"type": "custom", "name": "double"}, 4, context) == 8

    def test_unknown(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        with pytest.raises(UnknownCustomTransform) as exc:
            evaluator.evaluate(
                {"type": "custom", "name": "sparkle"}, 1, context, RuleLocation("size")
            )
        assert exc.value.name == "sparkle"
        assert str(exc.value).startswith("size:")


class TestChain:
    def test_threads_value(self, evaluator: RuleEvaluator, context: TransformContext) -> None:
        rule = {
            "type": "chain",
            "chain": [
                {"type": "mapping", "mapping": {"primary": "main"}},
                {"type": "custom", "name": "uppercase"},
                {"type": "template", "template": "btn-${value}"},
            ],
        }
        assert evaluator.evaluate(rule, "primary", context) == "btn-MAIN"

    def test_error_location_names_the_step(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = {"type": "chain", "chain": [{"type": "direct"}, {"type": "custom", "name": "nope"}]}
        with pytest.raises(UnknownCustomTransform) as exc:
            evaluator.evaluate(rule, 1, context, RuleLocation("size"))
        assert exc.value.location == RuleLocation("size", ("chain:1",))


# =============================================================================
# Library scoping and determinism
# =============================================================================


class TestLibraryScope:
    def test_matching_library_applies(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = {"type": "custom", "name": "uppercase", "library": "vuetify"}
        assert evaluator.evaluate(rule, "lg", context) == "LG"

    def test_other_library_passes_value_through(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = {"type": "custom", "name": "uppercase", "library": "primevue"}
        assert evaluator.evaluate(rule, "lg", context) == "lg"

    def test_library_scoped_step_inside_chain(
        self, evaluator: RuleEvaluator, context: TransformContext
    ) -> None:
        rule = {
            "type": "chain",
            "chain": [
                {"type": "custom", "name": "uppercase", "library": "primevue"},
                {"type": "template", "template": "${value}!"},
            ],
        }
        assert evaluator.evaluate(rule, "lg", context) == "lg!"


class TestDeterminism:
    @given(st.text(max_size=20), st.sampled_from(["primary", "secondary", "text"]))
    @settings(max_examples=50)
    def test_same_inputs_same_output(self, size: str, variant: str) -> None:
        """Invariant: evaluation is a pure function of rule, value, and context."""
        evaluator = RuleEvaluator()
        context = TransformContext(component="Button", library="vuetify", all_inputs={"size": size})
        rule = {
            "type": "conditional",
            "conditions": [{"if": 'value === "primary"', "then": {"type": "template", "template": "${size}"}}],
            "else": {"type": "mapping", "mapping": {"text": "plain"}},
        }
        assert evaluator.evaluate(rule, variant, context) == evaluator.evaluate(rule, variant, context)
