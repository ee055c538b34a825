"""Tests for parsing raw rule and condition configuration."""

import pytest

from dsbridge.core.errors import MissingRuleField, RuleLocation, UnknownRuleType
from dsbridge.core.ir.conditions import (
    AllOf,
    AnyOf,
    BoolCondition,
    Comparison,
    ExpressionCondition,
    Not,
    PredicateCondition,
    parse_condition,
)
from dsbridge.core.ir.rules import (
    ChainRule,
    ComputedRule,
    ConditionalRule,
    CustomRule,
    DirectRule,
    MappingRule,
    MultiValueRule,
    TemplateRule,
    looks_like_rule,
    parse_rule,
)

# =============================================================================
# Rules
# =============================================================================


class TestParseRule:
    def test_direct(self) -> None:
        rule = parse_rule({"type": "direct", "target": "density"})
        assert isinstance(rule, DirectRule)
        assert rule.target == "density"

    def test_built_rule_is_returned_as_is(self) -> None:
        rule = DirectRule()
        assert parse_rule(rule) is rule

    def test_mapping_default_is_tracked(self) -> None:
        with_default = parse_rule({"type": "mapping", "mapping": {"a": 1}, "default": None})
        without = parse_rule({"type": "mapping", "mapping": {"a": 1}})
        assert isinstance(with_default, MappingRule)
        assert with_default.has_default
        assert not without.has_default

    def test_mapping_values_that_are_rules_are_parsed(self) -> None:
        rule = parse_rule(
            {"type": "mapping", "mapping": {"a": {"type": "template", "template": "x-${value}"}}}
        )
        assert isinstance(rule.mapping["a"], TemplateRule)

    def test_conditional_else_becomes_otherwise(self) -> None:
        rule = parse_rule(
            {"type": "conditional", "conditions": [{"if": True, "then": 1}], "else": 2}
        )
        assert isinstance(rule, ConditionalRule)
        assert rule.otherwise == 2
        assert rule.branches[0].has_then

    def test_conditional_branch_without_if(self) -> None:
        with pytest.raises(MissingRuleField) as exc:
            parse_rule(
                {"type": "conditional", "conditions": [{"then": 1}]}, RuleLocation("size")
            )
        assert "size[branch:0]" in str(exc.value)

    def test_computed_cache_alias(self) -> None:
        rule = parse_rule({"type": "computed", "compute": "value * 2", "cache": False})
        assert isinstance(rule, ComputedRule)
        assert rule.cacheable is False

    @pytest.mark.parametrize("alias", ["multiValue", "multi-prop", "multiProp", "multi_value"])
    def test_multi_value_aliases(self, alias: str) -> None:
        rule = parse_rule({"type": alias, "outputs": {"a": 1}, "props": ["x", "y"]})
        assert isinstance(rule, MultiValueRule)
        assert rule.sources == ["x", "y"]

    def test_multi_value_needs_combiner_or_outputs(self) -> None:
        with pytest.raises(MissingRuleField, match="combiner|outputs"):
            parse_rule({"type": "multiValue"})

    def test_custom_requires_name(self) -> None:
        with pytest.raises(MissingRuleField) as exc:
            parse_rule({"type": "custom"})
        assert exc.value.field_name == "name"

    def test_custom_options(self) -> None:
        rule = parse_rule({"type": "custom", "name": "join", "options": {"separator": " "}})
        assert isinstance(rule, CustomRule)
        assert rule.options == {"separator": " "}

    def test_chain_error_location(self) -> None:
        with pytest.raises(UnknownRuleType) as exc:
            parse_rule(
                {"type": "chain", "chain": [{"type": "direct"}, {"type": "nope"}]},
                RuleLocation("size"),
            )
        assert "size[chain:1]" in str(exc.value)

    def test_chain_steps(self) -> None:
        rule = parse_rule({"type": "chain", "chain": [{"type": "direct"}]})
        assert isinstance(rule, ChainRule)
        assert len(rule.steps) == 1

    def test_unknown_type(self) -> None:
        with pytest.raises(UnknownRuleType, match="'sparkle'"):
            parse_rule({"type": "sparkle"})

    def test_missing_type(self) -> None:
        with pytest.raises(UnknownRuleType):
            parse_rule({"mapping": {}})

    def test_non_dict(self) -> None:
        with pytest.raises(UnknownRuleType):
            parse_rule("direct")

    def test_template_requires_template(self) -> None:
        with pytest.raises(MissingRuleField):
            parse_rule({"type": "template"})

    def test_looks_like_rule(self) -> None:
        assert looks_like_rule({"type": "direct"})
        assert not looks_like_rule({"type": "text"})
        assert not looks_like_rule("direct")


# =============================================================================
# Conditions
# =============================================================================


class TestParseCondition:
    def test_bool(self) -> None:
        assert parse_condition(True) == BoolCondition(value=True)

    def test_string_is_expression(self) -> None:
        cond = parse_condition('size === "lg"')
        assert isinstance(cond, ExpressionCondition)

    def test_callable_is_predicate(self) -> None:
        cond = parse_condition(lambda value, inputs, context: True)
        assert isinstance(cond, PredicateCondition)

    def test_prop_comparison(self) -> None:
        cond = parse_condition({"prop": "size", "operator": ">", "value": 2})
        assert cond == Comparison(prop="size", operator=">", value=2)

    def test_bare_value_comparison(self) -> None:
        cond = parse_condition({"value": "lg"})
        assert isinstance(cond, Comparison)
        assert cond.prop is None
        assert cond.operator == "==="

    def test_composition(self) -> None:
        cond = parse_condition({"and": [True, {"or": [False, {"not": True}]}]})
        assert isinstance(cond, AllOf)
        assert isinstance(cond.conditions[1], AnyOf)
        assert isinstance(cond.conditions[1].conditions[1], Not)

    def test_unrecognized_object_never_matches(self) -> None:
        assert parse_condition({"sparkle": 1}) == BoolCondition(value=False)
