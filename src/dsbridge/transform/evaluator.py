"""
Rule evaluation.

``RuleEvaluator.evaluate(rule, value, context)`` maps one input value
through one rule. Dispatch is exhaustive over the Rule variants; raw dict
rules are parsed first. Every failure is a typed error carrying the
location of the offending rule; nothing is cached for a failed evaluation.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from dsbridge.core.cache import CacheLayer
from dsbridge.core.errors import (
    ExpressionError,
    MissingRuleField,
    RuleLocation,
    TransformError,
    UnknownCustomTransform,
    UnknownRuleType,
)
from dsbridge.core.expression_lang import compile_expr, evaluate
from dsbridge.core.ir.rules import (
    RULE_TYPES,
    ChainRule,
    ComputedRule,
    ConditionalRule,
    CustomRule,
    DirectRule,
    MappingRule,
    MultiValueRule,
    Rule,
    RuleType,
    TemplateRule,
    parse_rule,
)
from dsbridge.transform.conditions import ConditionEvaluator
from dsbridge.transform.context import TransformContext
from dsbridge.transform.registry import TransformRegistry

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{\s*([A-Za-z_][\w.]*)\s*\}")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _lookup_key(value: Any) -> Any:
    """String form of a scalar used as a fallback mapping key ("true", "2")."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if value is None:
        return "null"
    return None


def render_template(template: str, value: Any, inputs: dict[str, Any]) -> str:
    """
    Substitute ``${value}`` and ``${inputName}`` placeholders.

    Dotted names walk nested inputs; missing values render as "".
    """

    def substitute(match: re.Match[str]) -> str:
        path = match.group(1).split(".")
        current: Any = value if path[0] == "value" else inputs.get(path[0])
        for segment in path[1:]:
            current = current.get(segment) if isinstance(current, dict) else None
        return _text(current)

    return _PLACEHOLDER.sub(substitute, template)


class RuleEvaluator:
    """
    Evaluates transformation rules.

    Args:
        registry: Custom transformations; a fresh registry with the
            built-ins is created when omitted
        cache: Memo table for computed rules
        conditions: Condition evaluator used by conditional rules
    """

    def __init__(
        self,
        registry: TransformRegistry | None = None,
        cache: CacheLayer | None = None,
        conditions: ConditionEvaluator | None = None,
    ) -> None:
        self.registry = registry if registry is not None else TransformRegistry()
        self.cache = cache if cache is not None else CacheLayer()
        self.conditions = conditions or ConditionEvaluator()

    def evaluate(
        self,
        rule: Rule | dict[str, Any],
        value: Any,
        context: TransformContext,
        location: RuleLocation | None = None,
    ) -> Any:
        """
        Evaluate a rule against a value.

        Args:
            rule: Rule or raw rule configuration
            value: Input value
            context: Run-time context
            location: Position of the rule, for error messages

        Returns:
            The transformed value (a mapping for multi-value rules)
        """
        location = location or RuleLocation()
        rule = parse_rule(rule, location)

        if rule.library is not None and rule.library != context.library:
            logger.debug(
                "Skipping %s rule for library %s (active: %s) at %s",
                rule.type,
                rule.library,
                context.library,
                location.format(),
            )
            return value

        if isinstance(rule, DirectRule):
            return rule.mapper(value, context) if rule.mapper else value

        if isinstance(rule, MappingRule):
            return self._evaluate_mapping(rule, value, context, location)

        if isinstance(rule, ConditionalRule):
            return self._evaluate_conditional(rule, value, context, location)

        if isinstance(rule, ComputedRule):
            return self._evaluate_computed(rule, value, context, location)

        if isinstance(rule, MultiValueRule):
            return self._evaluate_multi_value(rule, value, context, location)

        if isinstance(rule, CustomRule):
            fn = self.registry.get(rule.name)
            if fn is None:
                raise UnknownCustomTransform(rule.name, location)
            return fn(value, context.all_inputs, context.with_options(rule.options))

        if isinstance(rule, ChainRule):
            current = value
            for i, step in enumerate(rule.steps):
                current = self.evaluate(step, current, context, location.child(f"chain:{i}"))
            return current

        if isinstance(rule, TemplateRule):
            return render_template(rule.template, value, context.all_inputs)

        raise UnknownRuleType(getattr(rule, "type", type(rule).__name__), location)

    # -- Variants --

    def _evaluate_nested(
        self, out: Any, value: Any, context: TransformContext, location: RuleLocation
    ) -> Any:
        """Evaluate ``out`` if it is a rule, otherwise return it as the result."""
        if isinstance(out, RULE_TYPES):
            return self.evaluate(out, value, context, location)
        return out

    def _evaluate_mapping(
        self, rule: MappingRule, value: Any, context: TransformContext, location: RuleLocation
    ) -> Any:
        found, out = False, None
        try:
            if value in rule.mapping:
                found, out = True, rule.mapping[value]
        except TypeError:
            pass  # unhashable values can only match by their string key
        if not found:
            key = _lookup_key(value)
            if key is not None and key in rule.mapping:
                found, out = True, rule.mapping[key]

        if found:
            return self._evaluate_nested(out, value, context, location.child(f"mapping:{value}"))
        return rule.default if rule.has_default else value

    def _evaluate_conditional(
        self, rule: ConditionalRule, value: Any, context: TransformContext, location: RuleLocation
    ) -> Any:
        for i, branch in enumerate(rule.branches):
            if not self.conditions.test(branch.condition, value, context):
                continue
            branch_location = location.child(f"branch:{i}")
            if branch.rule is not None:
                return self.evaluate(branch.rule, value, context, branch_location)
            if branch.has_then:
                return self._evaluate_nested(branch.then, value, context, branch_location)
            return value

        if rule.has_otherwise:
            return self._evaluate_nested(rule.otherwise, value, context, location.child("else"))
        return value

    def _evaluate_computed(
        self, rule: ComputedRule, value: Any, context: TransformContext, location: RuleLocation
    ) -> Any:
        def compute() -> Any:
            if callable(rule.compute):
                return rule.compute(value, context.all_inputs, context)
            try:
                return evaluate(compile_expr(rule.compute), context.expression_scope(value))
            except ExpressionError as e:
                raise TransformError(
                    f"computed expression {rule.compute!r} failed: {e.message}", location
                ) from e

        if not rule.cacheable:
            return compute()

        identity = rule.id or rule.compute
        key = self.cache.key(
            "computed", identity, context.component, context.library, context.all_inputs, value
        )
        return self.cache.get_or_compute(key, compute)

    def _evaluate_multi_value(
        self, rule: MultiValueRule, value: Any, context: TransformContext, location: RuleLocation
    ) -> Any:
        if rule.combiner is not None:
            own = location.input_name
            sources = rule.sources or ([own] if own else [])
            selected = {
                name: value if name == own else context.all_inputs.get(name) for name in sources
            }
            if not selected:
                selected = {"value": value}
            return rule.combiner(selected, context)

        if rule.outputs is None:
            raise MissingRuleField(RuleType.MULTI_VALUE.value, "combiner|outputs", location)

        result: dict[str, Any] = {}
        for target, out in rule.outputs.items():
            if isinstance(out, RULE_TYPES):
                result[target] = self.evaluate(
                    out, value, context, location.child(f"output:{target}")
                )
            elif callable(out):
                result[target] = out(value, context.all_inputs, context)
            else:
                result[target] = out
        return result
