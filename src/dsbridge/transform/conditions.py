"""
Condition evaluation for conditional rules.

``ConditionEvaluator.test`` never raises for an unsatisfiable comparison:
unknown operators, incomparable operands, and invalid patterns all count
as a non-match. Errors raised by caller predicates and malformed
expression strings do propagate.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from dsbridge.core.expression_lang import compile_expr, evaluate
from dsbridge.core.expression_lang.evaluator import is_number, loose_equals, strict_equals
from dsbridge.core.ir.conditions import (
    AllOf,
    AnyOf,
    BoolCondition,
    Comparison,
    ComparisonOperator,
    ExpressionCondition,
    Not,
    PredicateCondition,
    parse_condition,
)
from dsbridge.transform.context import TransformContext

logger = logging.getLogger(__name__)


class ConditionEvaluator:
    """Pure predicate evaluation over the Condition variants."""

    def test(self, condition: Any, value: Any, context: TransformContext) -> bool:
        """
        Evaluate a condition.

        Args:
            condition: A Condition, or raw condition configuration
            value: The input value being transformed
            context: Run-time context (sibling inputs, library, options)

        Returns:
            Whether the condition holds
        """
        cond = parse_condition(condition)

        if isinstance(cond, BoolCondition):
            return cond.value

        if isinstance(cond, PredicateCondition):
            return bool(cond.fn(value, context.all_inputs, context))

        if isinstance(cond, Comparison):
            left = context.all_inputs.get(cond.prop) if cond.prop else value
            return compare(left, cond.operator, cond.value)

        if isinstance(cond, AllOf):
            return all(self.test(c, value, context) for c in cond.conditions)

        if isinstance(cond, AnyOf):
            return any(self.test(c, value, context) for c in cond.conditions)

        if isinstance(cond, Not):
            return not self.test(cond.condition, value, context)

        if isinstance(cond, ExpressionCondition):
            expr = compile_expr(cond.expression)
            return bool(evaluate(expr, context.expression_scope(value)))

        raise TypeError(f"Unhandled condition variant: {type(cond).__name__}")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict, set)):
        return len(value) == 0
    return False


def _ordered(left: Any, right: Any) -> tuple[Any, Any] | None:
    """Operands for an ordering comparison, or None when incomparable."""
    if left is None or right is None:
        return None
    if (is_number(left) and isinstance(right, str)) or (isinstance(left, str) and is_number(right)):
        try:
            return float(left), float(right)
        except ValueError:
            return None
    return left, right


def compare(left: Any, operator: str, right: Any) -> bool:
    """Apply a comparison operator; unknown operators never match."""
    op = str(operator)

    if op == ComparisonOperator.STRICT_EQUALS:
        return strict_equals(left, right)
    if op == ComparisonOperator.STRICT_NOT_EQUALS:
        return not strict_equals(left, right)
    if op == ComparisonOperator.EQUALS:
        return loose_equals(left, right)
    if op == ComparisonOperator.NOT_EQUALS:
        return not loose_equals(left, right)

    if op in (
        ComparisonOperator.GREATER_THAN,
        ComparisonOperator.GREATER_EQUAL,
        ComparisonOperator.LESS_THAN,
        ComparisonOperator.LESS_EQUAL,
    ):
        operands = _ordered(left, right)
        if operands is None:
            return False
        a, b = operands
        try:
            if op == ComparisonOperator.GREATER_THAN:
                return bool(a > b)
            if op == ComparisonOperator.GREATER_EQUAL:
                return bool(a >= b)
            if op == ComparisonOperator.LESS_THAN:
                return bool(a < b)
            return bool(a <= b)
        except TypeError:
            return False

    if op == ComparisonOperator.INCLUDES:
        if isinstance(left, str):
            return isinstance(right, str) and right in left
        if isinstance(left, (list, tuple, set)):
            return any(strict_equals(item, right) for item in left)
        return False
    if op == ComparisonOperator.STARTS_WITH:
        return isinstance(left, str) and isinstance(right, str) and left.startswith(right)
    if op == ComparisonOperator.ENDS_WITH:
        return isinstance(left, str) and isinstance(right, str) and left.endswith(right)
    if op == ComparisonOperator.MATCHES:
        if left is None or not isinstance(right, str):
            return False
        try:
            return re.search(right, str(left)) is not None
        except re.error:
            logger.debug("Invalid pattern in condition: %r", right)
            return False
    if op == ComparisonOperator.EXISTS:
        return left is not None
    if op == ComparisonOperator.EMPTY:
        return _is_empty(left)

    logger.debug("Unknown condition operator %r treated as non-match", op)
    return False
