"""
Intermediate representation for transformation rules, conditions, and
expressions.
"""

from dsbridge.core.ir.conditions import (
    AllOf,
    AnyOf,
    BoolCondition,
    Comparison,
    ComparisonOperator,
    Condition,
    ExpressionCondition,
    Not,
    PredicateCondition,
    parse_condition,
)
from dsbridge.core.ir.rules import (
    ChainRule,
    ComputedRule,
    ConditionalBranch,
    ConditionalRule,
    CustomRule,
    DirectRule,
    MappingRule,
    MultiValueRule,
    Rule,
    RuleType,
    TemplateRule,
    looks_like_rule,
    parse_rule,
)

__all__ = [
    "AllOf",
    "AnyOf",
    "BoolCondition",
    "ChainRule",
    "Comparison",
    "ComparisonOperator",
    "ComputedRule",
    "Condition",
    "ConditionalBranch",
    "ConditionalRule",
    "CustomRule",
    "DirectRule",
    "ExpressionCondition",
    "MappingRule",
    "MultiValueRule",
    "Not",
    "PredicateCondition",
    "Rule",
    "RuleType",
    "TemplateRule",
    "looks_like_rule",
    "parse_condition",
    "parse_rule",
]
