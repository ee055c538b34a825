"""
Condition types for conditional transformation rules.

A condition is one of a closed set of variants, each tagged with ``kind``:

- ``BoolCondition``: a literal true/false
- ``PredicateCondition``: a callable ``(value, all_inputs, context) -> bool``
- ``Comparison``: ``{prop|value, operator, value}``
- ``AllOf`` / ``AnyOf`` / ``Not``: composition
- ``ExpressionCondition``: an expression string such as ``'size === "lg"'``

Raw configuration (bools, callables, strings, dicts) is converted with
``parse_condition``.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ComparisonOperator(StrEnum):
    """Operators understood by Comparison conditions."""

    STRICT_EQUALS = "==="
    STRICT_NOT_EQUALS = "!=="
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    GREATER_EQUAL = ">="
    LESS_THAN = "<"
    LESS_EQUAL = "<="
    INCLUDES = "includes"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    MATCHES = "matches"
    EXISTS = "exists"
    EMPTY = "empty"


class BoolCondition(BaseModel):
    kind: Literal["bool"] = "bool"
    value: bool

    model_config = ConfigDict(frozen=True)


class PredicateCondition(BaseModel):
    """A caller-supplied predicate."""

    kind: Literal["predicate"] = "predicate"
    fn: Callable[..., Any] = Field(description="(value, all_inputs, context) -> bool")

    model_config = ConfigDict(frozen=True)


class Comparison(BaseModel):
    """
    Compare an operand against ``value`` with ``operator``.

    The left operand is ``all_inputs[prop]`` when ``prop`` is set, otherwise
    the value being transformed. ``operator`` is kept as a plain string so
    that an unrecognized operator evaluates to False instead of failing.
    """

    kind: Literal["comparison"] = "comparison"
    prop: str | None = Field(default=None, description="Sibling input to compare")
    operator: str = Field(default=ComparisonOperator.STRICT_EQUALS.value)
    value: Any = Field(default=None, description="Right operand")

    model_config = ConfigDict(frozen=True)


class AllOf(BaseModel):
    kind: Literal["and"] = "and"
    conditions: list[Condition]

    model_config = ConfigDict(frozen=True)


class AnyOf(BaseModel):
    kind: Literal["or"] = "or"
    conditions: list[Condition]

    model_config = ConfigDict(frozen=True)


class Not(BaseModel):
    kind: Literal["not"] = "not"
    condition: Condition

    model_config = ConfigDict(frozen=True)


class ExpressionCondition(BaseModel):
    """Expression string evaluated against value, inputs, and library."""

    kind: Literal["expression"] = "expression"
    expression: str

    model_config = ConfigDict(frozen=True)


Condition = (
    BoolCondition | PredicateCondition | Comparison | AllOf | AnyOf | Not | ExpressionCondition
)

CONDITION_TYPES = (
    BoolCondition,
    PredicateCondition,
    Comparison,
    AllOf,
    AnyOf,
    Not,
    ExpressionCondition,
)

AllOf.model_rebuild()
AnyOf.model_rebuild()
Not.model_rebuild()


def parse_condition(data: Any) -> Condition:
    """
    Convert raw condition configuration into a Condition.

    Accepts bools, callables, expression strings, dicts in the
    ``{prop, operator, value}`` / ``{and|or|not}`` forms, and already-built
    conditions. An object matching none of the forms never matches.
    """
    if isinstance(data, CONDITION_TYPES):
        return data
    if isinstance(data, bool):
        return BoolCondition(value=data)
    if isinstance(data, str):
        return ExpressionCondition(expression=data)
    if callable(data):
        return PredicateCondition(fn=data)
    if isinstance(data, dict):
        return _parse_object_condition(data)
    return BoolCondition(value=bool(data))


def _parse_object_condition(data: dict[str, Any]) -> Condition:
    operator = str(data.get("operator", ComparisonOperator.STRICT_EQUALS.value))

    if data.get("prop"):
        return Comparison(prop=str(data["prop"]), operator=operator, value=data.get("value"))
    if "value" in data or "operator" in data:
        return Comparison(prop=None, operator=operator, value=data.get("value"))
    if "and" in data:
        return AllOf(conditions=[parse_condition(c) for c in data["and"]])
    if "or" in data:
        return AnyOf(conditions=[parse_condition(c) for c in data["or"]])
    if "not" in data:
        return Not(condition=parse_condition(data["not"]))
    return BoolCondition(value=False)
