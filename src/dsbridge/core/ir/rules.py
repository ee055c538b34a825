"""
Transformation rule types.

A rule maps one semantic input value to one or more output values. Rules
form a closed set of variants tagged with ``type``; the evaluator dispatches
exhaustively over them.

Raw configuration (as loaded from component configs or adapter modules) is
converted with ``parse_rule``, which fails fast with ``UnknownRuleType`` or
``MissingRuleField`` before anything is evaluated.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from dsbridge.core.errors import MissingRuleField, RuleLocation, UnknownRuleType
from dsbridge.core.ir.conditions import Condition, parse_condition


class RuleType(StrEnum):
    """Rule discriminants."""

    DIRECT = "direct"
    MAPPING = "mapping"
    CONDITIONAL = "conditional"
    COMPUTED = "computed"
    MULTI_VALUE = "multiValue"
    CUSTOM = "custom"
    CHAIN = "chain"
    TEMPLATE = "template"


# Spellings accepted for each type in raw configuration
_TYPE_ALIASES: dict[str, RuleType] = {
    **{t.value: t for t in RuleType},
    "multi-prop": RuleType.MULTI_VALUE,
    "multiProp": RuleType.MULTI_VALUE,
    "multi_value": RuleType.MULTI_VALUE,
}

_RULE_CONFIG = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class DirectRule(BaseModel):
    """Pass the value through, optionally via ``mapper(value, context)``."""

    type: Literal["direct"] = "direct"
    target: str | None = None
    library: str | None = None
    mapper: Callable[..., Any] | None = None

    model_config = _RULE_CONFIG


class MappingRule(BaseModel):
    """
    Look the value up in a table.

    A miss returns ``default`` when one was declared (even ``None``), else
    the original value.
    """

    type: Literal["mapping"] = "mapping"
    target: str | None = None
    library: str | None = None
    mapping: dict[Any, Any]
    default: Any = None

    model_config = _RULE_CONFIG

    @property
    def has_default(self) -> bool:
        return "default" in self.model_fields_set


class ConditionalBranch(BaseModel):
    """One ``if`` arm: a condition plus either a value or a subrule."""

    condition: Condition
    then: Any = None
    rule: Rule | None = None

    model_config = _RULE_CONFIG

    @property
    def has_then(self) -> bool:
        return "then" in self.model_fields_set


class ConditionalRule(BaseModel):
    """First matching branch wins; ``otherwise`` (raw key ``else``) when none do."""

    type: Literal["conditional"] = "conditional"
    target: str | None = None
    library: str | None = None
    branches: list[ConditionalBranch]
    otherwise: Any = None

    model_config = _RULE_CONFIG

    @property
    def has_otherwise(self) -> bool:
        return "otherwise" in self.model_fields_set


class ComputedRule(BaseModel):
    """Compute the output from a callable or an expression string."""

    type: Literal["computed"] = "computed"
    target: str | None = None
    library: str | None = None
    compute: Callable[..., Any] | str
    id: str | None = None
    cacheable: bool = True

    model_config = _RULE_CONFIG


class MultiValueRule(BaseModel):
    """
    Combine several inputs into one or more outputs.

    Either ``combiner(selected, context)`` or a declarative ``outputs`` map
    (target name -> value, rule, or callable) must be given.
    """

    type: Literal["multiValue"] = "multiValue"
    target: str | None = None
    library: str | None = None
    combiner: Callable[..., Any] | None = None
    outputs: dict[str, Any] | None = None
    sources: list[str] | None = None

    model_config = _RULE_CONFIG


class CustomRule(BaseModel):
    """Call a named transformation from the registry."""

    type: Literal["custom"] = "custom"
    target: str | None = None
    library: str | None = None
    name: str
    options: dict[str, Any] = Field(default_factory=dict)

    model_config = _RULE_CONFIG


class ChainRule(BaseModel):
    """Apply rules left to right, threading the value."""

    type: Literal["chain"] = "chain"
    target: str | None = None
    library: str | None = None
    steps: list[Rule]

    model_config = _RULE_CONFIG


class TemplateRule(BaseModel):
    """Substitute ``${value}`` and ``${inputName}`` placeholders."""

    type: Literal["template"] = "template"
    target: str | None = None
    library: str | None = None
    template: str

    model_config = _RULE_CONFIG


Rule = (
    DirectRule
    | MappingRule
    | ConditionalRule
    | ComputedRule
    | MultiValueRule
    | CustomRule
    | ChainRule
    | TemplateRule
)

RULE_TYPES = (
    DirectRule,
    MappingRule,
    ConditionalRule,
    ComputedRule,
    MultiValueRule,
    CustomRule,
    ChainRule,
    TemplateRule,
)

ConditionalBranch.model_rebuild()
ConditionalRule.model_rebuild()
ChainRule.model_rebuild()


# =============================================================================
# Parsing raw configuration
# =============================================================================


def resolve_rule_type(raw: Any) -> RuleType | None:
    """Map a raw ``type`` value to a RuleType, or None if unrecognized."""
    if isinstance(raw, RuleType):
        return raw
    if isinstance(raw, str):
        return _TYPE_ALIASES.get(raw)
    return None


def looks_like_rule(value: Any) -> bool:
    """True for built rules and for dicts whose ``type`` names a rule type."""
    if isinstance(value, RULE_TYPES):
        return True
    return isinstance(value, dict) and resolve_rule_type(value.get("type")) is not None


def parse_rule(data: Any, location: RuleLocation | None = None) -> Rule:
    """
    Convert raw rule configuration into a Rule.

    Args:
        data: A built Rule or a dict with a ``type`` key
        location: Where the rule sits, used in error messages

    Returns:
        The typed rule

    Raises:
        UnknownRuleType: ``type`` is missing or not recognized
        MissingRuleField: a field required by the type is absent
    """
    location = location or RuleLocation()
    if isinstance(data, RULE_TYPES):
        return data
    if not isinstance(data, dict):
        raise UnknownRuleType(type(data).__name__, location)

    rule_type = resolve_rule_type(data.get("type"))
    if rule_type is None:
        raise UnknownRuleType(data.get("type"), location)

    common = {"target": data.get("target"), "library": data.get("library")}

    def require(field_name: str) -> Any:
        if data.get(field_name) is None:
            raise MissingRuleField(rule_type.value, field_name, location)
        return data[field_name]

    if rule_type is RuleType.DIRECT:
        return DirectRule(mapper=data.get("mapper") or data.get("transform"), **common)

    if rule_type is RuleType.MAPPING:
        mapping = {
            key: _maybe_rule(out, location.child(f"mapping:{key}"))
            for key, out in require("mapping").items()
        }
        extra = {"default": data["default"]} if "default" in data else {}
        return MappingRule(mapping=mapping, **extra, **common)

    if rule_type is RuleType.CONDITIONAL:
        branches = [
            _parse_branch(raw, location.child(f"branch:{i}"))
            for i, raw in enumerate(require("conditions"))
        ]
        extra = {}
        if "else" in data:
            extra["otherwise"] = _maybe_rule(data["else"], location.child("else"))
        return ConditionalRule(branches=branches, **extra, **common)

    if rule_type is RuleType.COMPUTED:
        return ComputedRule(
            compute=require("compute"),
            id=data.get("id"),
            cacheable=data.get("cacheable", data.get("cache", True)) is not False,
            **common,
        )

    if rule_type is RuleType.MULTI_VALUE:
        combiner = data.get("combiner") or data.get("transform")
        outputs = data.get("outputs") or data.get("mapping")
        if combiner is None and outputs is None:
            raise MissingRuleField(rule_type.value, "combiner|outputs", location)
        if outputs is not None:
            outputs = {
                name: _maybe_rule(out, location.child(f"output:{name}"))
                for name, out in outputs.items()
            }
        sources = data.get("sources") or data.get("props")
        return MultiValueRule(
            combiner=combiner,
            outputs=outputs,
            sources=list(sources) if sources else None,
            **common,
        )

    if rule_type is RuleType.CUSTOM:
        return CustomRule(name=require("name"), options=data.get("options") or {}, **common)

    if rule_type is RuleType.CHAIN:
        steps = [
            parse_rule(step, location.child(f"chain:{i}"))
            for i, step in enumerate(require("chain"))
        ]
        return ChainRule(steps=steps, **common)

    return TemplateRule(template=require("template"), **common)


def _parse_branch(raw: Any, location: RuleLocation) -> ConditionalBranch:
    if isinstance(raw, ConditionalBranch):
        return raw
    if not isinstance(raw, dict) or "if" not in raw:
        raise MissingRuleField(RuleType.CONDITIONAL.value, "if", location)
    fields: dict[str, Any] = {"condition": parse_condition(raw["if"])}
    if raw.get("transform") is not None:
        fields["rule"] = parse_rule(raw["transform"], location.child("transform"))
    if "then" in raw:
        fields["then"] = _maybe_rule(raw["then"], location.child("then"))
    return ConditionalBranch(**fields)


def _maybe_rule(value: Any, location: RuleLocation) -> Any:
    return parse_rule(value, location) if looks_like_rule(value) else value
