"""
Validation of rule sets and component configurations.

Validators never stop at the first problem: they return every error and
warning they find. ``ensure_valid`` turns a non-empty error list into a
single ValidationFailure.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from dsbridge.core.errors import ExpressionError, RuleError, RuleLocation, ensure_valid
from dsbridge.core.expression_lang import compile_expr
from dsbridge.core.ir.conditions import AllOf, AnyOf, Condition, ExpressionCondition, Not
from dsbridge.core.ir.rules import (
    RULE_TYPES,
    ChainRule,
    ComputedRule,
    ConditionalRule,
    CustomRule,
    MappingRule,
    MultiValueRule,
    Rule,
    parse_rule,
)
from dsbridge.transform.registry import TransformRegistry

_PASCAL_CASE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")

VALID_PROP_TYPES = {"string", "number", "boolean", "array", "object", "function", "any"}

__all__ = [
    "check_component_config",
    "ensure_valid",
    "validate_component_config",
    "validate_rule_set",
]


def validate_rule_set(
    rules: dict[str, Any],
    declared_inputs: Iterable[str] | None = None,
    registry: TransformRegistry | None = None,
) -> tuple[list[str], list[str]]:
    """
    Validate a rule set.

    Checks:
    - Every rule parses (known type, required fields present)
    - Expression strings in computed rules and conditions parse
    - No two rules write the same target
    - Custom rules name a registered transformation (when a registry is given)
    - Multi-value sources name declared inputs (when inputs are given)

    Args:
        rules: Input name -> rule (built or raw)
        declared_inputs: Input names the component declares
        registry: Registry custom rules will be evaluated against

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []
    declared = set(declared_inputs) if declared_inputs is not None else None
    targets: dict[str, str] = {}

    for name, raw in rules.items():
        location = RuleLocation(name)
        try:
            rule = parse_rule(raw, location)
        except RuleError as e:
            errors.append(str(e))
            continue

        if declared is not None and name not in declared:
            warnings.append(f"Rule for '{name}' does not match any declared input")

        if not isinstance(rule, MultiValueRule):
            target = rule.target or name
            if target in targets:
                errors.append(
                    f"Duplicate rule target '{target}' (inputs '{targets[target]}' and '{name}')"
                )
            else:
                targets[target] = name

        _check_rule(rule, location, declared, registry, errors, warnings)

    return errors, warnings


def _check_rule(
    rule: Rule,
    location: RuleLocation,
    declared: set[str] | None,
    registry: TransformRegistry | None,
    errors: list[str],
    warnings: list[str],
) -> None:
    """Recursive checks on a parsed rule."""
    where = location.format()

    if isinstance(rule, ComputedRule) and isinstance(rule.compute, str):
        _check_expression(rule.compute, where, errors)

    elif isinstance(rule, CustomRule):
        if registry is not None and rule.name not in registry:
            warnings.append(f"{where}: custom transformation '{rule.name}' is not registered")

    elif isinstance(rule, ConditionalRule):
        if not rule.has_otherwise:
            warnings.append(f"{where}: conditional rule has no else value")
        for i, branch in enumerate(rule.branches):
            branch_location = location.child(f"branch:{i}")
            _check_condition(branch.condition, branch_location.format(), errors)
            nested = branch.rule if branch.rule is not None else branch.then
            if isinstance(nested, RULE_TYPES):
                _check_rule(nested, branch_location, declared, registry, errors, warnings)

    elif isinstance(rule, MappingRule):
        for key, out in rule.mapping.items():
            if isinstance(out, RULE_TYPES):
                _check_rule(
                    out, location.child(f"mapping:{key}"), declared, registry, errors, warnings
                )

    elif isinstance(rule, MultiValueRule):
        if declared is not None:
            for source in rule.sources or []:
                if source not in declared:
                    warnings.append(f"{where}: source '{source}' is not a declared input")

    elif isinstance(rule, ChainRule):
        for i, step in enumerate(rule.steps):
            _check_rule(step, location.child(f"chain:{i}"), declared, registry, errors, warnings)


def _check_condition(condition: Condition, where: str, errors: list[str]) -> None:
    if isinstance(condition, ExpressionCondition):
        _check_expression(condition.expression, where, errors)
    elif isinstance(condition, (AllOf, AnyOf)):
        for nested in condition.conditions:
            _check_condition(nested, where, errors)
    elif isinstance(condition, Not):
        _check_condition(condition.condition, where, errors)


def _check_expression(source: str, where: str, errors: list[str]) -> None:
    try:
        compile_expr(source)
    except ExpressionError as e:
        errors.append(f"{where}: invalid expression {source!r}: {e.message}")


# =============================================================================
# Component configuration
# =============================================================================


def _validate_named_list(items: Any, label: str, errors: list[str]) -> list[dict[str, Any]]:
    """Common checks for the props / events / slots lists; returns the valid entries."""
    if items is None:
        return []
    if not isinstance(items, list):
        errors.append(f"{label.capitalize()}s must be a list")
        return []

    valid: list[dict[str, Any]] = []
    seen: set[str] = set()
    for index, item in enumerate(items):
        if not isinstance(item, dict) or not item.get("name"):
            errors.append(f"{label.capitalize()} at index {index} is missing name")
            continue
        if item["name"] in seen:
            errors.append(f"Duplicate {label} name: {item['name']}")
            continue
        seen.add(item["name"])
        valid.append(item)
    return valid


def validate_component_config(
    config: dict[str, Any],
    registry: TransformRegistry | None = None,
) -> tuple[list[str], list[str]]:
    """
    Validate a semantic component configuration.

    Expected shape::

        {
            "name": "Button",
            "baseComponent": "Button",
            "props": [{"name": "size", "type": "string", "required": False}],
            "events": [{"name": "click"}],
            "slots": [{"name": "default"}],
            "rules": {"size": {"type": "mapping", "mapping": {...}}},
        }

    Returns:
        Tuple of (errors, warnings)
    """
    errors: list[str] = []
    warnings: list[str] = []

    name = config.get("name")
    if not name:
        errors.append("Component name is required")
    elif not _PASCAL_CASE.match(str(name)):
        errors.append(f"Component name '{name}' must be PascalCase")
    if not (config.get("baseComponent") or config.get("base_component")):
        errors.append("Base component is required")

    props = _validate_named_list(config.get("props"), "prop", errors)
    for prop in props:
        prop_type = prop.get("type")
        if not prop_type:
            warnings.append(f"Prop '{prop['name']}' is missing type definition")
        elif prop_type not in VALID_PROP_TYPES:
            warnings.append(f"Prop '{prop['name']}' has unknown type: {prop_type}")
        if "options" in prop and not isinstance(prop["options"], list):
            errors.append(f"Prop '{prop['name']}' options must be a list")
        if "required" not in prop:
            warnings.append(f"Prop '{prop['name']}' missing required field")

    events = _validate_named_list(config.get("events"), "event", errors)
    _validate_named_list(config.get("slots"), "slot", errors)

    rules = config.get("rules") or {}
    if not isinstance(rules, dict):
        errors.append("Rules must be a mapping of input name to rule")
    else:
        declared = [p["name"] for p in props] + [e["name"] for e in events]
        rule_errors, rule_warnings = validate_rule_set(
            rules, declared_inputs=declared if declared else None, registry=registry
        )
        errors.extend(rule_errors)
        warnings.extend(rule_warnings)

    return errors, warnings


def check_component_config(
    config: dict[str, Any], registry: TransformRegistry | None = None
) -> list[str]:
    """
    Validate a component configuration, raising on any error.

    Returns:
        Warnings found

    Raises:
        ValidationFailure: With every error found
    """
    errors, warnings = validate_component_config(config, registry)
    ensure_valid(errors, warnings)
    return warnings
