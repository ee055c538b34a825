"""
Transformation of semantic component inputs into library inputs.

Usage:
    from dsbridge.transform import TransformationSession, TransformContext

    session = TransformationSession()
    output = session.run(
        {"variant": "primary", "size": "large"},
        {"variant": {"type": "mapping", "mapping": {"primary": "elevated"}}},
        TransformContext(component="Button", library="vuetify"),
    )
    # output == {"variant": "elevated", "size": "large"}
"""

from dsbridge.transform.component import ComponentTransformer
from dsbridge.transform.conditions import ConditionEvaluator
from dsbridge.transform.context import RuleLocation, TransformContext
from dsbridge.transform.evaluator import RuleEvaluator
from dsbridge.transform.registry import TransformRegistry
from dsbridge.transform.session import TransformationSession
from dsbridge.transform.validation import (
    check_component_config,
    validate_component_config,
    validate_rule_set,
)

__all__ = [
    "ComponentTransformer",
    "ConditionEvaluator",
    "RuleEvaluator",
    "RuleLocation",
    "TransformContext",
    "TransformRegistry",
    "TransformationSession",
    "check_component_config",
    "validate_component_config",
    "validate_rule_set",
]
