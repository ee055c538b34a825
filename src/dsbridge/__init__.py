"""
dsbridge: semantic component transformation and design token compilation.

Two halves share one cache:

- ``dsbridge.transform`` turns semantic component inputs (props, events,
  slots) into the inputs a concrete UI library expects, driven by typed
  transformation rules.
- ``dsbridge.themes`` resolves design tokens, expands compact category
  configurations into full token sets, and compiles them into custom
  properties and utility rules.
"""

from dsbridge.core.cache import CacheLayer
from dsbridge.core.config import EngineConfig
from dsbridge.core.errors import (
    CircularReference,
    DsBridgeError,
    InvalidColorValue,
    MissingRuleField,
    UnknownCustomTransform,
    UnknownRuleType,
    ValidationFailure,
)
from dsbridge.themes.compiler import CompiledTheme, ThemeCompiler
from dsbridge.themes.engine import ThemeEngine
from dsbridge.themes.resolver import TokenResolver
from dsbridge.transform.conditions import ConditionEvaluator
from dsbridge.transform.context import TransformContext
from dsbridge.transform.evaluator import RuleEvaluator
from dsbridge.transform.registry import TransformRegistry
from dsbridge.transform.session import TransformationSession

__version__ = "0.1.0"

__all__ = [
    "CacheLayer",
    "CircularReference",
    "CompiledTheme",
    "ConditionEvaluator",
    "DsBridgeError",
    "EngineConfig",
    "InvalidColorValue",
    "MissingRuleField",
    "RuleEvaluator",
    "ThemeCompiler",
    "ThemeEngine",
    "TokenResolver",
    "TransformContext",
    "TransformRegistry",
    "TransformationSession",
    "UnknownCustomTransform",
    "UnknownRuleType",
    "ValidationFailure",
]
