"""Shared pytest fixtures for dsbridge tests."""

from typing import Any

import pytest

from dsbridge.core.cache import CacheLayer
from dsbridge.transform.context import TransformContext
from dsbridge.transform.evaluator import RuleEvaluator
from dsbridge.transform.registry import TransformRegistry
from dsbridge.transform.session import TransformationSession


@pytest.fixture
def cache() -> CacheLayer:
    return CacheLayer()


@pytest.fixture
def registry() -> TransformRegistry:
    return TransformRegistry()


@pytest.fixture
def evaluator(registry: TransformRegistry, cache: CacheLayer) -> RuleEvaluator:
    return RuleEvaluator(registry=registry, cache=cache)


@pytest.fixture
def session(evaluator: RuleEvaluator) -> TransformationSession:
    return TransformationSession(evaluator=evaluator)


@pytest.fixture
def context() -> TransformContext:
    """Button context targeting Vuetify, with no sibling inputs."""
    return TransformContext(component="Button", library="vuetify")


@pytest.fixture
def button_config() -> dict[str, Any]:
    """A valid semantic Button configuration."""
    return {
        "name": "Button",
        "baseComponent": "Button",
        "props": [
            {"name": "variant", "type": "string", "required": False},
            {"name": "size", "type": "string", "required": False},
            {"name": "icon", "type": "string", "required": False},
            {"name": "iconPosition", "type": "string", "required": False},
        ],
        "events": [{"name": "click"}],
        "slots": [{"name": "default"}],
        "rules": {
            "variant": {"type": "mapping", "mapping": {"primary": "elevated"}},
            "size": {"type": "direct"},
        },
    }


@pytest.fixture
def theme_config() -> dict[str, Any]:
    """A small theme exercising every pipeline stage."""
    return {
        "tokens": {
            "colors": {"brand": "#3b82f6", "link": "$colors.brand"},
            "spacing": {"base": 4},
        },
        "colors": {
            "palette": {"primary": "$colors.brand"},
            "semantic": {"success": "#22c55e"},
        },
        "spacing": {"scale": {"baseUnit": 4}},
        "shadows": {"elevation": {}},
        "computed": {"gutter": {"compute": "px(spacing.base * 4)"}},
        "transformations": {"spacing": {"base": {"type": "scale", "factor": 2}}},
    }
