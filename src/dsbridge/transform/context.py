"""Run-time context handed to every rule, condition, and custom transformation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from dsbridge.core.errors import RuleLocation

__all__ = ["RuleLocation", "TransformContext"]


@dataclass(frozen=True)
class TransformContext:
    """
    What a rule can see besides its own input value.

    Attributes:
        component: Name of the component being transformed (part of cache keys)
        library: Active target library identifier
        all_inputs: Every sibling input of the current batch, untransformed
        options: Caller options; custom rules merge their own options on top
    """

    component: str | None = None
    library: str | None = None
    all_inputs: dict[str, Any] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)

    def with_inputs(self, inputs: dict[str, Any]) -> TransformContext:
        return replace(self, all_inputs=dict(inputs))

    def with_options(self, options: dict[str, Any]) -> TransformContext:
        if not options:
            return self
        return replace(self, options={**self.options, **options})

    def cache_identity(self) -> dict[str, Any]:
        """The parts of the context that influence evaluation results."""
        return {
            "component": self.component,
            "library": self.library,
            "options": self.options,
        }

    def expression_scope(self, value: Any) -> dict[str, Any]:
        """
        Names visible to expression strings.

        Sibling inputs are visible bare and under ``props``; ``value`` and
        ``library`` shadow inputs of the same name.
        """
        return {
            **self.all_inputs,
            "props": self.all_inputs,
            "options": self.options,
            "component": self.component,
            "library": self.library,
            "value": value,
        }
