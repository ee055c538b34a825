"""
Error types for rule evaluation, token resolution, and validation.

Every error carries a human-readable message and, where it makes sense,
the location it was raised from (which input and which nested rule, or
which token).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol


class _Location(Protocol):
    def format(self) -> str: ...


class DsBridgeError(Exception):
    """Base exception for all dsbridge errors."""

    def __init__(self, message: str, location: _Location | None = None):
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with location if available."""
        if self.location:
            return f"{self.location.format()}: {self.message}"
        return self.message


# =============================================================================
# Locations
# =============================================================================


@dataclass(frozen=True)
class RuleLocation:
    """
    Where in a rule set an error happened.

    Attributes:
        input_name: Name of the input (prop, event, slot) being transformed
        path: Nested positions inside the rule, e.g. ("chain:1", "branch:0")
    """

    input_name: str | None = None
    path: tuple[str, ...] = field(default_factory=tuple)

    def child(self, segment: str) -> RuleLocation:
        """Return a location one level deeper."""
        return RuleLocation(input_name=self.input_name, path=(*self.path, segment))

    def format(self) -> str:
        """
        Format as a compact string.

        Returns:
            String like "size[chain:1][branch:0]"
        """
        head = self.input_name or "<rule>"
        return head + "".join(f"[{segment}]" for segment in self.path)


@dataclass(frozen=True)
class TokenLocation:
    """A token position inside a TokenMap."""

    category: str
    name: str

    def format(self) -> str:
        return f"{self.category}.{self.name}"


# =============================================================================
# Rule errors
# =============================================================================


class RuleError(DsBridgeError):
    """
    Raised when a transformation rule cannot be evaluated.

    Examples:
    - Rule missing a field its type requires
    - Rule with an unrecognized type
    - Custom rule naming an unregistered transformation
    """

    pass


class MissingRuleField(RuleError):
    """A rule lacks a field required by its type."""

    def __init__(self, rule_type: str, field_name: str, location: RuleLocation | None = None):
        self.rule_type = rule_type
        self.field_name = field_name
        super().__init__(f"{rule_type} rule requires '{field_name}'", location)


class UnknownRuleType(RuleError):
    """A rule's type tag is missing or not recognized."""

    def __init__(self, rule_type: object, location: RuleLocation | None = None):
        self.rule_type = rule_type
        super().__init__(f"Unknown transformation type: {rule_type!r}", location)


class UnknownCustomTransform(RuleError):
    """A custom rule references a name absent from the registry."""

    def __init__(self, name: str, location: RuleLocation | None = None):
        self.name = name
        super().__init__(f"Unknown custom transformation: {name!r}", location)


class TransformError(RuleError):
    """
    Raised when a transformation produces an unusable result.

    Examples:
    - Post-processor returning something other than a mapping
    - Computed expression failing to evaluate
    """

    pass


# =============================================================================
# Token errors
# =============================================================================


class TokenError(DsBridgeError):
    """Raised when design tokens cannot be resolved."""

    pass


class CircularReference(TokenError):
    """Token resolution revisited an entry that is still being resolved."""

    def __init__(self, path: Sequence[str]):
        self.path = list(path)
        super().__init__(f"Circular token reference: {' -> '.join(self.path)}")


class InvalidColorValue(DsBridgeError):
    """A color string could not be parsed."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid color value: {value!r}")


# =============================================================================
# Validation
# =============================================================================


class ValidationFailure(DsBridgeError):
    """A configuration failed validation; carries every error found."""

    def __init__(self, errors: Iterable[str], warnings: Iterable[str] = ()):
        self.errors = list(errors)
        self.warnings = list(warnings)
        lines = [f"Validation failed with {len(self.errors)} error(s):"]
        lines.extend(f"  - {error}" for error in self.errors)
        super().__init__("\n".join(lines))


class ExpressionError(DsBridgeError):
    """Base class for expression tokenize / parse / evaluation failures."""

    def __init__(self, message: str, pos: int = 0) -> None:
        self.pos = pos
        super().__init__(message)


def ensure_valid(errors: list[str], warnings: list[str] | None = None) -> None:
    """
    Raise ValidationFailure if any errors were collected.

    Args:
        errors: Validation errors
        warnings: Validation warnings (attached to the exception, never raised alone)
    """
    if errors:
        raise ValidationFailure(errors, warnings or [])
