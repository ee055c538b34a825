"""
Library adapter models.

A LibraryAdapter describes how semantic components map onto one UI
library: which library component to use, how inputs are renamed, which
transformation rules apply, and which defaults to fill in.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dsbridge.core.errors import RuleLocation
from dsbridge.core.ir.rules import DirectRule, Rule, parse_rule


class InputKind(StrEnum):
    """The three kinds of component input a rule set can cover."""

    PROPS = "props"
    EVENTS = "events"
    SLOTS = "slots"


class ComponentMapping(BaseModel):
    """How one semantic component maps onto a library component."""

    component: str = Field(description="Library component name, e.g. VBtn")
    import_statement: str | None = Field(default=None, description="Module import line")
    props: dict[str, str] = Field(default_factory=dict, description="Prop renames")
    events: dict[str, str] = Field(default_factory=dict, description="Event renames")
    slots: dict[str, str] = Field(default_factory=dict, description="Slot renames")
    prop_rules: dict[str, Any] = Field(default_factory=dict)
    event_rules: dict[str, Any] = Field(default_factory=dict)
    slot_rules: dict[str, Any] = Field(default_factory=dict)
    defaults: dict[str, Any] = Field(default_factory=dict, description="Prop defaults")
    post_process: list[Any] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def rules_for(self, kind: InputKind | str) -> dict[str, Rule]:
        """
        Rule set for one input kind.

        Renames become direct rules with a target; an explicit rule for the
        same input replaces the rename.
        """
        kind = InputKind(kind)
        renames = {
            InputKind.PROPS: self.props,
            InputKind.EVENTS: self.events,
            InputKind.SLOTS: self.slots,
        }[kind]
        explicit = {
            InputKind.PROPS: self.prop_rules,
            InputKind.EVENTS: self.event_rules,
            InputKind.SLOTS: self.slot_rules,
        }[kind]

        rules: dict[str, Rule] = {
            source: DirectRule(target=target) for source, target in renames.items()
        }
        for name, raw in explicit.items():
            rules[name] = parse_rule(raw, RuleLocation(name))
        return rules


class LibraryAdapter(BaseModel):
    """Component mappings for one UI library."""

    name: str = Field(description="Library identifier, e.g. 'vuetify'")
    display_name: str = Field(description="Human-readable library name")
    version: str = Field(default="*", description="Supported library version range")
    components: dict[str, ComponentMapping] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def get_component(self, name: str) -> ComponentMapping | None:
        return self.components.get(name)

    def supports(self, name: str) -> bool:
        return name in self.components

    def list_components(self) -> list[str]:
        return sorted(self.components)
