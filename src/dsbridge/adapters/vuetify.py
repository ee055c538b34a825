"""Vuetify 3 component mappings."""

from __future__ import annotations

from typing import Any

from dsbridge.adapters.base import ComponentMapping, LibraryAdapter
from dsbridge.transform.context import TransformContext


def _mdi_icon(expression: str) -> dict[str, Any]:
    """Conditional rule emitting ``mdi-<icon>`` when the expression holds."""
    return {
        "type": "conditional",
        "conditions": [
            {"if": expression, "then": {"type": "template", "template": "mdi-${value}"}},
        ],
        "else": None,
    }


def _drop_unset(output: dict[str, Any], context: TransformContext) -> dict[str, Any]:
    """Remove semantic-only inputs and unset outputs."""
    return {k: v for k, v in output.items() if k != "iconPosition" and v is not None}


BUTTON = ComponentMapping(
    component="VBtn",
    import_statement="import { VBtn } from 'vuetify/components';",
    props={"label": "text", "disabled": "disabled", "loading": "loading", "block": "block"},
    events={"click": "click"},
    slots={"default": "default", "icon": "prepend"},
    prop_rules={
        "color": {
            "type": "mapping",
            "mapping": {"danger": "error", "primary": "primary", "secondary": "secondary"},
        },
        "variant": {
            "type": "mapping",
            "mapping": {
                "primary": "elevated",
                "secondary": "tonal",
                "solid": "flat",
                "outline": "outlined",
                "ghost": "text",
                "link": "plain",
            },
        },
        "size": {
            "type": "mapping",
            "mapping": {
                "xs": "x-small",
                "sm": "small",
                "small": "small",
                "md": "default",
                "medium": "default",
                "lg": "large",
                "large": "large",
                "xl": "x-large",
            },
            "default": "default",
        },
        "icon": {
            "type": "multiValue",
            "outputs": {
                "prependIcon": _mdi_icon('value && iconPosition !== "right"'),
                "appendIcon": _mdi_icon('value && iconPosition === "right"'),
            },
        },
        "rounded": {
            "type": "conditional",
            "conditions": [{"if": {"value": True}, "then": "pill"}],
            "else": None,
        },
    },
    post_process=[_drop_unset],
)

INPUT = ComponentMapping(
    component="VTextField",
    import_statement="import { VTextField } from 'vuetify/components';",
    props={
        "value": "modelValue",
        "label": "label",
        "placeholder": "placeholder",
        "disabled": "disabled",
        "readonly": "readonly",
        "error": "error",
    },
    events={"input": "update:modelValue", "focus": "focus", "blur": "blur"},
    prop_rules={
        "size": {
            "type": "mapping",
            "target": "density",
            "mapping": {"sm": "compact", "md": "default", "lg": "comfortable"},
            "default": "default",
        },
    },
    defaults={"variant": "outlined"},
)

VUETIFY_ADAPTER = LibraryAdapter(
    name="vuetify",
    display_name="Vuetify",
    version="^3.0.0",
    components={"Button": BUTTON, "Input": INPUT},
)
