"""PrimeVue component mappings."""

from __future__ import annotations

from typing import Any

from dsbridge.adapters.base import ComponentMapping, LibraryAdapter
from dsbridge.transform.context import TransformContext

_SIZE_MAPPING = {
    "xs": "small",
    "sm": "small",
    "md": "normal",
    "lg": "large",
    "xl": "large",
}


def _button_icon(value: Any, inputs: dict[str, Any], context: TransformContext) -> dict[str, Any]:
    """PrimeIcons class plus ``iconPos`` for right-aligned icons."""
    if not value:
        return {}
    icon = f"pi {value}" if str(value).startswith("pi-") else f"pi pi-{value}"
    if inputs.get("iconPosition") == "right":
        return {"icon": icon, "iconPos": "right"}
    return {"icon": icon}


def _drop_semantic_only(output: dict[str, Any], context: TransformContext) -> dict[str, Any]:
    """Remove inputs PrimeVue has no prop for and empty class values."""
    cleaned = {k: v for k, v in output.items() if k != "iconPosition"}
    if not cleaned.get("class"):
        cleaned.pop("class", None)
    return cleaned


BUTTON = ComponentMapping(
    component="Button",
    import_statement="import Button from 'primevue/button';",
    props={"label": "label", "disabled": "disabled", "loading": "loading"},
    events={"click": "click", "focus": "focus", "blur": "blur"},
    slots={"default": "default", "icon": "icon"},
    prop_rules={
        "variant": {
            "type": "mapping",
            "target": "severity",
            "mapping": {
                "primary": "primary",
                "secondary": "secondary",
                "outline": "outlined",
                "ghost": "text",
                "link": "link",
                "danger": "danger",
                "warning": "warning",
                "success": "success",
                "info": "info",
            },
            "default": "primary",
        },
        "size": {
            "type": "mapping",
            "target": "size",
            "mapping": _SIZE_MAPPING,
            "default": "normal",
        },
        "fullWidth": {
            "type": "multiValue",
            "combiner": lambda selected, context: (
                {"class": "w-full"} if selected.get("fullWidth") else {}
            ),
        },
        "icon": {
            "type": "multiValue",
            "sources": ["icon"],
            "combiner": lambda selected, context: _button_icon(
                selected.get("icon"), context.all_inputs, context
            ),
        },
    },
    post_process=[_drop_semantic_only],
)

CARD = ComponentMapping(
    component="Card",
    import_statement="import Card from 'primevue/card';",
    props={"title": "title", "subtitle": "subtitle"},
    slots={
        "default": "content",
        "header": "header",
        "footer": "footer",
        "title": "title",
        "subtitle": "subtitle",
    },
    prop_rules={
        "padding": {
            "type": "mapping",
            "target": "class",
            "mapping": {"none": "p-0", "sm": "p-2", "md": "p-4", "lg": "p-6", "xl": "p-8"},
        },
    },
)

INPUT = ComponentMapping(
    component="InputText",
    import_statement="import InputText from 'primevue/inputtext';",
    props={
        "value": "modelValue",
        "placeholder": "placeholder",
        "disabled": "disabled",
        "readonly": "readonly",
    },
    events={"input": "update:modelValue", "focus": "focus", "blur": "blur", "change": "change"},
    prop_rules={
        "size": {"type": "mapping", "target": "size", "mapping": _SIZE_MAPPING},
        "error": {"type": "direct", "target": "invalid"},
    },
)

PRIMEVUE_ADAPTER = LibraryAdapter(
    name="primevue",
    display_name="PrimeVue",
    version="^3.0.0",
    components={"Button": BUTTON, "Card": CARD, "Input": INPUT},
)
