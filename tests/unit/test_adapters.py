"""Tests for library adapters and the async ComponentTransformer."""

from typing import Any

import pytest

from dsbridge.adapters import get_adapter, list_adapters
from dsbridge.adapters.base import ComponentMapping, InputKind, LibraryAdapter
from dsbridge.core.config import EngineConfig
from dsbridge.core.ir.rules import DirectRule, MappingRule
from dsbridge.transform.component import ComponentTransformer


@pytest.fixture
def transformer() -> ComponentTransformer:
    return ComponentTransformer()


# =============================================================================
# Adapter lookup
# =============================================================================


class TestAdapterLookup:
    def test_builtin_adapters(self) -> None:
        assert list_adapters() == ["primevue", "vuetify"]

    def test_lookup_is_case_insensitive(self) -> None:
        assert get_adapter("Vuetify").name == "vuetify"

    def test_unknown_library(self) -> None:
        with pytest.raises(KeyError, match="Available"):
            get_adapter("bootstrap")

    def test_supported_components(self) -> None:
        adapter = get_adapter("primevue")
        assert adapter.list_components() == ["Button", "Card", "Input"]
        assert adapter.supports("Card")
        assert not get_adapter("vuetify").supports("Card")


class TestRulesFor:
    def test_renames_become_direct_rules(self) -> None:
        mapping = ComponentMapping(component="X", props={"label": "text"})
        rules = mapping.rules_for(InputKind.PROPS)
        assert rules == {"label": DirectRule(target="text")}

    def test_explicit_rule_replaces_rename(self) -> None:
        mapping = ComponentMapping(
            component="X",
            props={"size": "size"},
            prop_rules={"size": {"type": "mapping", "mapping": {"lg": "large"}}},
        )
        assert isinstance(mapping.rules_for("props")["size"], MappingRule)

    def test_kinds_are_separate(self) -> None:
        mapping = ComponentMapping(component="X", events={"click": "press"})
        assert mapping.rules_for(InputKind.PROPS) == {}
        assert set(mapping.rules_for(InputKind.EVENTS)) == {"click"}


# =============================================================================
# Vuetify
# =============================================================================


class TestVuetifyButton:
    @pytest.mark.asyncio
    async def test_variant_size_and_label(self, transformer: ComponentTransformer) -> None:
        props = {"variant": "primary", "size": "lg", "label": "Save"}
        output = await transformer.transform_props("Button", props, get_adapter("vuetify"))
        assert output == {"variant": "elevated", "size": "large", "text": "Save"}

    @pytest.mark.asyncio
    async def test_unknown_size_uses_default(self, transformer: ComponentTransformer) -> None:
        output = await transformer.transform_props("Button", {"size": "huge"}, get_adapter("vuetify"))
        assert output == {"size": "default"}

    @pytest.mark.asyncio
    async def test_icon_on_the_right(self, transformer: ComponentTransformer) -> None:
        props = {"icon": "check", "iconPosition": "right"}
        output = await transformer.transform_props("Button", props, get_adapter("vuetify"))
        assert output == {"appendIcon": "mdi-check"}

    @pytest.mark.asyncio
    async def test_icon_defaults_to_the_left(self, transformer: ComponentTransformer) -> None:
        output = await transformer.transform_props("Button", {"icon": "check"}, get_adapter("vuetify"))
        assert output == {"prependIcon": "mdi-check"}

    @pytest.mark.asyncio
    async def test_rounded(self, transformer: ComponentTransformer) -> None:
        adapter = get_adapter("vuetify")
        assert await transformer.transform_props("Button", {"rounded": True}, adapter) == {
            "rounded": "pill"
        }
        assert await transformer.transform_props("Button", {"rounded": False}, adapter) == {}

    @pytest.mark.asyncio
    async def test_events_and_slots(self, transformer: ComponentTransformer) -> None:
        adapter = get_adapter("vuetify")
        events = await transformer.transform_events("Button", {"click": "onSave"}, adapter)
        slots = await transformer.transform_slots("Button", {"icon": "<svg/>"}, adapter)
        assert events == {"click": "onSave"}
        assert slots == {"prepend": "<svg/>"}


class TestVuetifyInput:
    @pytest.mark.asyncio
    async def test_defaults_fill_missing_outputs(self, transformer: ComponentTransformer) -> None:
        props = {"size": "sm", "value": "hello"}
        output = await transformer.transform_props("Input", props, get_adapter("vuetify"))
        assert output == {"variant": "outlined", "density": "compact", "modelValue": "hello"}

    @pytest.mark.asyncio
    async def test_event_rename(self, transformer: ComponentTransformer) -> None:
        output = await transformer.transform_events(
            "Input", {"input": "onInput"}, get_adapter("vuetify")
        )
        assert output == {"update:modelValue": "onInput"}


# =============================================================================
# PrimeVue
# =============================================================================


class TestPrimeVue:
    @pytest.mark.asyncio
    async def test_button(self, transformer: ComponentTransformer) -> None:
        props = {"variant": "ghost", "fullWidth": True, "icon": "check", "iconPosition": "right"}
        output = await transformer.transform_props("Button", props, get_adapter("primevue"))
        assert output == {
            "severity": "text",
            "class": "w-full",
            "icon": "pi pi-check",
            "iconPos": "right",
        }

    @pytest.mark.asyncio
    async def test_button_fallbacks(self, transformer: ComponentTransformer) -> None:
        props = {"variant": "sparkly", "fullWidth": False}
        output = await transformer.transform_props("Button", props, get_adapter("primevue"))
        assert output == {"severity": "primary"}

    @pytest.mark.asyncio
    async def test_card_padding(self, transformer: ComponentTransformer) -> None:
        output = await transformer.transform_props(
            "Card", {"padding": "md", "title": "Hi"}, get_adapter("primevue")
        )
        assert output == {"class": "p-4", "title": "Hi"}

    @pytest.mark.asyncio
    async def test_input_error_becomes_invalid(self, transformer: ComponentTransformer) -> None:
        output = await transformer.transform_props(
            "Input", {"error": True, "size": "lg"}, get_adapter("primevue")
        )
        assert output == {"invalid": True, "size": "large"}


# =============================================================================
# Transformer behavior
# =============================================================================


class TestComponentTransformer:
    @pytest.mark.asyncio
    async def test_unsupported_component(self, transformer: ComponentTransformer) -> None:
        with pytest.raises(KeyError, match="Card"):
            await transformer.transform_props("Card", {}, get_adapter("vuetify"))

    @pytest.mark.asyncio
    async def test_library_scoped_rules(self, transformer: ComponentTransformer) -> None:
        rule: dict[str, Any] = {
            "type": "custom",
            "name": "uppercase",
            "library": "other",
        }
        adapter = LibraryAdapter(
            name="custom",
            display_name="Custom",
            components={"Tag": ComponentMapping(component="Tag", prop_rules={"label": rule})},
        )
        output = await transformer.transform_props("Tag", {"label": "new"}, adapter)
        assert output == {"label": "new"}

    @pytest.mark.asyncio
    async def test_repeat_calls_hit_cache(self) -> None:
        transformer = ComponentTransformer()
        adapter = get_adapter("vuetify")
        await transformer.transform_props("Button", {"variant": "primary"}, adapter)
        await transformer.transform_props("Button", {"variant": "primary"}, adapter)
        assert transformer.stats()["hits"] == 1

    @pytest.mark.asyncio
    async def test_cache_disabled_by_config(self) -> None:
        transformer = ComponentTransformer(config=EngineConfig(use_cache=False))
        await transformer.transform_props("Button", {"variant": "primary"}, get_adapter("vuetify"))
        assert transformer.stats()["size"] == 0
