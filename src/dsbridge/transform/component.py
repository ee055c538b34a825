"""
Component-level transformation facade.

Ties a LibraryAdapter's mappings to a TransformationSession so callers can
transform a semantic component's props, events, and slots for a library in
one call. The methods are async only so they compose with async config
loading; all work happens synchronously.
"""

from __future__ import annotations

import logging
from typing import Any

from dsbridge.adapters.base import ComponentMapping, InputKind, LibraryAdapter
from dsbridge.core.config import EngineConfig
from dsbridge.transform.context import TransformContext
from dsbridge.transform.session import TransformationSession

logger = logging.getLogger(__name__)


class ComponentTransformer:
    """Transforms semantic component inputs for a target library."""

    def __init__(
        self,
        session: TransformationSession | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.session = session or TransformationSession(use_cache=self.config.use_cache)

    def mapping_for(self, component: str, adapter: LibraryAdapter) -> ComponentMapping:
        """
        Look up the adapter's mapping for a component.

        Raises:
            KeyError: If the adapter does not support the component
        """
        mapping = adapter.get_component(component)
        if mapping is None:
            raise KeyError(f"{adapter.display_name} has no mapping for component {component!r}")
        return mapping

    async def transform_props(
        self,
        component: str,
        props: dict[str, Any],
        adapter: LibraryAdapter,
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Transform props, then fill in the adapter's defaults for missing outputs."""
        mapping = self.mapping_for(component, adapter)
        output = self._run(InputKind.PROPS, component, props, adapter, options)
        return {**mapping.defaults, **output}

    async def transform_events(
        self,
        component: str,
        events: dict[str, Any],
        adapter: LibraryAdapter,
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return self._run(InputKind.EVENTS, component, events, adapter, options)

    async def transform_slots(
        self,
        component: str,
        slots: dict[str, Any],
        adapter: LibraryAdapter,
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return self._run(InputKind.SLOTS, component, slots, adapter, options)

    def _run(
        self,
        kind: InputKind,
        component: str,
        values: dict[str, Any],
        adapter: LibraryAdapter,
        options: dict[str, Any] | None,
    ) -> dict[str, Any]:
        mapping = self.mapping_for(component, adapter)
        context = TransformContext(
            component=component,
            library=adapter.name,
            options=dict(options or {}),
        )
        post = mapping.post_process if kind is InputKind.PROPS else []
        logger.debug("Transforming %s %s for %s", component, kind.value, adapter.name)
        return self.session.run(
            values,
            mapping.rules_for(kind),
            context,
            post_processors=post,
            kind=kind.value,
        )

    def clear_cache(self) -> None:
        self.session.clear_cache()

    def stats(self) -> dict[str, int]:
        return self.session.stats()
