"""
Built-in library adapters.

Usage:
    from dsbridge.adapters import get_adapter

    adapter = get_adapter("vuetify")
    button = adapter.get_component("Button")
"""

from dsbridge.adapters.base import ComponentMapping, InputKind, LibraryAdapter
from dsbridge.adapters.primevue import PRIMEVUE_ADAPTER
from dsbridge.adapters.vuetify import VUETIFY_ADAPTER

BUILTIN_ADAPTERS: dict[str, LibraryAdapter] = {
    VUETIFY_ADAPTER.name: VUETIFY_ADAPTER,
    PRIMEVUE_ADAPTER.name: PRIMEVUE_ADAPTER,
}


def get_adapter(name: str) -> LibraryAdapter:
    """
    Get a built-in adapter by library name.

    Args:
        name: Library identifier (case-insensitive)

    Returns:
        The adapter

    Raises:
        KeyError: If no adapter exists for the library
    """
    adapter = BUILTIN_ADAPTERS.get(name.lower())
    if adapter is None:
        available = ", ".join(sorted(BUILTIN_ADAPTERS))
        raise KeyError(f"Unknown library: {name!r}. Available: {available}")
    return adapter


def list_adapters() -> list[str]:
    """List built-in library identifiers."""
    return sorted(BUILTIN_ADAPTERS)


__all__ = [
    "BUILTIN_ADAPTERS",
    "ComponentMapping",
    "InputKind",
    "LibraryAdapter",
    "get_adapter",
    "list_adapters",
]
