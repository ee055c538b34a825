"""
In-memory memoization shared by the transformation and theme pipelines.

Keys are SHA-256 digests of a canonical JSON serialization (sorted keys),
so logically equal inputs always hit the same entry regardless of dict
insertion order. Entries never expire; only ``clear()`` removes them.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


def callable_key(fn: Callable[..., Any]) -> str:
    """
    Identity string for a callable (functions are compared by identity).

    The id is only unique while the callable is alive; CacheLayer keeps
    every callable that enters one of its keys alive for that reason.
    """
    module = getattr(fn, "__module__", None) or "?"
    name = getattr(fn, "__qualname__", None) or type(fn).__qualname__
    return f"<fn {module}.{name}@{id(fn):x}>"


def _normalize(value: Any, found: list[Callable[..., Any]] | None = None) -> Any:
    """
    Convert a value into a JSON-serializable structure with stable ordering.

    Callables met along the way are appended to ``found`` when given.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, BaseModel):
        return {"__model__": type(value).__name__, **_normalize(dict(value), found)}
    if isinstance(value, dict):
        return {str(k): _normalize(v, found) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v, found) for v in value]
    if isinstance(value, (set, frozenset)):
        items = [_normalize(v, found) for v in value]
        return sorted(items, key=lambda item: json.dumps(item, sort_keys=True))
    if callable(value):
        if found is not None:
            found.append(value)
        return callable_key(value)
    return repr(value)


def canonical(value: Any, found: list[Callable[..., Any]] | None = None) -> str:
    """
    Serialize a value canonically.

    Mapping keys are sorted, pydantic models are dumped field by field, and
    callables are represented by identity.

    Args:
        value: Any value built from dicts, lists, scalars, models, callables
        found: Collects every callable in the value, if given

    Returns:
        Deterministic JSON string
    """
    return json.dumps(_normalize(value, found), sort_keys=True, separators=(",", ":"))


def compute_key(
    operation: str, *parts: Any, found: list[Callable[..., Any]] | None = None
) -> str:
    """Hash an operation name and its inputs into a cache key."""
    payload = canonical({"op": operation, "parts": list(parts)}, found)
    return hashlib.sha256(payload.encode()).hexdigest()


@dataclass
class CacheLayer:
    """
    Thread-safe memo table.

    Reads are plain dict lookups; inserts take a lock and only write when
    the key is absent, so the first stored value for a key wins.

    Callables inside a key are pinned until ``clear()`` so their ids cannot
    be reused by a later callable while entries keyed on them exist.
    """

    enabled: bool = True
    _entries: dict[str, Any] = field(default_factory=dict)
    _hits: int = 0
    _misses: int = 0
    _pinned: dict[int, Callable[..., Any]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def key(self, operation: str, *parts: Any) -> str:
        found: list[Callable[..., Any]] = []
        key = compute_key(operation, *parts, found=found)
        if self.enabled and found:
            with self._lock:
                for fn in found:
                    self._pinned.setdefault(id(fn), fn)
        return key

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value for key, or default."""
        if not self.enabled:
            return default
        value = self._entries.get(key, _MISSING)
        if value is _MISSING:
            return default
        return value

    def __contains__(self, key: str) -> bool:
        return self.enabled and key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def set(self, key: str, value: T) -> T:
        """
        Store a value unless the key already holds one.

        Returns:
            The value now stored under key
        """
        if not self.enabled:
            return value
        with self._lock:
            existing = self._entries.get(key, _MISSING)
            if existing is not _MISSING:
                return existing
            self._entries[key] = value
            return value

    def get_or_compute(self, key: str, factory: Callable[[], T]) -> T:
        """
        Return the cached value for key, computing and storing it on a miss.

        The factory runs outside the lock; nothing is stored if it raises.
        """
        if self.enabled:
            value = self._entries.get(key, _MISSING)
            if value is not _MISSING:
                with self._lock:
                    self._hits += 1
                logger.debug("Cache hit: %s", key[:12])
                return value
            with self._lock:
                self._misses += 1
        result = factory()
        return self.set(key, result)

    def clear(self) -> None:
        """Drop every entry and reset counters."""
        with self._lock:
            self._entries.clear()
            self._pinned.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict[str, int]:
        """Hit/miss counters and entry count."""
        return {"hits": self._hits, "misses": self._misses, "size": len(self._entries)}
