"""
Cache collaborator interface and a thread-safe in-memory implementation.

The orchestrator never owns the cache: the host passes a handle whose
``retrieve(namespace)`` returns a mutable mapping of
``(id, version, store_locator)`` to :class:`CacheEntry`. The host decides the
cache lifetime and eviction; the orchestrator only reads and overwrites entries.

Concurrency:
    Two simultaneous misses on the same key are not coordinated. Both may reach
    ``create`` and write two different values; the last cache write wins. This
    is an accepted limitation.
"""

import threading
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, runtime_checkable

from pydantic import SecretStr

from libs.keyvault.models import CacheKey


@dataclass
class CacheEntry:
    """Cached secret payload plus the time it was fetched or created."""

    data: SecretStr = field(repr=False)
    fetched_at: datetime


@runtime_checkable
class CacheHandle(Protocol):
    """Host-owned cache that outlives individual lookups."""

    def retrieve(self, namespace: str) -> MutableMapping[CacheKey, CacheEntry]:
        """
        Return the live mapping for ``namespace``, creating it if absent.

        Args:
            namespace: Caller scope (the orchestrator uses "keyvault.lookup")

        Returns:
            Mutable mapping of (id, version, store_locator) to CacheEntry;
            writes to it must be visible to later ``retrieve`` calls
        """
        ...


class InMemoryCache:
    """
    Process-lifetime cache handle backed by plain dicts.

    Each namespace gets its own dict, created on first ``retrieve``. Namespace
    creation is guarded by a lock; individual dict reads and writes rely on the
    GIL's atomic dict operations.

    Example:
        >>> cache = InMemoryCache()
        >>> entries = cache.retrieve("keyvault.lookup")
        >>> entries is cache.retrieve("keyvault.lookup")
        True
    """

    def __init__(self) -> None:
        self._namespaces: dict[str, dict[CacheKey, CacheEntry]] = {}
        self._lock = threading.Lock()

    def retrieve(self, namespace: str) -> MutableMapping[CacheKey, CacheEntry]:
        with self._lock:
            return self._namespaces.setdefault(namespace, {})

    def clear(self) -> None:
        with self._lock:
            for entries in self._namespaces.values():
                entries.clear()

    def __len__(self) -> int:
        """Total number of entries across all namespaces."""
        with self._lock:
            return sum(len(entries) for entries in self._namespaces.values())
