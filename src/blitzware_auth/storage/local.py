"""Non-secure local key/value cache contract.

Holds data that is not secret: the serialized user and the token expiry
timestamp.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Protocol, runtime_checkable


@runtime_checkable
class LocalStore(Protocol):
    """Protocol for the local key/value cache."""

    async def get_item(self, key: str) -> str | None:
        """Return the value under ``key``, or None if absent."""
        ...

    async def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        ...

    async def remove_items(self, keys: Iterable[str]) -> None:
        """Remove every key in ``keys``; absent keys are ignored."""
        ...


class InMemoryLocalStore:
    """In-memory LocalStore. Contents are lost when the process exits."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._items: dict[str, str] = {}

    async def get_item(self, key: str) -> str | None:
        async with self._lock:
            return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            self._items[key] = value

    async def remove_items(self, keys: Iterable[str]) -> None:
        async with self._lock:
            for key in keys:
                self._items.pop(key, None)

    def keys(self) -> list[str]:
        """Return stored keys (for assertions in tests)."""
        return sorted(self._items)
