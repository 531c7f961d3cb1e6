"""Secure secret store contract.

The platform keystore (Keychain, Android Keystore, OS credential vault) is
an external collaborator. The engine only needs per-key get/set/delete of
string secrets, expressed here as a Protocol.
"""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable


@runtime_checkable
class SecureStore(Protocol):
    """Protocol for hardware-backed secret storage.

    Implementations raise on write/delete failure; the token storage layer
    turns those into StorageError. Read failures may raise too and are
    treated as an absent secret.
    """

    async def set_secret(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    async def get_secret(self, key: str) -> str | None:
        """Return the secret stored under ``key``, or None if absent."""
        ...

    async def delete_secret(self, key: str) -> None:
        """Delete the secret under ``key``; deleting an absent key is not an error."""
        ...


class InMemorySecureStore:
    """In-memory SecureStore.

    Useful for tests and for hosts without a keystore. Secrets do not
    survive the process.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._secrets: dict[str, str] = {}

    async def set_secret(self, key: str, value: str) -> None:
        async with self._lock:
            self._secrets[key] = value

    async def get_secret(self, key: str) -> str | None:
        async with self._lock:
            return self._secrets.get(key)

    async def delete_secret(self, key: str) -> None:
        async with self._lock:
            self._secrets.pop(key, None)

    def keys(self) -> list[str]:
        """Return stored keys (for assertions in tests)."""
        return sorted(self._secrets)
