"""Token persistence for the BlitzWare auth client.

This package provides:
- SecureStore / LocalStore protocols for the platform collaborators
- InMemorySecureStore, InMemoryLocalStore, SQLiteLocalStore implementations
- TokenStorage, the persistence contract used by the engine

Factory:
- create_local_store() builds a LocalStore from BLITZWARE_STORAGE_BACKEND
  and BLITZWARE_STORAGE_PATH (default: memory, blitzware_auth.db).
"""

import os
from pathlib import Path

from blitzware_auth.storage.local import InMemoryLocalStore, LocalStore
from blitzware_auth.storage.secure import InMemorySecureStore, SecureStore
from blitzware_auth.storage.sqlite import DEFAULT_DB_PATH, SQLiteLocalStore
from blitzware_auth.storage.tokens import TokenKind, TokenStorage

BLITZWARE_STORAGE_BACKEND_ENV = "BLITZWARE_STORAGE_BACKEND"
BLITZWARE_STORAGE_PATH_ENV = "BLITZWARE_STORAGE_PATH"


def create_local_store() -> LocalStore:
    """Create a LocalStore from environment.

    Reads BLITZWARE_STORAGE_BACKEND (default "memory") and
    BLITZWARE_STORAGE_PATH (default "blitzware_auth.db" for sqlite).

    Raises:
        ValueError: If BLITZWARE_STORAGE_BACKEND is not "memory" or "sqlite".
    """
    backend = os.environ.get(BLITZWARE_STORAGE_BACKEND_ENV, "memory").strip().lower()
    path = os.environ.get(BLITZWARE_STORAGE_PATH_ENV, DEFAULT_DB_PATH).strip()

    if backend == "memory":
        return InMemoryLocalStore()
    if backend == "sqlite":
        return SQLiteLocalStore(db_path=Path(path))
    raise ValueError(
        f"Unknown {BLITZWARE_STORAGE_BACKEND_ENV}={backend!r}. Use 'memory' or 'sqlite'."
    )


__all__ = [
    "InMemoryLocalStore",
    "InMemorySecureStore",
    "LocalStore",
    "SQLiteLocalStore",
    "SecureStore",
    "TokenKind",
    "TokenStorage",
    "create_local_store",
]
