"""SQLite-backed LocalStore (persistent, file-based)."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import aiosqlite

DEFAULT_DB_PATH = "blitzware_auth.db"
ITEMS_TABLE = "local_items"


class SQLiteLocalStore:
    """LocalStore persisted in a SQLite file; survives process restarts.

    Each call opens its own aiosqlite connection, so the store can be shared
    by tasks on the same event loop without extra locking.
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def _ensure_table(self, conn: aiosqlite.Connection) -> None:
        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {ITEMS_TABLE} (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        await conn.commit()

    async def get_item(self, key: str) -> str | None:
        async with aiosqlite.connect(self._db_path) as conn:
            await self._ensure_table(conn)
            cursor = await conn.execute(
                f"SELECT value FROM {ITEMS_TABLE} WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
            await cursor.close()
        return row[0] if row is not None else None

    async def set_item(self, key: str, value: str) -> None:
        async with aiosqlite.connect(self._db_path) as conn:
            await self._ensure_table(conn)
            await conn.execute(
                f"INSERT OR REPLACE INTO {ITEMS_TABLE} (key, value) VALUES (?, ?)",
                (key, value),
            )
            await conn.commit()

    async def remove_items(self, keys: Iterable[str]) -> None:
        rows = [(key,) for key in keys]
        if not rows:
            return
        async with aiosqlite.connect(self._db_path) as conn:
            await self._ensure_table(conn)
            await conn.executemany(f"DELETE FROM {ITEMS_TABLE} WHERE key = ?", rows)
            await conn.commit()
