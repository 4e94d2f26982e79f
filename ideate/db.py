"""Async libsql access shared by the chat and knowledge stores.

The ``libsql`` driver is synchronous, so every call is pushed onto a worker
thread with ``asyncio.to_thread()``.  Where the connection points is decided
by settings:

- **Production**: ``TURSO_DATABASE_URL`` + ``TURSO_AUTH_TOKEN`` → remote Turso
- **Dev/test**: no Turso env vars → local SQLite file via ``database_path``

Stores normally go through :func:`connection`, which opens, applies the
store's schema once per process, and always closes.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import libsql

from ideate.config import settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence
    from pathlib import Path

# Schema statements already applied, keyed by database target.
_applied_schemas: set[tuple[str, str]] = set()


class _AsyncCursor:
    """Thin async wrapper around a synchronous libsql cursor."""

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor

    async def fetchone(self) -> tuple | None:
        return await asyncio.to_thread(self._cursor.fetchone)

    async def fetchall(self) -> list[tuple]:
        return await asyncio.to_thread(self._cursor.fetchall)

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount


class _AsyncConnection:
    """Thin async wrapper around a synchronous libsql connection."""

    def __init__(self, conn: Any, target: str) -> None:
        self._conn = conn
        self.target = target

    async def execute(self, sql: str, params: tuple = ()) -> _AsyncCursor:
        cursor = await asyncio.to_thread(self._conn.execute, sql, params)
        return _AsyncCursor(cursor)

    async def commit(self) -> None:
        await asyncio.to_thread(self._conn.commit)

    async def close(self) -> None:
        await asyncio.to_thread(self._conn.close)


def _open_local(path: str) -> Any:
    """Open a local libsql connection with WAL mode and busy timeout."""
    conn = libsql.connect(path)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    return conn


async def get_connection(local_path_override: Path | None = None) -> _AsyncConnection:
    """Return an async-wrapped libsql connection.

    If *local_path_override* is given (test isolation), it takes priority.
    Otherwise, ``TURSO_DATABASE_URL`` triggers a remote connection, and
    ``database_path`` falls back to a local file.
    """
    if local_path_override:
        local_path_override.parent.mkdir(parents=True, exist_ok=True)
        target = str(local_path_override)
        conn = await asyncio.to_thread(_open_local, target)
        return _AsyncConnection(conn, target)

    if settings.turso_database_url:
        conn = await asyncio.to_thread(
            libsql.connect,
            database=settings.turso_database_url,
            auth_token=settings.turso_auth_token,
        )
        return _AsyncConnection(conn, settings.turso_database_url)

    settings.database_path.parent.mkdir(parents=True, exist_ok=True)
    target = str(settings.database_path)
    conn = await asyncio.to_thread(_open_local, target)
    return _AsyncConnection(conn, target)


@asynccontextmanager
async def connection(
    schema: Sequence[str] = (),
    local_path_override: Path | None = None,
) -> AsyncIterator[_AsyncConnection]:
    """Open a connection, make sure *schema* exists, and close on exit.

    Each ``CREATE ... IF NOT EXISTS`` statement runs at most once per
    database target for the lifetime of the process.
    """
    db = await get_connection(local_path_override=local_path_override)
    try:
        pending = [stmt for stmt in schema if (db.target, stmt) not in _applied_schemas]
        if pending:
            for stmt in pending:
                await db.execute(stmt)
            await db.commit()
            _applied_schemas.update((db.target, stmt) for stmt in pending)
        yield db
    finally:
        await db.close()
