"""KnowledgeStore — content-addressed cache of research results via libsql."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ideate.db import connection
from ideate.knowledge.models import KnowledgeEntry, hash_query

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS ai_knowledgebase (
        id                   TEXT PRIMARY KEY,
        query                TEXT NOT NULL,
        query_hash           TEXT NOT NULL,
        source_type          TEXT NOT NULL,
        content              TEXT NOT NULL DEFAULT '',
        summary              TEXT NOT NULL DEFAULT '',
        ai_optimized_content TEXT NOT NULL DEFAULT '',
        metadata             TEXT NOT NULL DEFAULT '{}',
        use_count            INTEGER NOT NULL DEFAULT 1,
        last_accessed_at     TEXT NOT NULL,
        created_at           TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_ai_knowledgebase_hash ON ai_knowledgebase (query_hash)",
)

_COLUMNS = (
    "id, query, query_hash, source_type, content, summary, ai_optimized_content, "
    "metadata, use_count, last_accessed_at, created_at"
)

RELATED_LIMIT = 3


def is_exact_hit(entries: list[KnowledgeEntry], query: str) -> bool:
    """True when *entries* came from an exact hash match for *query*."""
    return bool(entries) and entries[0].query_hash == hash_query(query)


class KnowledgeStore:
    """Research cache shared by every session.

    Singleton accessed via ``KnowledgeStore.get()``.  Pass an explicit
    *db_path* for test isolation (e.g. ``tmp_path / "test.db"``).  There is
    no eviction; entries live until removed by hand.
    """

    _instance: KnowledgeStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path

    @classmethod
    def get(cls) -> KnowledgeStore:
        """Return the shared KnowledgeStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    def _connect(self):  # noqa: ANN202
        return connection(_SCHEMA, local_path_override=self._db_path)

    # -- Read ------------------------------------------------------------------

    async def lookup(self, query: str) -> list[KnowledgeEntry]:
        """Find cached knowledge for *query*.

        An exact hash match is returned alone, after bumping its
        ``use_count`` and ``last_accessed_at``.  Otherwise up to three
        entries whose query or summary contains *query* (case-insensitive)
        are returned, most used first.  Use :func:`is_exact_hit` to tell
        the two apart.
        """
        query_hash = hash_query(query)
        async with self._connect() as db:
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM ai_knowledgebase WHERE query_hash = ? "
                "ORDER BY use_count DESC LIMIT 1",
                (query_hash,),
            )
            row = await cursor.fetchone()

            if row:
                entry = KnowledgeEntry.from_row(row)
                now = datetime.now(UTC).isoformat()
                await db.execute(
                    "UPDATE ai_knowledgebase SET use_count = use_count + 1, "
                    "last_accessed_at = ? WHERE id = ?",
                    (now, entry.id),
                )
                await db.commit()
                entry.use_count += 1
                entry.last_accessed_at = now
                logger.debug("Knowledge cache hit: %s (%s)", query, query_hash)
                return [entry]

            pattern = f"%{query.strip()}%"
            cursor = await db.execute(
                f"SELECT {_COLUMNS} FROM ai_knowledgebase "
                "WHERE query LIKE ? OR summary LIKE ? "
                "ORDER BY use_count DESC LIMIT ?",
                (pattern, pattern, RELATED_LIMIT),
            )
            rows = await cursor.fetchall()
            return [KnowledgeEntry.from_row(r) for r in rows]

    # -- Write -----------------------------------------------------------------

    async def store(self, entry: KnowledgeEntry) -> KnowledgeEntry:
        """Insert a new entry. Returns the same entry object."""
        async with self._connect() as db:
            await db.execute(
                f"INSERT INTO ai_knowledgebase ({_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                entry.to_row(),
            )
            await db.commit()
        logger.info("Cached knowledge for query: %s", entry.query)
        return entry
