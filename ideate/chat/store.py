"""ChatStore — sessions, message log, context and lead submissions via libsql."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ideate.chat.models import ChatMessage, LeadSubmission, Role, make_id
from ideate.context.models import ConversationContext
from ideate.db import connection

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS chat_sessions (
        id         TEXT PRIMARY KEY,
        status     TEXT NOT NULL DEFAULT 'active',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS chat_messages (
        id          TEXT PRIMARY KEY,
        session_id  TEXT NOT NULL,
        role        TEXT NOT NULL,
        content     TEXT NOT NULL,
        suggestions TEXT NOT NULL DEFAULT '[]',
        created_at  TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_chat_messages_session "
    "ON chat_messages (session_id, created_at)",
    """
    CREATE TABLE IF NOT EXISTS chat_contexts (
        session_id TEXT PRIMARY KEY,
        context    TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ideation_submissions (
        id           TEXT PRIMARY KEY,
        session_id   TEXT,
        name         TEXT NOT NULL,
        email        TEXT NOT NULL,
        phone        TEXT NOT NULL DEFAULT '',
        chat_summary TEXT NOT NULL DEFAULT '',
        created_at   TEXT NOT NULL
    )
    """,
)

_MESSAGE_COLUMNS = "id, session_id, role, content, suggestions, created_at"


class ChatStore:
    """Persists chat sessions in SQLite / Turso.

    Singleton accessed via ``ChatStore.get()``.  Pass an explicit *db_path*
    for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    _instance: ChatStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path

    @classmethod
    def get(cls) -> ChatStore:
        """Return the shared ChatStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    def _connect(self):  # noqa: ANN202
        return connection(_SCHEMA, local_path_override=self._db_path)

    # -- Sessions --------------------------------------------------------------

    async def create_session(self) -> str:
        """Start a new active session. Returns its id."""
        session_id = make_id()
        now = datetime.now(UTC).isoformat()
        async with self._connect() as db:
            await db.execute(
                "INSERT INTO chat_sessions (id, status, created_at, updated_at) "
                "VALUES (?, 'active', ?, ?)",
                (session_id, now, now),
            )
            await db.commit()
        logger.info("Created chat session %s", session_id)
        return session_id

    async def get_status(self, session_id: str) -> str | None:
        """Return the session status, or None if the session does not exist."""
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT status FROM chat_sessions WHERE id = ?", (session_id,)
            )
            row = await cursor.fetchone()
            return row[0] if row else None

    async def set_status(self, session_id: str, status: str) -> bool:
        """Update the session status. Returns True if a row was updated."""
        async with self._connect() as db:
            cursor = await db.execute(
                "UPDATE chat_sessions SET status = ?, updated_at = ? WHERE id = ?",
                (status, datetime.now(UTC).isoformat(), session_id),
            )
            await db.commit()
            return cursor.rowcount > 0

    # -- Messages --------------------------------------------------------------

    async def append_message(
        self,
        session_id: str,
        role: Role,
        content: str,
        suggestions: list[str] | None = None,
    ) -> ChatMessage:
        """Append one message to the session log."""
        message = ChatMessage(
            session_id=session_id,
            role=role,
            content=content,
            suggestions=suggestions or [],
        )
        async with self._connect() as db:
            await db.execute(
                f"INSERT INTO chat_messages ({_MESSAGE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                message.to_row(),
            )
            await db.commit()
        return message

    async def list_messages(self, session_id: str, limit: int | None = None) -> list[ChatMessage]:
        """Messages oldest first. With *limit*, only the most recent ones."""
        async with self._connect() as db:
            if limit is None:
                cursor = await db.execute(
                    f"SELECT {_MESSAGE_COLUMNS} FROM chat_messages WHERE session_id = ? "
                    "ORDER BY created_at ASC, rowid ASC",
                    (session_id,),
                )
                rows = await cursor.fetchall()
            else:
                cursor = await db.execute(
                    f"SELECT {_MESSAGE_COLUMNS} FROM chat_messages WHERE session_id = ? "
                    "ORDER BY created_at DESC, rowid DESC LIMIT ?",
                    (session_id, limit),
                )
                rows = list(reversed(await cursor.fetchall()))
        return [ChatMessage.from_row(row) for row in rows]

    # -- Context ---------------------------------------------------------------

    async def get_context(self, session_id: str) -> ConversationContext | None:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT context FROM chat_contexts WHERE session_id = ?", (session_id,)
            )
            row = await cursor.fetchone()
        if not row:
            return None
        return ConversationContext.model_validate_json(row[0])

    async def put_context(self, session_id: str, context: ConversationContext) -> None:
        """Replace the stored context in a single write."""
        async with self._connect() as db:
            await db.execute(
                "INSERT OR REPLACE INTO chat_contexts (session_id, context, updated_at) "
                "VALUES (?, ?, ?)",
                (session_id, context.model_dump_json(), datetime.now(UTC).isoformat()),
            )
            await db.commit()

    # -- Leads -----------------------------------------------------------------

    async def add_lead(
        self, session_id: str | None, lead: LeadSubmission, chat_summary: str
    ) -> str:
        """Record a lead-capture submission. Returns the submission id."""
        submission_id = make_id()
        async with self._connect() as db:
            await db.execute(
                """
                INSERT INTO ideation_submissions
                    (id, session_id, name, email, phone, chat_summary, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    submission_id,
                    session_id,
                    lead.name,
                    lead.email,
                    lead.phone,
                    chat_summary,
                    datetime.now(UTC).isoformat(),
                ),
            )
            await db.commit()
        logger.info("Recorded lead submission %s for session %s", submission_id, session_id)
        return submission_id

    async def list_leads(self, session_id: str) -> list[dict]:
        async with self._connect() as db:
            cursor = await db.execute(
                "SELECT id, session_id, name, email, phone, chat_summary, created_at "
                "FROM ideation_submissions WHERE session_id = ? ORDER BY created_at",
                (session_id,),
            )
            rows = await cursor.fetchall()
        return [
            {
                "id": row[0],
                "session_id": row[1],
                "name": row[2],
                "email": row[3],
                "phone": row[4],
                "chat_summary": row[5],
                "created_at": row[6],
            }
            for row in rows
        ]
