"""Cached research entries and the query hash that keys them."""

from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def normalize_query(query: str) -> str:
    return query.lower().strip()


def hash_query(query: str) -> str:
    """Hash the normalized query with a 32-bit rolling ``h * 31 + c`` hash.

    The result is the signed 32-bit value in hex (``"-1f2a"`` for negative
    values). Collisions are possible and are treated as cache hits.
    """
    h = 0
    for char in normalize_query(query):
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return format(h, "x")


def _now() -> str:
    return datetime.now(UTC).isoformat()


class KnowledgeEntry(BaseModel):
    """One cached research result."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    query: str
    query_hash: str = ""
    source_type: str = "brave_search"
    content: str = ""
    summary: str = ""
    ai_optimized_content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    use_count: int = Field(default=1, ge=1)
    last_accessed_at: str = Field(default_factory=_now)
    created_at: str = Field(default_factory=_now)

    def model_post_init(self, __context: Any) -> None:
        if not self.query_hash:
            self.query_hash = hash_query(self.query)

    def to_row(self) -> tuple:
        """Serialize to a tuple matching the ``ai_knowledgebase`` column order."""
        return (
            self.id,
            self.query,
            self.query_hash,
            self.source_type,
            self.content,
            self.summary,
            self.ai_optimized_content,
            json.dumps(self.metadata),
            self.use_count,
            self.last_accessed_at,
            self.created_at,
        )

    @classmethod
    def from_row(cls, row: tuple) -> KnowledgeEntry:
        return cls(
            id=row[0],
            query=row[1],
            query_hash=row[2],
            source_type=row[3],
            content=row[4] or "",
            summary=row[5] or "",
            ai_optimized_content=row[6] or "",
            metadata=json.loads(row[7]) if row[7] else {},
            use_count=row[8],
            last_accessed_at=row[9],
            created_at=row[10],
        )
