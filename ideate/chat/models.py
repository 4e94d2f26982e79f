"""Data models for chat sessions, messages and lead submissions."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ideate.context.models import ConversationContext, Insights

Role = Literal["user", "model"]


def _now() -> str:
    return datetime.now(UTC).isoformat()


def make_id() -> str:
    """Generate a new opaque identifier."""
    return uuid.uuid4().hex


@dataclass
class ChatMessage:
    """One entry in a session's append-only message log.

    Attributes:
        id: Unique identifier (UUID hex).
        session_id: Owning session.
        role: ``"user"`` or ``"model"``.
        content: Visible message text (suggestion directive already stripped).
        suggestions: Chip labels offered with a model reply.
        created_at: ISO 8601 timestamp; the log is ordered by it.
    """

    session_id: str
    role: Role
    content: str
    suggestions: list[str] = field(default_factory=list)
    id: str = field(default_factory=make_id)
    created_at: str = field(default_factory=_now)

    def to_row(self) -> tuple:
        """Serialize to a tuple matching the ``chat_messages`` column order."""
        return (
            self.id,
            self.session_id,
            self.role,
            self.content,
            json.dumps(self.suggestions),
            self.created_at,
        )

    @classmethod
    def from_row(cls, row: tuple) -> ChatMessage:
        return cls(
            id=row[0],
            session_id=row[1],
            role=row[2],
            content=row[3],
            suggestions=json.loads(row[4]) if row[4] else [],
            created_at=row[5],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "suggestions": self.suggestions,
            "created_at": self.created_at,
        }


class LeadSubmission(BaseModel):
    """Contact details captured after the user accepts a handoff offer."""

    name: str
    email: str
    phone: str = ""

    @field_validator("name", "email")
    @classmethod
    def _required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("phone")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class TurnResult(BaseModel):
    """Everything the chat surface needs to render one model reply."""

    reply: str
    suggestions: list[str] = Field(default_factory=list)
    is_offer: bool = False
    stage: str
    context: ConversationContext
    insights: Insights
    knowledge_gaps: list[str] = Field(default_factory=list)
    used_research: bool = False
    fallback: bool = False
