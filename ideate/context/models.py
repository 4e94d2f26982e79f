"""Data models for extracted signals and accumulated conversation context."""

from typing import Literal

from pydantic import BaseModel, Field

CompanySize = Literal["small", "medium", "enterprise"]
Urgency = Literal["high", "medium"]


class Insights(BaseModel):
    """Signals found in a single inbound message."""

    mentioned_industries: list[str] = Field(default_factory=list)
    mentioned_pain_points: list[str] = Field(default_factory=list)
    mentioned_goals: list[str] = Field(default_factory=list)
    company_size: CompanySize | None = None
    urgency: Urgency | None = None


class ConversationContext(BaseModel):
    """Running business profile for one chat session.

    Scalar fields are first-write-wins. The list fields behave as
    insertion-ordered sets: they only grow, and duplicates are suppressed
    by exact string equality.
    """

    industry: str | None = None
    company_size: CompanySize | None = None
    pain_points: list[str] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)
    current_tools: list[str] = Field(default_factory=list)
    budget_range: str | None = None
    timeline: str | None = None
    # Kept in the schema for persistence compatibility; nothing fills it.
    stakeholders: list[str] = Field(default_factory=list)
