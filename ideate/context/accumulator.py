"""Merge extracted signals and recent history into the running context."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Protocol

from ideate.config import settings
from ideate.context.models import CompanySize, ConversationContext, Insights
from ideate.knowledge.catalog import KNOWN_TOOLS

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ideate.chat.models import ChatMessage

logger = logging.getLogger(__name__)

_TOOL_PATTERN = re.compile(r"\b(" + "|".join(KNOWN_TOOLS) + r")\b", re.IGNORECASE)
_BUDGET_PATTERN = re.compile(r"\$?([\d,]+(?:k|K|000)?)\s*(budget|cost|spend)", re.IGNORECASE)
_TIMELINE_PATTERN = re.compile(r"\b(\d+\s*(week|month|day|year)s?)\b", re.IGNORECASE)


class ContextStore(Protocol):
    """Persistence the accumulator needs; ``ChatStore`` satisfies it."""

    async def get_context(self, session_id: str) -> ConversationContext | None: ...

    async def put_context(self, session_id: str, context: ConversationContext) -> None: ...


def _union(existing: list[str], new: Iterable[str]) -> list[str]:
    """Ordered union with exact-string dedup."""
    merged = list(existing)
    for item in new:
        if item not in merged:
            merged.append(item)
    return merged


def build_context(
    insights: Insights,
    previous: ConversationContext | None = None,
    history: Sequence[ChatMessage] = (),
    industry: str | None = None,
    company_size: CompanySize | None = None,
) -> ConversationContext:
    """Return the updated context for this turn. Pure; *previous* is not mutated.

    Scalars resolve as explicit argument, then stored value, then first
    extracted value. List fields are unioned. User messages in *history*
    backfill tools, budget and timeline; budget and timeline keep the
    first match found.
    """
    prev = previous or ConversationContext()

    context = ConversationContext(
        industry=industry or prev.industry or next(iter(insights.mentioned_industries), None),
        company_size=company_size or prev.company_size or insights.company_size,
        pain_points=_union(prev.pain_points, insights.mentioned_pain_points),
        goals=_union(prev.goals, insights.mentioned_goals),
        current_tools=list(prev.current_tools),
        budget_range=prev.budget_range,
        timeline=prev.timeline,
        stakeholders=list(prev.stakeholders),
    )

    for msg in history:
        if msg.role != "user":
            continue

        context.current_tools = _union(context.current_tools, _TOOL_PATTERN.findall(msg.content))

        if not context.budget_range:
            budget = _BUDGET_PATTERN.search(msg.content)
            if budget:
                context.budget_range = budget.group(1)

        if not context.timeline:
            timeline = _TIMELINE_PATTERN.search(msg.content)
            if timeline:
                context.timeline = timeline.group(0)

    return context


class ContextAccumulator:
    """Loads, updates and persists a session's ``ConversationContext``.

    Storage failures never reach the caller: a failed load starts from an
    empty context and a failed save is logged while the in-memory result is
    still returned.
    """

    def __init__(self, store: ContextStore, window_size: int | None = None) -> None:
        self._store = store
        self.window_size = window_size or settings.history_window_size

    async def load(self, session_id: str) -> ConversationContext | None:
        try:
            return await self._store.get_context(session_id)
        except Exception:
            logger.exception("Failed to load context for session %s", session_id)
            return None

    async def update(
        self,
        session_id: str,
        insights: Insights,
        history: Sequence[ChatMessage] = (),
        industry: str | None = None,
        company_size: CompanySize | None = None,
    ) -> ConversationContext:
        """Merge this turn's signals into the stored context and save it."""
        previous = await self.load(session_id)
        context = build_context(
            insights,
            previous=previous,
            history=list(history)[-self.window_size :],
            industry=industry,
            company_size=company_size,
        )

        try:
            await self._store.put_context(session_id, context)
        except Exception:
            logger.exception("Failed to persist context for session %s", session_id)

        return context
