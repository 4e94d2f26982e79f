"""Per-turn chat pipeline: extract, accumulate, research, generate, post-process."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from ideate.chat.models import ChatMessage, LeadSubmission, TurnResult, make_id
from ideate.chat.store import ChatStore
from ideate.config import settings
from ideate.context.accumulator import ContextAccumulator
from ideate.context.extractor import extract_insights
from ideate.context.models import CompanySize, ConversationContext
from ideate.llm.client import generate_reply
from ideate.llm.postprocess import is_handoff_offer, parse_suggestions
from ideate.llm.prompt import (
    build_system_prompt,
    get_conversation_stage,
    identify_knowledge_gaps,
)
from ideate.research.gateway import ResearchGateway

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Hi there! I'm your AI ideation partner. 💡\n\n"
    "I'd love to hear about your business idea, challenge, or pain point. "
    "What's on your mind? Whether it's a problem you're trying to solve or an "
    "opportunity you want to explore, I'm here to help you think it through!"
)

WELCOME_SUGGESTIONS = [
    "Automate a manual process",
    "Improve customer support",
    "Explore AI for my industry",
]

FALLBACK_REPLY = (
    "I'm having trouble connecting right now. Could you try sending that again? "
    "In the meantime, tell me a bit more about what you're working on."
)

FALLBACK_SUGGESTIONS = [
    "Tell me about AI automation",
    "How can AI help my business?",
    "What does a project cost?",
    "Try again",
]

DECLINE_MESSAGE = (
    "No problem! Feel free to keep exploring your idea with me, or ask any other "
    "questions you have. I'm here to help!"
)


@dataclass
class OfferResponse:
    show_contact_form: bool
    message: ChatMessage | None = None


@dataclass
class SessionStart:
    session_id: str
    messages: list[ChatMessage] = field(default_factory=list)


class ChatPipeline:
    """Runs user turns for any number of independent sessions.

    Turns for the same session are serialized with a per-session lock.
    Every external call is wrapped so that a failure degrades the reply
    instead of raising; the only visible failure is the fallback apology.
    """

    def __init__(
        self,
        store: ChatStore | None = None,
        research: ResearchGateway | None = None,
        window_size: int | None = None,
    ) -> None:
        self.store = store or ChatStore.get()
        self.research = research or ResearchGateway()
        self.window_size = window_size or settings.history_window_size
        self.accumulator = ContextAccumulator(self.store, window_size=self.window_size)
        # Entries live only while a turn for that session is running or queued.
        self._locks: dict[str, asyncio.Lock] = {}
        self._pending: dict[str, int] = {}

    # -- Sessions --------------------------------------------------------------

    async def start_session(self) -> SessionStart:
        """Create a session and persist the welcome message.

        If the store is unavailable the chat still starts with an
        unpersisted session id.
        """
        try:
            session_id = await self.store.create_session()
        except Exception:
            logger.exception("Failed to create chat session; continuing unsaved")
            session_id = make_id()
        welcome = await self._save(session_id, "model", WELCOME_MESSAGE, WELCOME_SUGGESTIONS)
        return SessionStart(session_id=session_id, messages=[welcome])

    async def resume_session(self, session_id: str) -> list[ChatMessage] | None:
        """Return the session's messages, or None if the session is unknown."""
        if await self.store.get_status(session_id) is None:
            return None
        return await self.store.list_messages(session_id)

    async def session_exists(self, session_id: str) -> bool:
        """True if the store knows *session_id*.

        When the store itself is unreachable the answer is True, so a chat
        started unsaved can keep going.
        """
        try:
            return await self.store.get_status(session_id) is not None
        except Exception:
            logger.exception("Failed to look up session %s; assuming it exists", session_id)
            return True

    # -- Turns -----------------------------------------------------------------

    async def handle_message(
        self,
        session_id: str,
        text: str,
        industry: str | None = None,
        company_size: CompanySize | None = None,
    ) -> TurnResult:
        """Process one user message and return the model's reply."""
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._pending[session_id] = self._pending.get(session_id, 0) + 1
        try:
            async with lock:
                return await self._run_turn(session_id, text.strip(), industry, company_size)
        finally:
            self._pending[session_id] -= 1
            if not self._pending[session_id]:
                del self._pending[session_id]
                del self._locks[session_id]

    async def _run_turn(
        self,
        session_id: str,
        text: str,
        industry: str | None,
        company_size: CompanySize | None,
    ) -> TurnResult:
        history = await self._load_history(session_id)
        turn_count = sum(1 for m in history if m.role == "user") + 1

        user_msg = await self._save(session_id, "user", text)

        insights = extract_insights(text)
        recent = [*history, user_msg][-self.window_size :]
        context = await self.accumulator.update(
            session_id,
            insights,
            history=recent,
            industry=industry,
            company_size=company_size,
        )

        stage = get_conversation_stage(turn_count)
        logger.info("Session %s turn %d stage=%s", session_id, turn_count, stage)

        digest = None
        if ResearchGateway.should_research(stage, context, turn_count):
            digest = await self._research(context)

        system_prompt = build_system_prompt(context, stage, research_digest=digest)

        fallback = False
        try:
            raw_reply = await generate_reply(system_prompt, history, text)
        except Exception:
            logger.exception("Reply generation failed for session %s", session_id)
            raw_reply = None

        if raw_reply is None:
            fallback = True
            reply, suggestions, offer = FALLBACK_REPLY, list(FALLBACK_SUGGESTIONS), False
        else:
            parsed = parse_suggestions(raw_reply)
            reply, suggestions = parsed.content, parsed.suggestions
            offer = is_handoff_offer(reply)

        await self._save(session_id, "model", reply, suggestions)

        return TurnResult(
            reply=reply,
            suggestions=suggestions,
            is_offer=offer,
            stage=stage,
            context=context,
            insights=insights,
            knowledge_gaps=identify_knowledge_gaps(context),
            used_research=digest is not None,
            fallback=fallback,
        )

    async def _research(self, context: ConversationContext) -> str | None:
        query = ResearchGateway.build_query(context)
        try:
            result = await self.research.research(
                query, industry=context.industry, context="chat"
            )
        except Exception:
            logger.exception("Research failed for %r", query)
            return None
        return result.digest if result else None

    # -- Handoff ---------------------------------------------------------------

    async def respond_to_offer(self, session_id: str, accept: bool) -> OfferResponse:
        """Accepting opens the lead form; declining keeps the conversation going."""
        if accept:
            return OfferResponse(show_contact_form=True)
        message = await self._save(session_id, "model", DECLINE_MESSAGE)
        return OfferResponse(show_contact_form=False, message=message)

    async def submit_lead(self, session_id: str, lead: LeadSubmission) -> bool:
        """Record the lead and close the session.

        Best-effort: storage failures are logged and the caller is still
        told the submission went through.
        """
        try:
            messages = await self.store.list_messages(session_id)
            summary = "\n\n".join(f"{m.role}: {m.content}" for m in messages)
            await self.store.add_lead(session_id, lead, summary)
            await self.store.set_status(session_id, "submitted")
        except Exception:
            logger.exception("Lead submission failed for session %s", session_id)
        return True

    # -- Helpers ---------------------------------------------------------------

    async def _load_history(self, session_id: str) -> list[ChatMessage]:
        try:
            return await self.store.list_messages(session_id)
        except Exception:
            logger.exception("Failed to load history for session %s", session_id)
            return []

    async def _save(
        self,
        session_id: str,
        role: str,
        content: str,
        suggestions: list[str] | None = None,
    ) -> ChatMessage:
        """Persist a message; on failure log and return an unsaved copy."""
        try:
            return await self.store.append_message(session_id, role, content, suggestions)
        except Exception:
            logger.exception("Failed to save %s message for session %s", role, session_id)
            return ChatMessage(
                session_id=session_id, role=role, content=content, suggestions=suggestions or []
            )
