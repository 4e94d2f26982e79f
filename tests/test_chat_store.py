"""Tests for ChatStore — sessions, message log, context and leads."""

import pytest

from ideate.chat.models import ChatMessage, LeadSubmission
from ideate.chat.store import ChatStore
from ideate.context.models import ConversationContext

pytestmark = pytest.mark.usefixtures("_no_turso")


class TestSessions:
    async def test_create_session_is_active(self, chat_store: ChatStore):
        session_id = await chat_store.create_session()
        assert len(session_id) == 32
        assert await chat_store.get_status(session_id) == "active"

    async def test_unknown_session_has_no_status(self, chat_store: ChatStore):
        assert await chat_store.get_status("missing") is None

    async def test_set_status(self, chat_store: ChatStore):
        session_id = await chat_store.create_session()
        assert await chat_store.set_status(session_id, "submitted") is True
        assert await chat_store.get_status(session_id) == "submitted"

    async def test_set_status_unknown_session(self, chat_store: ChatStore):
        assert await chat_store.set_status("missing", "submitted") is False

    async def test_sessions_are_distinct(self, chat_store: ChatStore):
        first = await chat_store.create_session()
        second = await chat_store.create_session()
        assert first != second


class TestMessages:
    async def test_append_and_list_in_order(self, chat_store: ChatStore):
        session_id = await chat_store.create_session()
        await chat_store.append_message(session_id, "model", "Welcome", ["A", "B"])
        await chat_store.append_message(session_id, "user", "We run a shop")
        await chat_store.append_message(session_id, "model", "Tell me more")

        messages = await chat_store.list_messages(session_id)

        assert [m.content for m in messages] == ["Welcome", "We run a shop", "Tell me more"]
        assert [m.role for m in messages] == ["model", "user", "model"]
        assert messages[0].suggestions == ["A", "B"]
        assert messages[1].suggestions == []

    async def test_list_with_limit_returns_most_recent(self, chat_store: ChatStore):
        session_id = await chat_store.create_session()
        for i in range(5):
            await chat_store.append_message(session_id, "user", f"m{i}")

        recent = await chat_store.list_messages(session_id, limit=2)

        assert [m.content for m in recent] == ["m3", "m4"]

    async def test_messages_are_scoped_to_session(self, chat_store: ChatStore):
        first = await chat_store.create_session()
        second = await chat_store.create_session()
        await chat_store.append_message(first, "user", "retail")
        await chat_store.append_message(second, "user", "healthcare")

        assert [m.content for m in await chat_store.list_messages(first)] == ["retail"]
        assert [m.content for m in await chat_store.list_messages(second)] == ["healthcare"]

    async def test_returned_message_matches_stored(self, chat_store: ChatStore):
        session_id = await chat_store.create_session()
        saved = await chat_store.append_message(session_id, "user", "hello")

        [loaded] = await chat_store.list_messages(session_id)

        assert isinstance(saved, ChatMessage)
        assert loaded.id == saved.id
        assert loaded.created_at == saved.created_at


class TestContext:
    async def test_missing_context_is_none(self, chat_store: ChatStore):
        assert await chat_store.get_context("missing") is None

    async def test_put_and_get_context(self, chat_store: ChatStore):
        context = ConversationContext(
            industry="retail",
            company_size="small",
            pain_points=["manual data entry"],
            current_tools=["Excel"],
            timeline="3 months",
        )
        await chat_store.put_context("s1", context)

        assert await chat_store.get_context("s1") == context

    async def test_put_context_replaces(self, chat_store: ChatStore):
        await chat_store.put_context("s1", ConversationContext(industry="retail"))
        await chat_store.put_context(
            "s1", ConversationContext(industry="retail", pain_points=["forecasting errors"])
        )

        loaded = await chat_store.get_context("s1")
        assert loaded is not None
        assert loaded.pain_points == ["forecasting errors"]


class TestLeads:
    async def test_add_and_list_leads(self, chat_store: ChatStore):
        session_id = await chat_store.create_session()
        lead = LeadSubmission(name=" Ada ", email="ada@example.com", phone=" 555-0100 ")

        submission_id = await chat_store.add_lead(session_id, lead, "user: hi")

        [row] = await chat_store.list_leads(session_id)
        assert row["id"] == submission_id
        assert row["name"] == "Ada"
        assert row["email"] == "ada@example.com"
        assert row["phone"] == "555-0100"
        assert row["chat_summary"] == "user: hi"

    async def test_list_leads_empty(self, chat_store: ChatStore):
        assert await chat_store.list_leads("missing") == []
