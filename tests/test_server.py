"""Tests for the chat HTTP API."""

from unittest.mock import AsyncMock, patch

import pytest
from aiohttp.test_utils import TestClient, TestServer

from ideate.chat.pipeline import DECLINE_MESSAGE, WELCOME_MESSAGE, ChatPipeline
from ideate.chat.store import ChatStore
from ideate.server import ChatServer, create_web_app

pytestmark = pytest.mark.usefixtures("_no_turso")


# -- Helpers -----------------------------------------------------------------


@pytest.fixture
def pipeline(chat_store: ChatStore) -> ChatPipeline:
    research = AsyncMock()
    research.research.return_value = None
    return ChatPipeline(store=chat_store, research=research)


async def _make_client(pipeline: ChatPipeline) -> TestClient:
    """Create a TestClient for the chat app."""
    server = TestServer(create_web_app(pipeline))
    client = TestClient(server)
    await client.start_server()
    return client


async def _new_session(client: TestClient) -> str:
    resp = await client.post("/chat/sessions")
    data = await resp.json()
    return data["session_id"]


# -- Health and CORS ---------------------------------------------------------


async def test_health_check(pipeline: ChatPipeline) -> None:
    client = await _make_client(pipeline)
    try:
        resp = await client.get("/health")
        assert resp.status == 200
        assert (await resp.json())["status"] == "ok"
        assert resp.headers["Access-Control-Allow-Origin"] == "*"
    finally:
        await client.close()


async def test_preflight_returns_cors_headers(pipeline: ChatPipeline) -> None:
    client = await _make_client(pipeline)
    try:
        resp = await client.options("/chat/sessions")
        assert resp.status == 200
        assert await resp.text() == "ok"
        assert "POST" in resp.headers["Access-Control-Allow-Methods"]
        assert "content-type" in resp.headers["Access-Control-Allow-Headers"]
    finally:
        await client.close()


async def test_cors_origin_from_settings(pipeline: ChatPipeline, monkeypatch) -> None:
    monkeypatch.setattr("ideate.config.settings.cors_allow_origin", "https://example.com")
    client = await _make_client(pipeline)
    try:
        resp = await client.get("/health")
        assert resp.headers["Access-Control-Allow-Origin"] == "https://example.com"
    finally:
        await client.close()


# -- Sessions ----------------------------------------------------------------


async def test_create_session(pipeline: ChatPipeline) -> None:
    client = await _make_client(pipeline)
    try:
        resp = await client.post("/chat/sessions")
        assert resp.status == 201
        data = await resp.json()
        assert data["session_id"]
        assert data["messages"][0]["role"] == "model"
        assert data["messages"][0]["content"] == WELCOME_MESSAGE
        assert len(data["messages"][0]["suggestions"]) == 3
    finally:
        await client.close()


async def test_list_messages(pipeline: ChatPipeline) -> None:
    client = await _make_client(pipeline)
    try:
        session_id = await _new_session(client)
        resp = await client.get(f"/chat/sessions/{session_id}/messages")
        assert resp.status == 200
        data = await resp.json()
        assert data["session_id"] == session_id
        assert [m["content"] for m in data["messages"]] == [WELCOME_MESSAGE]
    finally:
        await client.close()


async def test_list_messages_unknown_session(pipeline: ChatPipeline) -> None:
    client = await _make_client(pipeline)
    try:
        resp = await client.get("/chat/sessions/missing/messages")
        assert resp.status == 404
        assert (await resp.json())["error"] == "unknown session"
    finally:
        await client.close()


# -- Messages ----------------------------------------------------------------


async def test_send_message(pipeline: ChatPipeline) -> None:
    reply = "OCR could help here.\n[SUGGESTIONS: Tell me more | Pricing?]"
    client = await _make_client(pipeline)
    try:
        session_id = await _new_session(client)
        with patch("ideate.chat.pipeline.generate_reply", AsyncMock(return_value=reply)):
            resp = await client.post(
                f"/chat/sessions/{session_id}/messages",
                json={"message": "We're a retail startup drowning in manual data entry"},
            )
        assert resp.status == 200
        data = await resp.json()
        assert data["reply"] == "OCR could help here."
        assert data["suggestions"] == ["Tell me more", "Pricing?"]
        assert data["stage"] == "discovery"
        assert data["is_offer"] is False
        assert data["context"]["industry"] == "retail"
        assert data["context"]["company_size"] == "small"
        assert data["insights"]["mentioned_pain_points"] == ["manual data entry"]
    finally:
        await client.close()


async def test_send_message_with_explicit_profile(pipeline: ChatPipeline) -> None:
    client = await _make_client(pipeline)
    try:
        session_id = await _new_session(client)
        with patch("ideate.chat.pipeline.generate_reply", AsyncMock(return_value="ok")):
            resp = await client.post(
                f"/chat/sessions/{session_id}/messages",
                json={"message": "hello", "industry": "logistics", "company_size": "medium"},
            )
        data = await resp.json()
        assert data["context"]["industry"] == "logistics"
        assert data["context"]["company_size"] == "medium"
    finally:
        await client.close()


@pytest.mark.parametrize(
    ("body", "error"),
    [
        ({"message": "   "}, "message is required"),
        ({}, "message is required"),
        ({"message": "hi", "company_size": "huge"}, "company_size"),
        ({"message": "hi", "industry": 5}, "industry must be a string"),
        ({"message": "hi", "industry": ["retail"]}, "industry must be a string"),
    ],
)
async def test_send_message_validation(pipeline: ChatPipeline, body: dict, error: str) -> None:
    client = await _make_client(pipeline)
    try:
        resp = await client.post("/chat/sessions/s1/messages", json=body)
        assert resp.status == 400
        assert error in (await resp.json())["error"]
    finally:
        await client.close()


async def test_send_message_non_string_industry_leaves_session_untouched(
    pipeline: ChatPipeline, chat_store: ChatStore
) -> None:
    client = await _make_client(pipeline)
    try:
        session_id = await _new_session(client)
        resp = await client.post(
            f"/chat/sessions/{session_id}/messages",
            json={"message": "hello", "industry": 5},
        )
        assert resp.status == 400
        assert [m.content for m in await chat_store.list_messages(session_id)] == [
            WELCOME_MESSAGE
        ]
    finally:
        await client.close()


async def test_send_message_unknown_session(
    pipeline: ChatPipeline, chat_store: ChatStore
) -> None:
    client = await _make_client(pipeline)
    try:
        with patch(
            "ideate.chat.pipeline.generate_reply", AsyncMock(return_value="ok")
        ) as mock_generate:
            resp = await client.post("/chat/sessions/nope/messages", json={"message": "hello"})
        assert resp.status == 404
        assert (await resp.json())["error"] == "unknown session"
        mock_generate.assert_not_awaited()
        assert await chat_store.list_messages("nope") == []
        assert pipeline._locks == {}

        resp = await client.get("/chat/sessions/nope/messages")
        assert resp.status == 404
    finally:
        await client.close()


@pytest.mark.parametrize(
    ("path", "body"),
    [
        ("offer", {"accept": False}),
        ("lead", {"name": "Ada", "email": "ada@example.com"}),
    ],
)
async def test_offer_and_lead_unknown_session(
    pipeline: ChatPipeline, chat_store: ChatStore, path: str, body: dict
) -> None:
    client = await _make_client(pipeline)
    try:
        resp = await client.post(f"/chat/sessions/nope/{path}", json=body)
        assert resp.status == 404
        assert await chat_store.list_messages("nope") == []
        assert await chat_store.list_leads("nope") == []
    finally:
        await client.close()


async def test_send_message_invalid_json(pipeline: ChatPipeline) -> None:
    client = await _make_client(pipeline)
    try:
        resp = await client.post(
            "/chat/sessions/s1/messages",
            data="not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status == 400
        assert (await resp.json())["error"] == "invalid JSON"
    finally:
        await client.close()


# -- Offer and lead ----------------------------------------------------------


async def test_accept_offer(pipeline: ChatPipeline) -> None:
    client = await _make_client(pipeline)
    try:
        session_id = await _new_session(client)
        resp = await client.post(f"/chat/sessions/{session_id}/offer", json={"accept": True})
        assert resp.status == 200
        assert await resp.json() == {"show_contact_form": True, "message": None}
    finally:
        await client.close()


async def test_decline_offer(pipeline: ChatPipeline) -> None:
    client = await _make_client(pipeline)
    try:
        session_id = await _new_session(client)
        resp = await client.post(f"/chat/sessions/{session_id}/offer", json={"accept": False})
        data = await resp.json()
        assert data["show_contact_form"] is False
        assert data["message"]["content"] == DECLINE_MESSAGE
    finally:
        await client.close()


async def test_offer_requires_boolean(pipeline: ChatPipeline) -> None:
    client = await _make_client(pipeline)
    try:
        resp = await client.post("/chat/sessions/s1/offer", json={"accept": "yes"})
        assert resp.status == 400
    finally:
        await client.close()


async def test_submit_lead(pipeline: ChatPipeline, chat_store: ChatStore) -> None:
    client = await _make_client(pipeline)
    try:
        session_id = await _new_session(client)
        resp = await client.post(
            f"/chat/sessions/{session_id}/lead",
            json={"name": "Ada", "email": "ada@example.com", "phone": "555-0100"},
        )
        assert resp.status == 200
        assert await resp.json() == {"ok": True}
        [row] = await chat_store.list_leads(session_id)
        assert row["email"] == "ada@example.com"
        assert await chat_store.get_status(session_id) == "submitted"
    finally:
        await client.close()


@pytest.mark.parametrize(
    "body",
    [{"name": "Ada"}, {"name": " ", "email": "ada@example.com"}, {"email": "ada@example.com"}],
)
async def test_submit_lead_requires_name_and_email(pipeline: ChatPipeline, body: dict) -> None:
    client = await _make_client(pipeline)
    try:
        resp = await client.post("/chat/sessions/s1/lead", json=body)
        assert resp.status == 400
        assert (await resp.json())["error"] == "name and email are required"
    finally:
        await client.close()


# -- Lifecycle ---------------------------------------------------------------


async def test_chat_server_start_stop(pipeline: ChatPipeline) -> None:
    server = ChatServer(pipeline, host="127.0.0.1", port=0)
    await server.start()
    assert server._runner is not None
    await server.stop()
    assert server._runner is None
